"""HTML document building."""
