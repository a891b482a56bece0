"""Release notes pipeline steps."""
