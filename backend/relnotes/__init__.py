"""Release notes generator — assembles a release's HTML notes from its summary, bug list and per-issue notes."""

__version__ = "1.0.0"
