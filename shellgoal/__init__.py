"""Goal-driven shell automation against a remote Linux sandbox."""

__version__ = "0.1.0"
