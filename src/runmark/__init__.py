"""runmark: inline markdown to styled text runs."""

__version__ = "0.1.0"
