"""Tournament scoring and season standings engine for a fantasy golf league."""

__version__ = "1.0.0"
