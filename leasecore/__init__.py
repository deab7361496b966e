"""Commercial lease extraction, verification and analytics."""

__version__ = "0.1.0"
