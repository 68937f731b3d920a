"""Pattern-based source review scanner."""

__version__ = "0.1.0"
