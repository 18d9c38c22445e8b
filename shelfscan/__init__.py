"""shelfscan: grocery receipt OCR parser."""

__version__ = "0.1.0"
