"""Backend availability probing and activity tracking for the GCSE AI Marker."""

__version__ = "0.1.0"
