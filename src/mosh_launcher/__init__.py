"""Bootstrap launcher for mosh sessions negotiated over ssh."""

__version__ = "0.1.0"
