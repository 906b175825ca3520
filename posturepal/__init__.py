"""PosturePal - posture tracking backend and client."""

__version__ = "1.0.0"
