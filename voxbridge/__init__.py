"""VoxBridge: record speech, translate it, and hear it back in another language."""

__version__ = "0.1.0"
