"""Document import and device-aware pagination."""

__version__ = "0.1.0"
