"""Process platform: user-defined workflow templates, dynamic forms and order execution."""

__version__ = "0.1.0"
