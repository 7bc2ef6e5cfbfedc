"""Build planner for native library packages."""

__version__ = "0.1.0"
