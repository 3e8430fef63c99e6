"""Profile Comparison Viewer: two-way comparison of permission profiles."""

__version__ = "0.1.0"
