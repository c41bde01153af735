"""BuildIt! - distributed package build coordination server."""

__version__ = "0.1.0"
