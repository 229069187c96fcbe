"""Command-line front end for nimsforest workspaces."""

__version__ = "0.1.0"
