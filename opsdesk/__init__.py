"""OpsDesk — incident and ticket record engine for a command-center view."""

__version__ = "0.1.0"
