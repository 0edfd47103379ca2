"""glt: a daily work session log driven by chat commands."""

__version__ = "0.1.0"
