"""Team task tracker: REST API over tasks and user accounts."""

__version__ = "0.1.0"
