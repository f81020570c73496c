"""PR Neko: track GitHub pull requests in actionable queues."""

__version__ = "0.1.0"
