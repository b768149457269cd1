"""ACP CLI - search the agent marketplace and manage local agent identities."""

__version__ = "0.1.0"
