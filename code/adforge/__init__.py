"""AdForge async client: backend API access, job polling and client state."""

__version__ = "0.3.0"
