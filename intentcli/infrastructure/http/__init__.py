"""HTTP transport adapters used by the request core."""
