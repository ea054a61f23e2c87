"""SNTP client with blocking and asyncio APIs, packet codec and result types."""

__version__ = "4.0.0"
__all__ = ["addresses", "client", "errors", "exchange", "packet", "result"]