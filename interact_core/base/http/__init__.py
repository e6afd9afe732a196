"""HTTP helpers shared by backend clients."""

from .client import create_async_client

__all__ = ["create_async_client"]
