"""Core Stand App client components."""

from .client import StandAppClient, create_client

__all__ = ["StandAppClient", "create_client"]
