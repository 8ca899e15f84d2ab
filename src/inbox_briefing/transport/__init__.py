"""Transport adapters for external mailbox providers."""

from .gmail_client import GmailClient

__all__ = ["GmailClient"]
