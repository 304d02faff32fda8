"""Exception types shared across the store, synchronizer and HTTP layers."""
from typing import Optional


class StoreError(OSError):
    """A durable read or write against the backing store failed."""

    def __init__(self, message: str, collection: Optional[str] = None):
        super().__init__(message)
        self.collection = collection


class ValidationError(ValueError):
    """Administrative input was rejected before any state changed."""


class AuthError(Exception):
    """Login or checkout refused; the message is meant for the end user."""


class NotReadyError(RuntimeError):
    """A mutation was attempted before the initial load finished."""
