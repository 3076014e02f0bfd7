"""Infrastructure shared by vendor clients."""

from .http import HttpClient, HttpError, Signer

__all__ = ["HttpClient", "HttpError", "Signer"]
