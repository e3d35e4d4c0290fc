"""Public interface for the Cloud Controller adapter."""

from __future__ import annotations

from .client import CloudControllerAPIError, CloudControllerClient
from .schema import CCErrorResponse, CCPage

__all__ = [
    "CCErrorResponse",
    "CCPage",
    "CloudControllerAPIError",
    "CloudControllerClient",
]
