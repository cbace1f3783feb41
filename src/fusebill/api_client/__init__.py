"""
Fusebill API Client.

Provides:
- Session-cookie login for the private API
- Token-authenticated requests for the public API
- Invoice outstanding balance lookup
- Invoice write-off

Every failure raises a FusebillError subclass; nothing is retried.
"""

from .client import (
    Credentials,
    FusebillAPIError,
    FusebillAuthenticationError,
    FusebillClient,
    FusebillConnectionError,
    FusebillDecodeError,
    FusebillError,
    FusebillResponse,
    FusebillValidationError,
    Invoice,
    WriteOff,
    validate_write_off,
)

__all__ = [
    "FusebillClient",
    "Credentials",
    "FusebillResponse",
    "Invoice",
    "WriteOff",
    "validate_write_off",
    "FusebillError",
    "FusebillAPIError",
    "FusebillAuthenticationError",
    "FusebillConnectionError",
    "FusebillDecodeError",
    "FusebillValidationError",
]
