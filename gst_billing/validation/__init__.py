"""Registration id validation package."""

from gst_billing.validation.registration import (
    InvalidRegistrationIdError,
    RegistrationIdError,
    is_valid_registration_id,
    parse_registration_id,
)

__all__ = [
    "InvalidRegistrationIdError",
    "RegistrationIdError",
    "is_valid_registration_id",
    "parse_registration_id",
]
