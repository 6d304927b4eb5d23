"""
GSTIN Validation

GSTIN format: 29ABCDE1234F1Z5
- 29: state code (fixed per deployment, Karnataka by default)
- ABCDE1234F: PAN (5 letters, 4 digits, 1 letter)
- 1: entity number (1-9 or A-Z)
- Z: default character for all taxpayers
- 5: check character (0-9 or A-Z)

IMPORTANT: This is a structural check only. The check character is NOT
verified arithmetically, and lowercase input is NOT uppercased first.
"29abcde1234f1z5" is rejected.

is_valid_registration_id never raises, whatever it is given.
parse_registration_id raises for callers that want the segments.
"""

import re
from functools import lru_cache
from typing import Any, Optional

import structlog

from gst_billing.config import get_settings
from gst_billing.models.billing import RegistrationId


logger = structlog.get_logger(__name__)

REGISTRATION_ID_LENGTH = 15


class RegistrationIdError(ValueError):
    """Base exception for registration id errors."""
    pass


class InvalidRegistrationIdError(RegistrationIdError):
    """The candidate does not match the GSTIN format."""

    def __init__(self, candidate: Any):
        self.candidate = candidate
        super().__init__(f"Invalid GSTIN: {candidate!r}")

    def __reduce__(self):
        return (type(self), (self.candidate,))


@lru_cache(maxsize=8)
def _pattern(jurisdiction_code: str) -> re.Pattern:
    return re.compile(
        rf"(?P<state_code>{re.escape(jurisdiction_code)})"
        r"(?P<pan>[A-Z]{5}[0-9]{4}[A-Z])"
        r"(?P<entity_number>[1-9A-Z])"
        r"(?P<default_char>Z)"
        r"(?P<check_char>[0-9A-Z])"
    )


def _match(candidate: Any, jurisdiction_code: Optional[str]) -> Optional[re.Match]:
    if not isinstance(candidate, str) or len(candidate) != REGISTRATION_ID_LENGTH:
        return None
    code = jurisdiction_code or get_settings().jurisdiction_code
    # fullmatch: "$" would accept a trailing newline
    return _pattern(code).fullmatch(candidate)


def is_valid_registration_id(
    candidate: Any,
    jurisdiction_code: Optional[str] = None,
) -> bool:
    """
    Check a GSTIN against the positional format.

    Args:
        candidate: Anything. Non-strings, None and "" are simply invalid.
        jurisdiction_code: Required two digit state code.
            Defaults to the configured one ("29").

    Returns:
        True if the candidate is a structurally valid GSTIN
    """
    try:
        return _match(candidate, jurisdiction_code) is not None
    except Exception as e:
        # Misconfiguration must not turn a validation into a crash
        logger.error("registration_id_check_failed", error=str(e))
        return False


def parse_registration_id(
    candidate: Any,
    jurisdiction_code: Optional[str] = None,
) -> RegistrationId:
    """
    Split a valid GSTIN into its segments.

    Raises:
        InvalidRegistrationIdError: If the candidate is not a valid GSTIN
    """
    match = _match(candidate, jurisdiction_code)
    if match is None:
        raise InvalidRegistrationIdError(candidate)
    return RegistrationId(**match.groupdict())
