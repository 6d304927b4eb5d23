"""
Bill Number Generator

Bill numbers look like INV24100042:
- INV: configured prefix
- 24: two digit year
- 10: two digit month
- 0042: random, 0000 to 9999

CRITICAL: Generated numbers are NOT unique. Two bills in the same month
collide with probability 1 in 10,000 per pair. Callers that need unique
numbers must either check for collisions at the persistence boundary
(allocate_document_number does exactly that, with retries) or enforce a
uniqueness constraint in storage.

The clock and the random source are parameters so tests can pin both.
"""

import random
from datetime import datetime
from typing import Callable, Optional
from uuid import UUID

import structlog
from tenacity import RetryError, Retrying, retry_if_exception_type, stop_after_attempt

from gst_billing.audit import AuditLogger
from gst_billing.config import get_settings


logger = structlog.get_logger(__name__)

SUFFIX_SPACE = 10000

_default_rng = random.Random()


class NumberingError(Exception):
    """Base exception for bill numbering errors."""
    pass


class DocumentNumberCollisionError(NumberingError):
    """A generated bill number is already in use. Retried internally."""

    def __init__(self, candidate: str, attempt: int):
        self.candidate = candidate
        self.attempt = attempt
        super().__init__(f"Bill number {candidate} is already taken (attempt {attempt})")

    def __reduce__(self):
        return (type(self), (self.candidate, self.attempt))


class DocumentNumberExhaustedError(NumberingError):
    """Every attempt produced a bill number that was already taken."""

    def __init__(self, attempts: int, last_candidate: Optional[str]):
        self.attempts = attempts
        self.last_candidate = last_candidate
        super().__init__(
            f"Could not find a free bill number after {attempts} attempts "
            f"(last tried: {last_candidate})"
        )

    def __reduce__(self):
        return (type(self), (self.attempts, self.last_candidate))


def generate_document_number(
    now: Optional[datetime] = None,
    prefix: Optional[str] = None,
    rng: Optional[random.Random] = None,
) -> str:
    """
    Generate a bill number: prefix + YY + MM + 4 random digits.

    Args:
        now: Timestamp the year and month come from. Defaults to now.
        prefix: Literal prefix. Defaults to the configured one ("INV").
        rng: Random source with randrange(). Defaults to a module-level Random.

    Returns:
        A string of length len(prefix) + 8
    """
    now = now or datetime.now()
    if prefix is None:
        prefix = get_settings().document_prefix
    rng = rng or _default_rng

    suffix = rng.randrange(SUFFIX_SPACE)
    return f"{prefix}{now:%y%m}{suffix:04d}"


def allocate_document_number(
    is_taken: Callable[[str], bool],
    now: Optional[datetime] = None,
    prefix: Optional[str] = None,
    rng: Optional[random.Random] = None,
    max_attempts: Optional[int] = None,
    audit_logger: Optional[AuditLogger] = None,
    correlation_id: Optional[UUID] = None,
) -> str:
    """
    Generate a bill number that the caller's store does not already hold.

    Args:
        is_taken: Returns True if a bill with this number already exists.
            Errors it raises are not retried.
        max_attempts: Give up after this many collisions.
            Defaults to the configured max_number_attempts.

    Returns:
        A bill number for which is_taken() returned False

    Raises:
        DocumentNumberExhaustedError: If every attempt collided
    """
    if max_attempts is None:
        max_attempts = get_settings().max_number_attempts
    if max_attempts < 1:
        raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")

    # Pin the clock so every attempt lands in the same month
    now = now or datetime.now()
    candidate: Optional[str] = None

    try:
        for attempt in Retrying(
            stop=stop_after_attempt(max_attempts),
            retry=retry_if_exception_type(DocumentNumberCollisionError),
        ):
            with attempt:
                attempt_number = attempt.retry_state.attempt_number
                candidate = generate_document_number(now=now, prefix=prefix, rng=rng)
                if is_taken(candidate):
                    logger.warning(
                        "bill_number_collision",
                        bill_number=candidate,
                        attempt=attempt_number,
                    )
                    if audit_logger:
                        audit_logger.log_bill_number_collision(
                            bill_number=candidate,
                            attempt=attempt_number,
                            correlation_id=correlation_id,
                        )
                    raise DocumentNumberCollisionError(candidate, attempt_number)
    except RetryError as e:
        if audit_logger:
            audit_logger.log_bill_number_exhausted(
                attempts=max_attempts,
                last_candidate=candidate,
                correlation_id=correlation_id,
            )
        raise DocumentNumberExhaustedError(max_attempts, candidate) from e

    if audit_logger:
        audit_logger.log_bill_number_generated(
            bill_number=candidate,
            attempts=attempt_number,
            correlation_id=correlation_id,
        )
    return candidate
