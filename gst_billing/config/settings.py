"""
Configuration Management for GST Billing

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: Tax rates, the bill number prefix and the jurisdiction code
are configuration, not constants. A rate change is an environment change,
not a code change at every call site.
"""

from decimal import Decimal
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class BillingSettings(BaseSettings):
    """
    Billing calculation settings.

    Loads configuration from GST_BILLING_* environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="GST_BILLING_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Tax rates (two equal components, 18% combined)
    cgst_rate: Decimal = Field(
        default=Decimal("0.09"),
        ge=0,
        le=1,
        description="Central GST rate (component A)"
    )
    sgst_rate: Decimal = Field(
        default=Decimal("0.09"),
        ge=0,
        le=1,
        description="State GST rate (component B)"
    )

    # Bill numbering
    document_prefix: str = Field(
        default="INV",
        max_length=10,
        description="Literal prefix of generated bill numbers"
    )
    max_number_attempts: int = Field(
        default=5,
        ge=1,
        le=100,
        description="How many bill numbers to try before giving up on a collision"
    )

    # Registration id validation
    jurisdiction_code: str = Field(
        default="29",
        description="Two digit state code accepted by the GSTIN validator"
    )

    @field_validator('jurisdiction_code')
    @classmethod
    def validate_jurisdiction_code(cls, v: str) -> str:
        """State codes are exactly two ASCII digits."""
        if len(v) != 2 or not (v.isascii() and v.isdigit()):
            raise ValueError(f"Jurisdiction code must be two digits, got {v!r}")
        return v

    @property
    def combined_rate(self) -> Decimal:
        """Total GST rate across both components."""
        return self.cgst_rate + self.sgst_rate


@lru_cache()
def get_settings() -> BillingSettings:
    """
    Get billing settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return BillingSettings()
