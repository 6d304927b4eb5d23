"""Configuration package."""

from gst_billing.config.settings import BillingSettings, get_settings

__all__ = [
    "BillingSettings",
    "get_settings",
]
