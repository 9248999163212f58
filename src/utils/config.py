# application settings, read once from the environment
import os
from decimal import Decimal

STORAGE_PATH = os.getenv("QUOTEDESK_STORAGE", "data/storage.sqlite")
STORAGE_NAMESPACE = "quotedesk"
EXPORT_DIR = os.getenv("QUOTEDESK_EXPORT_DIR", "exports")
LOG_FILE = os.getenv("QUOTEDESK_LOG_FILE")

# two supported profiles: flat 15% VAT, or no VAT at all
VAT_PROFILES = {
    "standard": Decimal("0.15"),
    "exempt": Decimal("0"),
}
VAT_PROFILE = os.getenv("QUOTEDESK_VAT_PROFILE", "standard")
if VAT_PROFILE not in VAT_PROFILES:
    raise RuntimeError(
        f"Unknown VAT profile {VAT_PROFILE!r}, expected one of {sorted(VAT_PROFILES)}"
    )
VAT_RATE = VAT_PROFILES[VAT_PROFILE]

COMPANY_NAME = os.getenv("QUOTEDESK_COMPANY", "Archemics Ltd.")
COMPANY_ADDRESS_LINES = ("123 Business Avenue", "Business City, 12345")
COMPANY_PHONE = os.getenv("QUOTEDESK_COMPANY_PHONE", "(123) 456-7890")
COMPANY_EMAIL = os.getenv("QUOTEDESK_COMPANY_EMAIL", "sales@archemics.com")

QUOTATION_VALIDITY_DAYS = 30
