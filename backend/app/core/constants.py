"""Application-wide constants for the Phoenix Crackers booking backend."""

from __future__ import annotations

BRAND_NAME = "Phoenix Crackers"
API_VERSION = "0.1.0"
ISSUER_ADDRESS = "Phoenix Crackers, Anil kumar Eye Hospital Opp, Sattur Road, Sivakasi"
ISSUER_PHONE = "+91 63836 59214"
ISSUER_EMAIL = "nivasramasamy27@gmail.com"

# Walk-in bookings are always recorded against this customer type
DEFAULT_CUSTOMER_TYPE = "User"
DEFAULT_COUNTRY_CODE = "91"

# Caller-supplied order ids and invoice references
ORDER_ID_PATTERN = r"[A-Za-z0-9_-]+"
INVOICE_SUFFIX = ".pdf"

# Query limits
DEFAULT_QUERY_LIMIT = 100

# API metadata
API_TITLE = f"{BRAND_NAME} Bookings API"
API_DESCRIPTION = "Bookings, invoices and fulfilment tracking for the retail catalog"

# CORS
ALLOWED_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:5173",
]
