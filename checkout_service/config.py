"""
config.py — Environment Configuration for the Checkout Service

All runtime settings are read once from environment variables at import time.
Defaults are suitable for a local run against the mock payment gateway.
"""

import os

# Datenbank (SQLAlchemy URL)
DATABASE_URL = os.environ.get("DATABASE_URL", "sqlite:///./storefront.db")

# Payment Gateway (gehostet, REST)
PAYMENT_GATEWAY_URL = os.environ.get("PAYMENT_GATEWAY_URL", "http://payment_gateway:8001")
PAYMENT_GATEWAY_MERCHANT_ID = os.environ.get("PAYMENT_GATEWAY_MERCHANT_ID", "sandbox-merchant")
PAYMENT_GATEWAY_PUBLIC_KEY = os.environ.get("PAYMENT_GATEWAY_PUBLIC_KEY", "sandbox-public")
PAYMENT_GATEWAY_PRIVATE_KEY = os.environ.get("PAYMENT_GATEWAY_PRIVATE_KEY", "sandbox-private")

CHECKOUT_CURRENCY = os.environ.get("CHECKOUT_CURRENCY", "USD")

LOG_FILE = os.environ.get("LOG_FILE", "checkout.log")
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
