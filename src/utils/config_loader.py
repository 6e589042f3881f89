"""
Configuration loader for the M-Pesa payment service
"""

import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError
import logging

logger = logging.getLogger(__name__)

DARAJA_BASE_URLS = {
    "sandbox": "https://sandbox.safaricom.co.ke",
    "production": "https://api.safaricom.co.ke",
}

# env var -> config field
_ENV_FIELDS = {
    "CONSUMER_KEY": "consumer_key",
    "CONSUMER_SECRET": "consumer_secret",
    "SHORTCODE": "shortcode",
    "PASSKEY": "passkey",
    "CALLBACK_URL": "callback_url",
    "DARAJA_ENV": "environment",
    "DARAJA_BASE_URL": "base_url",
    "TRANSACTION_TYPE": "transaction_type",
    "PARTY_B": "party_b",
    "RECIPIENT_PHONE": "recipient_phone",
    "ACCOUNT_REFERENCE": "account_reference",
    "TRANSACTION_DESC": "default_description",
    "GATEWAY_TIMEOUT_SECONDS": "timeout_seconds",
    "PAYMENT_RECORD_TTL_SECONDS": "record_ttl_seconds",
    "INTEGRATIONS_MODE": "integrations_mode",
}


class PaymentsConfig(BaseModel):
    """Daraja credentials and merchant identity"""

    consumer_key: str = ""
    consumer_secret: str = ""
    shortcode: str = ""
    passkey: str = ""
    callback_url: str = ""
    environment: str = Field(default="production", pattern="^(sandbox|production)$")
    base_url: Optional[str] = None
    # CustomerBuyGoodsOnline for till numbers, CustomerPayBillOnline for paybills
    transaction_type: str = "CustomerBuyGoodsOnline"
    party_b: Optional[str] = None
    recipient_phone: str = "254711765392"
    account_reference: str = "DominicOyagi"
    default_description: str = "Dominic Oyagi - Mathare Hospital Fund"
    timeout_seconds: float = Field(default=20.0, gt=0)
    record_ttl_seconds: Optional[int] = Field(default=None, ge=1)
    integrations_mode: str = ""

    @property
    def daraja_base_url(self) -> str:
        return (self.base_url or DARAJA_BASE_URLS[self.environment]).rstrip("/")

    @property
    def destination(self) -> str:
        """Receiving merchant account (PartyB)."""
        return self.party_b or self.shortcode

    @property
    def has_credentials(self) -> bool:
        return bool(self.consumer_key and self.consumer_secret and self.shortcode and self.passkey)

    def use_real_gateway(self) -> bool:
        mode = self.integrations_mode.strip().lower()
        if mode in {"real", "live"}:
            return True
        if mode in {"mock", "test"}:
            return False
        return self.has_credentials


def _read_env() -> Dict[str, Any]:
    values: Dict[str, Any] = {}
    for env_name, field_name in _ENV_FIELDS.items():
        raw = os.getenv(env_name)
        if raw is not None and raw.strip():
            values[field_name] = raw.strip()
    return values


def load_payments_config(config_path: Optional[Path] = None) -> PaymentsConfig:
    """
    Load and validate payment configuration

    YAML values (if a file is given or PAYMENTS_CONFIG_PATH is set) are
    overridden by environment variables, which are read after loading .env.

    Raises:
        FileNotFoundError: If an explicit config file doesn't exist
        ValidationError: If config doesn't match schema
    """
    load_dotenv()

    if config_path is None and os.getenv("PAYMENTS_CONFIG_PATH"):
        config_path = Path(os.environ["PAYMENTS_CONFIG_PATH"])

    config_data: Dict[str, Any] = {}
    if config_path is not None:
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        with open(config_path, "r", encoding="utf-8") as f:
            config_data = yaml.safe_load(f) or {}

    config_data.update(_read_env())

    try:
        config = PaymentsConfig(**config_data)
        logger.info("Loaded payments config (environment=%s)", config.environment)
        return config
    except ValidationError as e:
        logger.error(f"Config validation failed: {e}")
        raise
