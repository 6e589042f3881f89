"""
Utility modules for the payment service
"""
from .config_loader import PaymentsConfig, load_payments_config

__all__ = [
    'PaymentsConfig',
    'load_payments_config',
]
