"""
Adapters for external providers.

This module contains:
- Twilio SMS notifications (customer + admin)
"""

from .sms import SMSAdapter, is_valid_phone, normalize_phone

__all__ = ["SMSAdapter", "is_valid_phone", "normalize_phone"]
