import asyncio
import logging
import re
from functools import partial
from typing import Any, Optional

from twilio.rest import Client

from ..config import Settings
from ..exceptions import NotificationError

logger = logging.getLogger(__name__)

PHONE_PATTERN = re.compile(r"^\+\d{10,15}$")
ADMIN_PREFIX = "[ADMIN]"


def normalize_phone(number: str, default_country_code: str = "+91") -> str:
    """Return ``number`` in +<digits> form; numbers already starting with + are left alone."""
    number = str(number)
    if number.startswith("+"):
        return number
    digits = re.sub(r"[^0-9]", "", number)
    return f"{default_country_code}{digits}"


def is_valid_phone(number: str) -> bool:
    return bool(PHONE_PATTERN.match(number))


class SMSAdapter:
    def __init__(self, settings: Settings, client: Optional[Any] = None):
        self.from_number = settings.TWILIO_PHONE
        self.default_country_code = settings.DEFAULT_COUNTRY_CODE
        self._account_sid = settings.TWILIO_SID
        self._auth_token = settings.TWILIO_AUTH
        self._client = client

        self.enabled = settings.sms_configured
        if not self.enabled:
            logger.warning("Twilio not configured - SMS notifications disabled")

    @property
    def client(self):
        if self._client is None:
            self._client = Client(self._account_sid, self._auth_token)
        return self._client

    async def send_sms(self, to: str, body: str) -> Optional[str]:
        """Send one SMS. Returns the message SID, or None when the send was skipped."""
        if not self.enabled:
            logger.warning("SMS service not configured. Skipping SMS.")
            return None

        to_number = normalize_phone(to, self.default_country_code)
        if not is_valid_phone(to_number):
            logger.warning(f"Invalid phone number \"{to_number}\". Skipping SMS.")
            return None

        create = partial(self.client.messages.create, from_=self.from_number, to=to_number, body=body)
        loop = asyncio.get_running_loop()
        message = await loop.run_in_executor(None, create)
        logger.info(f"✅ SMS sent successfully to {to_number}: {getattr(message, 'sid', None)}")
        return getattr(message, "sid", None)

    async def notify_both(self, customer_phone: Optional[str], admin_phone: Optional[str], body: str) -> None:
        """Send ``body`` to the customer and an [ADMIN]-tagged copy to the admin, concurrently."""
        sms_tasks = []
        if customer_phone:
            sms_tasks.append(self.send_sms(customer_phone, body))
        if admin_phone:
            sms_tasks.append(self.send_sms(admin_phone, f"{ADMIN_PREFIX} {body}"))

        if not sms_tasks:
            logger.warning("SMS recipients are not configured. Skipping notifications.")
            return

        results = await asyncio.gather(*sms_tasks, return_exceptions=True)
        errors = [result for result in results if isinstance(result, BaseException)]
        if errors:
            for error in errors:
                logger.error(f"❌ SMS send failed: {error}")
            raise NotificationError(f"{len(errors)} of {len(sms_tasks)} SMS sends failed", errors)

    async def notify_safely(
        self,
        customer_phone: Optional[str],
        admin_phone: Optional[str],
        body: str,
        context: str = "SMS",
    ) -> None:
        """Best-effort wrapper around notify_both; failures are logged and never raised."""
        try:
            await self.notify_both(customer_phone, admin_phone, body)
        except Exception as e:
            logger.warning(f"{context} notification failed: {e}")
