"""
Customer record queries and admin login.

Login is a single credential check: no session or token is issued.
"""

import logging
import secrets
from typing import Any, Dict, List

from ..config import Settings
from ..exceptions import AuthenticationError, RecordNotFoundError
from ..models import LoginRequest
from ..services.store import CUSTOMER_RECORDS, FEEDBACK, JsonStore

logger = logging.getLogger(__name__)


class RecordsService:
    def __init__(self, store: JsonStore, settings: Settings):
        self.store = store
        self.settings = settings

    def login(self, payload: Any) -> None:
        """Raise unless ``payload`` carries the configured admin username and password."""
        request = LoginRequest.from_payload(payload)
        user_ok = secrets.compare_digest(request.username.encode(), self.settings.ADMIN_USER.encode())
        pass_ok = secrets.compare_digest(request.password.encode(), self.settings.ADMIN_PASS.encode())
        if not (user_ok and pass_ok):
            logger.warning(f"🚫 Failed admin login for {request.username!r}")
            raise AuthenticationError("Invalid credentials.")
        logger.info("✅ Admin login succeeded")

    async def list_feedback(self) -> List[Dict[str, Any]]:
        return await self.store.load(FEEDBACK)

    async def list_customer_records(self) -> List[Dict[str, Any]]:
        return await self.store.load(CUSTOMER_RECORDS)

    async def delete_customer_record(self, record_id: str) -> None:
        removed = await self.store.remove(CUSTOMER_RECORDS, record_id)
        if not removed:
            logger.info(f"Customer record {record_id} not found")
            raise RecordNotFoundError("Record not found.")
        logger.info(f"🗑️ Customer record {record_id} deleted")
