"""
Form submission intake.

Each submission is validated, written to its own collection (appointments and
spare-parts requests also get a customer record), and then triggers a
best-effort SMS to the customer and the admin.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import BackgroundTasks

from ..adapters.sms import SMSAdapter
from ..config import Settings
from ..models import (
    AppointmentRecord,
    AppointmentSubmission,
    ContactRecord,
    ContactSubmission,
    FeedbackRecord,
    FeedbackSubmission,
    SpareRequestRecord,
    SpareRequestSubmission,
)
from ..services.store import APPOINTMENTS, CONTACTS, CUSTOMER_RECORDS, FEEDBACK, SPARES, JsonStore

logger = logging.getLogger(__name__)


class SubmissionService:
    def __init__(self, store: JsonStore, sms: SMSAdapter, settings: Settings):
        self.store = store
        self.sms = sms
        self.settings = settings

    async def _notify(
        self,
        customer_phone: str,
        body: str,
        context: str,
        background: Optional[BackgroundTasks] = None,
    ) -> None:
        """Run the notification after the response when ``background`` is given, inline otherwise."""
        admin_phone = self.settings.ADMIN_PHONE
        if background is not None:
            background.add_task(self.sms.notify_safely, customer_phone, admin_phone, body, context)
        else:
            await self.sms.notify_safely(customer_phone, admin_phone, body, context)

    async def create_appointment(
        self, payload: Any, background: Optional[BackgroundTasks] = None
    ) -> Dict[str, Any]:
        submission = AppointmentSubmission.from_payload(payload)
        record = AppointmentRecord.from_submission(submission)

        await self.store.append(APPOINTMENTS, record.to_document())
        await self.store.append(CUSTOMER_RECORDS, record.customer_record().to_document())
        logger.info(
            f"📅 Appointment {record.id} booked for {record.name}",
            extra={"collection": APPOINTMENTS, "record_id": record.id},
        )

        await self._notify(
            submission.phone,
            f"Hi {submission.name}, your appointment is confirmed. "
            f"Vehicle: {submission.vehicle}. Issue: {submission.issue}.",
            "Appointment",
            background,
        )
        return record.to_document()

    async def create_spare_request(
        self, payload: Any, background: Optional[BackgroundTasks] = None
    ) -> Dict[str, Any]:
        submission = SpareRequestSubmission.from_payload(payload)
        record = SpareRequestRecord.from_submission(submission)

        await self.store.append(SPARES, record.to_document())
        await self.store.append(CUSTOMER_RECORDS, record.customer_record().to_document())
        logger.info(
            f"🔩 Spare parts request {record.id} received from {record.name} ({len(record.parts)} items)",
            extra={"collection": SPARES, "record_id": record.id},
        )

        await self._notify(
            submission.phone,
            f"Hi {submission.name}, your spare parts request was received. "
            f"Items: {submission.parts_summary()}. Total: {submission.total_display()}.",
            "Spare parts",
            background,
        )
        return record.to_document()

    async def create_feedback(self, payload: Any) -> Dict[str, Any]:
        submission = FeedbackSubmission.from_payload(payload)
        record = FeedbackRecord(name=submission.name, message=submission.message, rating=submission.rating)
        await self.store.append(FEEDBACK, record.to_document())
        logger.info(
            f"⭐ Feedback {record.id} stored (rating {record.rating})",
            extra={"collection": FEEDBACK, "record_id": record.id},
        )
        return record.to_document()

    async def create_contact(self, payload: Any) -> Dict[str, Any]:
        submission = ContactSubmission.from_payload(payload)
        record = ContactRecord(name=submission.name, phone=submission.phone, message=submission.message)
        await self.store.append(CONTACTS, record.to_document())
        logger.info(
            f"✉️ Contact message {record.id} stored from {record.name}",
            extra={"collection": CONTACTS, "record_id": record.id},
        )
        return record.to_document()
