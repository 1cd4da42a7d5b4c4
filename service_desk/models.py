"""
Submission schemas and stored record models.

Submissions are validated from raw request payloads via ``from_payload``,
which raises SubmissionValidationError naming every missing/invalid field.
Records are what gets written to the JSON collections.
"""

import math
import uuid
from datetime import datetime, timezone
from typing import Annotated, Any, ClassVar, Dict, List, Mapping, Optional, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, PrivateAttr, ValidationError, model_validator

from .exceptions import SubmissionValidationError


def new_record_id() -> str:
    return str(uuid.uuid4())


def utc_timestamp() -> str:
    """ISO-8601 UTC timestamp with millisecond precision, e.g. 2024-05-01T10:00:00.000Z"""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def display_value(value: Any, default: str) -> str:
    """Render a submitted value for message text, falling back to ``default`` when empty."""
    if value is None or value is False or value == "" or value == 0:
        return default
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _required_text(value: Any) -> Any:
    if value is None or value is False or value == "":
        raise ValueError("field is required")
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        if value == 0 or (isinstance(value, float) and math.isnan(value)):
            raise ValueError("field is required")
        return display_value(value, "")
    if not isinstance(value, str):
        raise ValueError("field must be text")
    return value


def _positive_rating(value: Any) -> Union[int, float]:
    if isinstance(value, bool) or value is None:
        raise ValueError("rating must be a number")
    if not isinstance(value, (str, int, float)):
        raise ValueError("rating must be a number")
    try:
        number = float(value.strip() if isinstance(value, str) else value)
    except ValueError:
        raise ValueError("rating must be a number")
    except OverflowError:
        # integers beyond float range
        raise ValueError("rating must be greater than 0")
    if not math.isfinite(number) or number <= 0:
        raise ValueError("rating must be greater than 0")
    return int(number) if number.is_integer() else number


RequiredText = Annotated[str, BeforeValidator(_required_text)]
Rating = Annotated[Union[int, float], BeforeValidator(_positive_rating)]


# ---------------------------------------------------------------------------
# Submissions
# ---------------------------------------------------------------------------

class Submission(BaseModel):
    """Base class for form submissions."""

    kind: ClassVar[str] = ""
    error_message: ClassVar[str] = "Invalid submission."

    @classmethod
    def from_payload(cls, payload: Any):
        data = dict(payload) if isinstance(payload, Mapping) else {}
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            fields: List[str] = []
            for error in exc.errors():
                loc = error.get("loc") or ()
                name = str(loc[0]) if loc else "body"
                if name not in fields:
                    fields.append(name)
            raise SubmissionValidationError(
                fields, f"{cls.error_message} Missing or invalid: {', '.join(fields)}."
            ) from exc


class AppointmentSubmission(Submission):
    kind: ClassVar[str] = "appointment"
    error_message: ClassVar[str] = "All appointment fields are required."

    name: RequiredText
    phone: RequiredText
    address: RequiredText
    vehicle: RequiredText
    issue: RequiredText


class SparePart(BaseModel):
    """One line of a spare-parts request; keys are kept as submitted."""

    model_config = ConfigDict(extra="allow")

    name: Optional[Any] = None
    qty: Optional[Any] = None
    amount: Optional[Any] = None

    _submitted: Dict[str, Any] = PrivateAttr(default_factory=dict)

    @model_validator(mode="wrap")
    @classmethod
    def _keep_submitted(cls, data: Any, handler):
        part = handler(data)
        if isinstance(data, Mapping):
            part._submitted = dict(data)
        return part

    def as_submitted(self) -> Dict[str, Any]:
        return dict(self._submitted)

    def summary(self) -> str:
        return (
            f"{display_value(self.name, 'Part')} | Qty: {display_value(self.qty, '1')}"
            f" | Amount: {display_value(self.amount, '0')}"
        )


class SpareRequestSubmission(Submission):
    kind: ClassVar[str] = "spares"
    error_message: ClassVar[str] = "Customer details and at least one part are required."

    name: RequiredText
    phone: RequiredText
    address: RequiredText
    parts: List[SparePart] = Field(min_length=1)
    total: Optional[Any] = None

    def parts_summary(self) -> str:
        return " | ".join(part.summary() for part in self.parts)

    def total_display(self) -> str:
        return display_value(self.total, "0")


class FeedbackSubmission(Submission):
    kind: ClassVar[str] = "feedback"
    error_message: ClassVar[str] = "Name, message, and rating are required."

    name: RequiredText
    message: RequiredText
    rating: Rating


class ContactSubmission(Submission):
    kind: ClassVar[str] = "contact"
    error_message: ClassVar[str] = "All contact fields are required."

    name: RequiredText
    phone: RequiredText
    message: RequiredText


class LoginRequest(Submission):
    kind: ClassVar[str] = "login"
    error_message: ClassVar[str] = "Missing username or password."

    username: RequiredText
    password: RequiredText

    @classmethod
    def from_payload(cls, payload: Any):
        try:
            return super().from_payload(payload)
        except SubmissionValidationError as exc:
            raise SubmissionValidationError(exc.fields, cls.error_message) from exc


# ---------------------------------------------------------------------------
# Stored records
# ---------------------------------------------------------------------------

class StoredRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class CustomerRecord(StoredRecord):
    """Cross-type projection shown in the admin customer list."""

    id: str = Field(default_factory=new_record_id)
    type: str
    name: str
    phone: str
    address: str
    details: str
    created_at: str = Field(default_factory=utc_timestamp, alias="createdAt")

    def customer_record(self) -> "CustomerRecord":
        return CustomerRecord(**self.model_dump(include=set(CustomerRecord.model_fields)))


class AppointmentRecord(CustomerRecord):
    type: str = "Appointment"
    vehicle: str
    issue: str

    @classmethod
    def from_submission(cls, submission: AppointmentSubmission) -> "AppointmentRecord":
        return cls(
            name=submission.name,
            phone=submission.phone,
            address=submission.address,
            details=f"Vehicle: {submission.vehicle} | Issue: {submission.issue}",
            vehicle=submission.vehicle,
            issue=submission.issue,
        )


class SpareRequestRecord(CustomerRecord):
    type: str = "Spare Parts"
    parts: List[Dict[str, Any]]
    total: Optional[Any] = None

    @classmethod
    def from_submission(cls, submission: SpareRequestSubmission) -> "SpareRequestRecord":
        return cls(
            name=submission.name,
            phone=submission.phone,
            address=submission.address,
            details=f"{submission.parts_summary()} | Total: {submission.total_display()}",
            parts=[part.as_submitted() for part in submission.parts],
            total=submission.total,
        )

    def to_document(self) -> Dict[str, Any]:
        document = super().to_document()
        if document.get("total") is None:
            document.pop("total", None)
        return document


class FeedbackRecord(StoredRecord):
    id: str = Field(default_factory=new_record_id)
    name: str
    message: str
    rating: Union[int, float]
    created_at: str = Field(default_factory=utc_timestamp, alias="createdAt")


class ContactRecord(StoredRecord):
    id: str = Field(default_factory=new_record_id)
    name: str
    phone: str
    message: str
    created_at: str = Field(default_factory=utc_timestamp, alias="createdAt")
