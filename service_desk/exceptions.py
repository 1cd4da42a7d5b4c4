"""
Service Desk Exceptions

Error taxonomy for request handling. Every ServiceDeskError carries the HTTP
status it maps to; the web layer renders it as {"ok": false, "message": ...}.
"""

from typing import List, Optional, Sequence


class ServiceDeskError(Exception):
    """Base exception for errors surfaced to the caller"""

    status_code: int = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class SubmissionValidationError(ServiceDeskError):
    """Missing or malformed client input; nothing was written"""

    status_code = 400

    def __init__(self, fields: Sequence[str], message: Optional[str] = None):
        self.fields: List[str] = list(fields)
        if message is None:
            message = f"Missing or invalid fields: {', '.join(self.fields)}."
        super().__init__(message)


class AuthenticationError(ServiceDeskError):
    """Admin credentials did not match"""

    status_code = 401


class RecordNotFoundError(ServiceDeskError):
    """Delete target is absent"""

    status_code = 404


class StorageError(Exception):
    """Unknown collection or other store misuse"""
    pass


class NotificationError(Exception):
    """One or more SMS sends failed"""

    def __init__(self, message: str, errors: Optional[Sequence[BaseException]] = None):
        super().__init__(message)
        self.errors = list(errors or [])
