"""
Core request handling for the service desk.

This module contains:
- Form submission intake (appointments, spare parts, feedback, contact)
- Customer record queries and admin login
"""

from .records import RecordsService
from .submissions import SubmissionService

__all__ = ["RecordsService", "SubmissionService"]
