"""Application-wide constants for the tutor scheduling service."""

from __future__ import annotations

API_TITLE = "Tutor Scheduling API"
API_DESCRIPTION = (
    "Instructor back office for tutor bookings: availability roster, "
    "booking lifecycle and dashboard statistics."
)
API_VERSION = "1.0.0"

# Text constraints
MAX_RECURRENCE_RULE_LENGTH = 240
MAX_MEETING_URL_LENGTH = 500
MAX_REASON_LENGTH = 500
MAX_SEARCH_LENGTH = 120

# Query limits
DEFAULT_PAGE_SIZE = 25
MAX_PAGE_SIZE = 100

# Metadata keys
SLOT_REFERENCE_KEY = "reference"
CANCELLATION_REASON_KEY = "cancellationReason"

MINUTES_PER_HOUR = 60
