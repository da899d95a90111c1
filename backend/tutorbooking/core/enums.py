# backend/tutorbooking/core/enums.py
"""
Core enums for the tutor scheduling service.

This module contains enumeration types used throughout the application
for type safety and consistency.
"""

from enum import Enum


class RoleName(str, Enum):
    """
    Role stamped on a user record.

    Learner accounts provisioned by the booking flow carry the LEARNER role
    until they complete their own onboarding.
    """

    ADMIN = "admin"
    INSTRUCTOR = "instructor"
    LEARNER = "learner"
