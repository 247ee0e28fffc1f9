"""
SQLAlchemy Models for the Benefit Adjudication Engine.

This module exports all database models for the application.
"""

from petcover.models.base import Base, TimeStampedModel, UUIDModel
from petcover.models.coverage import PlanProcedureRecord, PlanRecord, ProcedureRecord
from petcover.models.usage import ProcedureUsageRecord

__all__ = [
    "Base",
    "TimeStampedModel",
    "UUIDModel",
    "PlanRecord",
    "ProcedureRecord",
    "PlanProcedureRecord",
    "ProcedureUsageRecord",
]
