"""
Coverage Catalog Models.
Source: plans / procedures / plan_procedures tables of the pet-health platform
Verified: 2026-10-19
"""

from typing import Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from petcover.core.enums import PlanType
from petcover.models.base import Base, TimeStampedModel, UUIDModel


class PlanRecord(Base, TimeStampedModel):
    """
    Sellable insurance plan.

    Coverage terms live on PlanProcedureRecord, not here.
    """

    __tablename__ = "plans"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    plan_type: Mapped[str] = mapped_column(
        String(32),
        default=PlanType.WITH_WAITING_PERIOD.value,
        nullable=False,
        comment="with_waiting_period | without_waiting_period",
    )

    procedures: Mapped[list["PlanProcedureRecord"]] = relationship(
        back_populates="plan",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<PlanRecord(id={self.id}, name='{self.name}')>"


class ProcedureRecord(Base, TimeStampedModel):
    """Billable veterinary service."""

    __tablename__ = "procedures"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    category: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    def __repr__(self) -> str:
        return f"<ProcedureRecord(id={self.id}, name='{self.name}')>"


class PlanProcedureRecord(Base, UUIDModel, TimeStampedModel):
    """
    Coverage rule joining a plan and a procedure.

    Money columns are integer minor units (cents).
    """

    __tablename__ = "plan_procedures"

    plan_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("plans.id", ondelete="CASCADE"),
        nullable=False,
    )
    procedure_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("procedures.id", ondelete="CASCADE"),
        nullable=False,
    )
    is_included: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    price: Mapped[int] = mapped_column(Integer, default=0, nullable=False, comment="Gross price (cents)")
    pay_value: Mapped[int] = mapped_column(Integer, default=0, nullable=False, comment="Remitted to unit (cents)")
    coparticipation: Mapped[int] = mapped_column(Integer, default=0, nullable=False, comment="Client share (cents)")

    waiting_period_days: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    annual_limit: Mapped[int] = mapped_column(Integer, default=0, nullable=False, comment="0 = unlimited")

    display_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    plan: Mapped[PlanRecord] = relationship(back_populates="procedures")
    procedure: Mapped[ProcedureRecord] = relationship()

    __table_args__ = (
        Index("ix_plan_procedures_plan_procedure", "plan_id", "procedure_id", unique=True),
        CheckConstraint("price >= 0", name="ck_plan_procedures_price"),
        CheckConstraint("pay_value >= 0", name="ck_plan_procedures_pay_value"),
        CheckConstraint("coparticipation >= 0", name="ck_plan_procedures_coparticipation"),
        CheckConstraint("waiting_period_days >= 0", name="ck_plan_procedures_waiting"),
        CheckConstraint("annual_limit >= 0", name="ck_plan_procedures_limit"),
    )

    def __repr__(self) -> str:
        return f"<PlanProcedureRecord(plan={self.plan_id}, procedure={self.procedure_id})>"
