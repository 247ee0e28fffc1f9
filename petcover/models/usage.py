"""
Procedure Usage Model.

One row per (pet, procedure, plan, calendar year). The counter only grows;
rows are created lazily by the first committed claim of the year.
"""

from sqlalchemy import CheckConstraint, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from petcover.models.base import Base, TimeStampedModel, UUIDModel


class ProcedureUsageRecord(Base, UUIDModel, TimeStampedModel):
    """Yearly usage counter."""

    __tablename__ = "procedure_usage"

    pet_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    procedure_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("procedures.id", ondelete="CASCADE"),
        nullable=False,
    )
    plan_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("plans.id", ondelete="CASCADE"),
        nullable=False,
    )
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    usage_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    __table_args__ = (
        UniqueConstraint(
            "pet_id", "procedure_id", "plan_id", "year",
            name="uq_procedure_usage_key",
        ),
        CheckConstraint("usage_count >= 0", name="ck_procedure_usage_count"),
    )

    def __repr__(self) -> str:
        return (
            f"<ProcedureUsageRecord(pet={self.pet_id}, procedure={self.procedure_id}, "
            f"year={self.year}, count={self.usage_count})>"
        )
