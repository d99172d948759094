"""Database entity models for the Advance Tax Tracker."""

from datetime import datetime
from enum import Enum
from sqlalchemy import (
    Column, Integer, String, Date, DateTime, Numeric,
    ForeignKey, Enum as SQLEnum, Boolean, Text, JSON, UniqueConstraint
)
from sqlalchemy.orm import relationship
from .database import Base


class TaxRegime(str, Enum):
    """Income tax regime chosen for the year."""
    OLD = "OLD"
    NEW = "NEW"


class Taxpayer(Base):
    """Taxpayer entity, so a household can track several people."""
    __tablename__ = "taxpayers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    is_primary = Column(Boolean, default=False)
    pan = Column(String(10))  # Optional Permanent Account Number
    color = Column(String(7), default="#3B82F6")  # UI color for distinction

    estimates = relationship("AdvanceTaxEstimate", back_populates="taxpayer")

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class AdvanceTaxEstimate(Base):
    """Estimated liability for one taxpayer and financial year."""
    __tablename__ = "advance_tax_estimates"
    __table_args__ = (
        UniqueConstraint("taxpayer_id", "financial_year", name="uq_estimate_taxpayer_fy"),
    )

    id = Column(Integer, primary_key=True, index=True)
    taxpayer_id = Column(Integer, ForeignKey("taxpayers.id"), nullable=False)
    financial_year = Column(String(7), nullable=False, index=True)  # "2024-25"
    selected_regime = Column(SQLEnum(TaxRegime), default=TaxRegime.NEW, nullable=False)

    # Income estimate
    total_estimated_income = Column(Numeric(18, 2), default=0)
    income_breakdown = Column(JSON)  # salary, business, rental, capitalGains, ...
    estimated_deductions = Column(Numeric(18, 2), default=0)
    total_tds_deducted = Column(Numeric(18, 2), default=0)

    # Liability
    gross_tax_liability = Column(Numeric(18, 2), default=0)
    net_tax_liability = Column(Numeric(18, 2), default=0)  # After TDS
    advance_tax_required = Column(Boolean, default=False)

    # Interest, written by the recalculation
    interest_234b = Column(Numeric(18, 2), default=0)
    interest_234c = Column(Numeric(18, 2), default=0)
    last_calculated_at = Column(DateTime)

    taxpayer = relationship("Taxpayer", back_populates="estimates")
    schedules = relationship(
        "AdvanceTaxSchedule",
        back_populates="estimate",
        cascade="all, delete-orphan",
        order_by="AdvanceTaxSchedule.quarter",
    )
    payments = relationship(
        "AdvanceTaxPayment",
        back_populates="estimate",
        cascade="all, delete-orphan",
        order_by="AdvanceTaxPayment.payment_date.desc()",
    )

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class AdvanceTaxSchedule(Base):
    """Persisted installment row for an estimate."""
    __tablename__ = "advance_tax_schedules"
    __table_args__ = (
        UniqueConstraint("estimate_id", "quarter", name="uq_schedule_estimate_quarter"),
    )

    id = Column(Integer, primary_key=True, index=True)
    estimate_id = Column(Integer, ForeignKey("advance_tax_estimates.id"), nullable=False)

    quarter = Column(Integer, nullable=False)
    due_date = Column(Date, nullable=False)
    cumulative_percentage = Column(Integer, nullable=False)
    cumulative_amount_due = Column(Numeric(18, 2), default=0)
    quarter_amount_due = Column(Numeric(18, 2), default=0)

    amount_paid = Column(Numeric(18, 2), default=0)
    shortfall = Column(Numeric(18, 2), default=0)
    status = Column(String(10), default="PENDING")  # PENDING, PAID, PARTIAL, OVERDUE
    interest_234c = Column(Numeric(18, 2), default=0)

    estimate = relationship("AdvanceTaxEstimate", back_populates="schedules")
    payments = relationship("AdvanceTaxPayment", back_populates="schedule")

    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class AdvanceTaxPayment(Base):
    """Advance tax paid through a challan."""
    __tablename__ = "advance_tax_payments"

    id = Column(Integer, primary_key=True, index=True)
    estimate_id = Column(Integer, ForeignKey("advance_tax_estimates.id"), nullable=False)
    schedule_id = Column(Integer, ForeignKey("advance_tax_schedules.id"), nullable=True)

    payment_date = Column(Date, nullable=False, index=True)
    amount = Column(Numeric(18, 2), nullable=False)
    quarter = Column(Integer, nullable=False)
    financial_year = Column(String(7), nullable=False)

    # Challan details
    challan_serial_number = Column(String(50), nullable=False)
    bsr_code = Column(String(20), nullable=False)
    bank_name = Column(String(255))
    notes = Column(Text)

    estimate = relationship("AdvanceTaxEstimate", back_populates="payments")
    schedule = relationship("AdvanceTaxSchedule", back_populates="payments")

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
