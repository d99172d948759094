"""Keeps persisted estimates in step with the advance tax calculator."""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

import structlog
from sqlalchemy.orm import Session

from ..models import AdvanceTaxEstimate, AdvanceTaxSchedule
from .advance_tax_calculator import AdvanceTaxAnalysis, AdvanceTaxCalculator, Payment

logger = structlog.get_logger(__name__)


def estimate_payments(estimate: AdvanceTaxEstimate) -> list[Payment]:
    """Convert stored payments to calculator input."""
    return [
        Payment(amount=Decimal(p.amount), payment_date=p.payment_date, quarter=p.quarter)
        for p in estimate.payments
    ]


def analyze_estimate(
    estimate: AdvanceTaxEstimate,
    as_of: Optional[date] = None
) -> AdvanceTaxAnalysis:
    """Run the calculator over an estimate without touching the database."""
    return AdvanceTaxCalculator.analyze(
        Decimal(estimate.net_tax_liability or 0),
        estimate.financial_year,
        estimate_payments(estimate),
        as_of=as_of or date.today(),
    )


def recalculate_estimate(
    db: Session,
    estimate: AdvanceTaxEstimate,
    as_of: Optional[date] = None
) -> AdvanceTaxAnalysis:
    """
    Re-run the calculator and persist its results.

    Schedule rows are created when missing, so the same call serves a new
    estimate and every later payment change.
    """
    # Pick up payments added or removed through the session
    db.flush()
    db.expire(estimate)
    analysis = analyze_estimate(estimate, as_of)

    rows = {s.quarter: s for s in estimate.schedules}
    for schedule in analysis.schedules:
        row = rows.get(schedule.quarter)
        if row is None:
            row = AdvanceTaxSchedule(quarter=schedule.quarter)
            estimate.schedules.append(row)
            rows[schedule.quarter] = row

        row.due_date = schedule.due_date
        row.cumulative_percentage = schedule.cumulative_percentage
        row.cumulative_amount_due = schedule.cumulative_amount_due
        row.quarter_amount_due = schedule.quarter_amount_due
        row.amount_paid = schedule.amount_paid
        row.shortfall = schedule.shortfall
        row.status = schedule.status.value
        row.interest_234c = schedule.interest_234c

    db.flush()
    for payment in estimate.payments:
        payment.schedule_id = rows[payment.quarter].id

    estimate.advance_tax_required = analysis.advance_tax_required
    estimate.interest_234b = analysis.interest_234b.interest
    estimate.interest_234c = analysis.interest_234c.total_interest
    estimate.last_calculated_at = datetime.utcnow()

    db.commit()
    db.refresh(estimate)

    logger.info(
        "advance_tax.recalculated",
        estimate_id=estimate.id,
        financial_year=estimate.financial_year,
        interest_234b=str(analysis.interest_234b.interest),
        interest_234c=str(analysis.interest_234c.total_interest),
    )
    return analysis
