"""Advance tax router: estimates, challan payments and interest."""

from datetime import date
from typing import List, Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ..models import get_db, AdvanceTaxEstimate, AdvanceTaxPayment, Taxpayer
from ..schemas import (
    AnalysisResponse,
    AnalyzeRequest,
    CalculationResponse,
    DueDateResponse,
    EstimateCreate,
    EstimateResponse,
    EstimateUpdate,
    InterestAnalysisResponse,
    InterestResponse,
    PaymentCreate,
    PaymentResponse,
    PaymentUpdate,
    check_financial_year,
)
from ..services import AdvanceTaxCalculator, Payment, analyze_estimate, recalculate_estimate

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/advance-tax", tags=["advance-tax"])


def get_estimate_or_404(db: Session, estimate_id: int) -> AdvanceTaxEstimate:
    estimate = db.query(AdvanceTaxEstimate).filter(AdvanceTaxEstimate.id == estimate_id).first()
    if not estimate:
        raise HTTPException(status_code=404, detail="Estimate not found")
    return estimate


def get_payment_or_404(db: Session, estimate_id: int, payment_id: int) -> AdvanceTaxPayment:
    payment = db.query(AdvanceTaxPayment).filter(
        AdvanceTaxPayment.id == payment_id,
        AdvanceTaxPayment.estimate_id == estimate_id
    ).first()
    if not payment:
        raise HTTPException(status_code=404, detail="Payment not found")
    return payment


@router.get("/due-dates/{financial_year}", response_model=List[DueDateResponse])
async def get_due_dates(financial_year: str) -> List[DueDateResponse]:
    """Installment due dates and cumulative percentages for a financial year."""
    try:
        check_financial_year(financial_year)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return [
        DueDateResponse.model_validate(d, from_attributes=True)
        for d in AdvanceTaxCalculator.get_due_dates(financial_year)
    ]


@router.post("/analyze", response_model=AnalysisResponse)
async def analyze(request: AnalyzeRequest) -> AnalysisResponse:
    """Analyze a liability and payment list without storing anything."""
    payments = [
        Payment(amount=p.amount, payment_date=p.payment_date, quarter=p.quarter)
        for p in request.payments
    ]
    analysis = AdvanceTaxCalculator.analyze(
        request.net_tax_liability,
        request.financial_year,
        payments,
        assessment_date=request.assessment_date,
        as_of=request.as_of,
    )
    return AnalysisResponse.model_validate(analysis, from_attributes=True)


@router.get("/", response_model=List[EstimateResponse])
async def get_estimates(
    taxpayer_id: Optional[int] = Query(None, description="Only this taxpayer's estimates"),
    financial_year: Optional[str] = Query(None, description="Only this financial year"),
    db: Session = Depends(get_db)
) -> List[AdvanceTaxEstimate]:
    """List estimates, latest financial year first."""
    query = db.query(AdvanceTaxEstimate)
    if taxpayer_id is not None:
        query = query.filter(AdvanceTaxEstimate.taxpayer_id == taxpayer_id)
    if financial_year:
        query = query.filter(AdvanceTaxEstimate.financial_year == financial_year)
    return query.order_by(AdvanceTaxEstimate.financial_year.desc()).all()


@router.post("/", response_model=EstimateResponse, status_code=201)
async def create_estimate(data: EstimateCreate, db: Session = Depends(get_db)) -> AdvanceTaxEstimate:
    """Create an estimate for a financial year together with its four installments."""
    taxpayer = db.query(Taxpayer).filter(Taxpayer.id == data.taxpayer_id).first()
    if not taxpayer:
        raise HTTPException(status_code=404, detail="Taxpayer not found")

    existing = db.query(AdvanceTaxEstimate).filter(
        AdvanceTaxEstimate.taxpayer_id == data.taxpayer_id,
        AdvanceTaxEstimate.financial_year == data.financial_year
    ).first()
    if existing:
        raise HTTPException(
            status_code=400,
            detail="Estimate already exists for this financial year"
        )

    estimate = AdvanceTaxEstimate(
        taxpayer_id=data.taxpayer_id,
        financial_year=data.financial_year,
        selected_regime=data.selected_regime,
        total_estimated_income=data.total_estimated_income,
        income_breakdown=data.income_breakdown.model_dump() if data.income_breakdown else None,
        estimated_deductions=data.estimated_deductions,
        total_tds_deducted=data.total_tds_deducted,
        gross_tax_liability=data.gross_tax_liability,
        net_tax_liability=data.net_tax_liability,
    )
    db.add(estimate)
    recalculate_estimate(db, estimate)

    logger.info(
        "advance_tax.estimate_created",
        estimate_id=estimate.id,
        taxpayer_id=estimate.taxpayer_id,
        financial_year=estimate.financial_year,
    )
    return estimate


@router.get("/{estimate_id}", response_model=EstimateResponse)
async def get_estimate(estimate_id: int, db: Session = Depends(get_db)) -> AdvanceTaxEstimate:
    """Get an estimate with its schedule and payments."""
    return get_estimate_or_404(db, estimate_id)


@router.put("/{estimate_id}", response_model=EstimateResponse)
async def update_estimate(
    estimate_id: int,
    data: EstimateUpdate,
    db: Session = Depends(get_db)
) -> AdvanceTaxEstimate:
    """Update an estimate. The schedule and interest are recalculated."""
    estimate = get_estimate_or_404(db, estimate_id)

    for field, value in data.model_dump(exclude_unset=True).items():
        # Only the income breakdown may be cleared
        if value is None and field != "income_breakdown":
            continue
        setattr(estimate, field, value)

    recalculate_estimate(db, estimate)
    return estimate


@router.delete("/{estimate_id}")
async def delete_estimate(estimate_id: int, db: Session = Depends(get_db)) -> dict:
    """Delete an estimate with its schedule and payments."""
    estimate = get_estimate_or_404(db, estimate_id)
    db.delete(estimate)
    db.commit()
    logger.info("advance_tax.estimate_deleted", estimate_id=estimate_id)
    return {"success": True, "message": "Estimate deleted"}


@router.post("/{estimate_id}/calculate", response_model=CalculationResponse)
async def calculate(
    estimate_id: int,
    as_of: Optional[date] = Query(None, description="Reference date, defaults to today"),
    db: Session = Depends(get_db)
) -> CalculationResponse:
    """Recalculate the schedule and interest and store the results."""
    estimate = get_estimate_or_404(db, estimate_id)
    analysis = recalculate_estimate(db, estimate, as_of)

    return CalculationResponse(
        estimate=EstimateResponse.model_validate(estimate),
        analysis=InterestAnalysisResponse.model_validate(analysis, from_attributes=True),
    )


@router.get("/{estimate_id}/interest", response_model=InterestResponse)
async def get_interest(
    estimate_id: int,
    as_of: Optional[date] = Query(None, description="Reference date, defaults to today"),
    db: Session = Depends(get_db)
) -> InterestResponse:
    """Detailed 234B/234C interest with the statutory parameters used."""
    estimate = get_estimate_or_404(db, estimate_id)
    analysis = analyze_estimate(estimate, as_of)

    return InterestResponse.model_validate({
        "interest_234b": analysis.interest_234b,
        "interest_234c": analysis.interest_234c,
        "total_interest": analysis.total_interest,
        "config": {
            "threshold": AdvanceTaxCalculator.THRESHOLD,
            "interest_rate": AdvanceTaxCalculator.INTEREST_RATE,
            "threshold_234b": AdvanceTaxCalculator.THRESHOLD_234B,
        },
    }, from_attributes=True)


@router.get("/{estimate_id}/payments", response_model=List[PaymentResponse])
async def get_payments(estimate_id: int, db: Session = Depends(get_db)) -> List[AdvanceTaxPayment]:
    """List payments for an estimate, latest first."""
    get_estimate_or_404(db, estimate_id)
    return db.query(AdvanceTaxPayment).filter(
        AdvanceTaxPayment.estimate_id == estimate_id
    ).order_by(AdvanceTaxPayment.payment_date.desc()).all()


@router.post("/{estimate_id}/payments", response_model=PaymentResponse, status_code=201)
async def create_payment(
    estimate_id: int,
    data: PaymentCreate,
    db: Session = Depends(get_db)
) -> AdvanceTaxPayment:
    """Record a challan payment. The quarter is detected from the date when not given."""
    estimate = get_estimate_or_404(db, estimate_id)

    quarter = data.quarter or AdvanceTaxCalculator.detect_quarter(
        data.payment_date, estimate.financial_year
    )

    payment = AdvanceTaxPayment(
        estimate_id=estimate.id,
        payment_date=data.payment_date,
        amount=data.amount,
        quarter=quarter,
        financial_year=estimate.financial_year,
        challan_serial_number=data.challan_serial_number,
        bsr_code=data.bsr_code,
        bank_name=data.bank_name,
        notes=data.notes,
    )
    db.add(payment)
    recalculate_estimate(db, estimate)
    db.refresh(payment)

    logger.info(
        "advance_tax.payment_created",
        estimate_id=estimate.id,
        payment_id=payment.id,
        quarter=quarter,
    )
    return payment


@router.put("/{estimate_id}/payments/{payment_id}", response_model=PaymentResponse)
async def update_payment(
    estimate_id: int,
    payment_id: int,
    data: PaymentUpdate,
    db: Session = Depends(get_db)
) -> AdvanceTaxPayment:
    """Update a payment. A new date without a quarter re-detects the quarter."""
    estimate = get_estimate_or_404(db, estimate_id)
    payment = get_payment_or_404(db, estimate_id, payment_id)

    changes = data.model_dump(exclude_unset=True)
    for field in ("payment_date", "amount", "challan_serial_number", "bsr_code", "quarter"):
        if field in changes and changes[field] is None:
            del changes[field]
    if "payment_date" in changes and "quarter" not in changes:
        changes["quarter"] = AdvanceTaxCalculator.detect_quarter(
            changes["payment_date"], estimate.financial_year
        )

    for field, value in changes.items():
        setattr(payment, field, value)

    recalculate_estimate(db, estimate)
    db.refresh(payment)
    return payment


@router.delete("/{estimate_id}/payments/{payment_id}")
async def delete_payment(estimate_id: int, payment_id: int, db: Session = Depends(get_db)) -> dict:
    """Delete a payment and recalculate the estimate."""
    estimate = get_estimate_or_404(db, estimate_id)
    payment = get_payment_or_404(db, estimate_id, payment_id)

    db.delete(payment)
    recalculate_estimate(db, estimate)

    logger.info("advance_tax.payment_deleted", estimate_id=estimate_id, payment_id=payment_id)
    return {"success": True, "message": "Payment deleted"}
