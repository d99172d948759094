import re
from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, Optional

from pydantic import AfterValidator, BaseModel, Field

from ..models.entities import TaxRegime
from ..services.advance_tax_calculator import InstallmentStatus

FY_PATTERN = re.compile(r"^\d{4}-\d{2}$")


def check_financial_year(value: str) -> str:
    """Accept "YYYY-YY" where the suffix is the following year."""
    if not FY_PATTERN.match(value):
        raise ValueError("Format: YYYY-YY")
    start, suffix = value.split("-")
    if int(suffix) != (int(start) + 1) % 100:
        raise ValueError(f"Financial year {value} must end with {(int(start) + 1) % 100:02d}")
    return value


FinancialYear = Annotated[str, AfterValidator(check_financial_year)]


# --- Taxpayers ---

class TaxpayerCreate(BaseModel):
    name: str = Field(min_length=1)
    is_primary: bool = False
    pan: Optional[str] = None
    color: str = "#3B82F6"


class TaxpayerUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    pan: Optional[str] = None
    color: Optional[str] = None


class TaxpayerResponse(BaseModel):
    id: int
    name: str
    is_primary: bool
    pan: Optional[str] = None
    color: Optional[str] = None

    class Config:
        from_attributes = True


# --- Estimates ---

class IncomeBreakdown(BaseModel):
    salary: float = 0
    business: float = 0
    rental: float = 0
    capital_gains: float = 0
    interest: float = 0
    dividend: float = 0
    other: float = 0


class EstimateCreate(BaseModel):
    taxpayer_id: int
    financial_year: FinancialYear
    selected_regime: TaxRegime = TaxRegime.NEW
    total_estimated_income: Decimal = Field(Decimal("0"), ge=0)
    income_breakdown: Optional[IncomeBreakdown] = None
    estimated_deductions: Decimal = Field(Decimal("0"), ge=0)
    total_tds_deducted: Decimal = Field(Decimal("0"), ge=0)
    gross_tax_liability: Decimal = Field(Decimal("0"), ge=0)
    net_tax_liability: Decimal = Field(Decimal("0"), ge=0)


class EstimateUpdate(BaseModel):
    selected_regime: Optional[TaxRegime] = None
    total_estimated_income: Optional[Decimal] = Field(None, ge=0)
    income_breakdown: Optional[IncomeBreakdown] = None
    estimated_deductions: Optional[Decimal] = Field(None, ge=0)
    total_tds_deducted: Optional[Decimal] = Field(None, ge=0)
    gross_tax_liability: Optional[Decimal] = Field(None, ge=0)
    net_tax_liability: Optional[Decimal] = Field(None, ge=0)


class ScheduleResponse(BaseModel):
    id: int
    quarter: int
    due_date: date
    cumulative_percentage: int
    cumulative_amount_due: float
    quarter_amount_due: float
    amount_paid: float
    shortfall: float
    status: InstallmentStatus
    interest_234c: float

    class Config:
        from_attributes = True


class PaymentResponse(BaseModel):
    id: int
    estimate_id: int
    schedule_id: Optional[int] = None
    payment_date: date
    amount: float
    quarter: int
    financial_year: str
    challan_serial_number: str
    bsr_code: str
    bank_name: Optional[str] = None
    notes: Optional[str] = None

    class Config:
        from_attributes = True


class EstimateResponse(BaseModel):
    id: int
    taxpayer_id: int
    financial_year: str
    selected_regime: TaxRegime
    total_estimated_income: float
    income_breakdown: Optional[dict] = None
    estimated_deductions: float
    total_tds_deducted: float
    gross_tax_liability: float
    net_tax_liability: float
    advance_tax_required: bool
    interest_234b: float
    interest_234c: float
    last_calculated_at: Optional[datetime] = None
    schedules: list[ScheduleResponse] = []
    payments: list[PaymentResponse] = []

    class Config:
        from_attributes = True


# --- Payments ---

class PaymentCreate(BaseModel):
    payment_date: date
    amount: Decimal = Field(gt=0)
    challan_serial_number: str = Field(min_length=1)
    bsr_code: str = Field(min_length=1)
    bank_name: Optional[str] = None
    quarter: Optional[int] = Field(None, ge=1, le=4)
    notes: Optional[str] = None


class PaymentUpdate(BaseModel):
    payment_date: Optional[date] = None
    amount: Optional[Decimal] = Field(None, gt=0)
    challan_serial_number: Optional[str] = Field(None, min_length=1)
    bsr_code: Optional[str] = Field(None, min_length=1)
    bank_name: Optional[str] = None
    quarter: Optional[int] = Field(None, ge=1, le=4)
    notes: Optional[str] = None


# --- Engine results ---

class DueDateResponse(BaseModel):
    quarter: int
    due_date: date
    cumulative_percentage: int
    description: str

    class Config:
        from_attributes = True


class QuarterlyScheduleResponse(BaseModel):
    quarter: int
    due_date: date
    cumulative_percentage: int
    cumulative_amount_due: float
    quarter_amount_due: float
    amount_paid: float
    shortfall: float
    status: InstallmentStatus
    interest_234c: float

    class Config:
        from_attributes = True


class Interest234BResponse(BaseModel):
    is_applicable: bool
    total_tax_liability: float
    total_advance_tax_paid: float
    shortfall: float
    months_of_default: int
    interest: float
    reason: str

    class Config:
        from_attributes = True


class QuarterInterestResponse(BaseModel):
    quarter: int
    shortfall: float
    months: int
    interest: float

    class Config:
        from_attributes = True


class Interest234CResponse(BaseModel):
    quarterly_interest: list[QuarterInterestResponse]
    total_interest: float

    class Config:
        from_attributes = True


class InterestAnalysisResponse(BaseModel):
    interest_234b: Interest234BResponse
    interest_234c: Interest234CResponse
    total_interest: float

    class Config:
        from_attributes = True


class AnalysisResponse(InterestAnalysisResponse):
    net_tax_liability: float
    advance_tax_required: bool
    schedules: list[QuarterlyScheduleResponse]


class InterestConfigResponse(BaseModel):
    threshold: float
    interest_rate: float
    threshold_234b: float


class InterestResponse(InterestAnalysisResponse):
    config: InterestConfigResponse


class CalculationResponse(BaseModel):
    estimate: EstimateResponse
    analysis: InterestAnalysisResponse


class PaymentInput(BaseModel):
    amount: Decimal = Field(gt=0)
    payment_date: date
    quarter: Optional[int] = Field(None, ge=1, le=4)


class AnalyzeRequest(BaseModel):
    net_tax_liability: Decimal = Field(ge=0)
    financial_year: FinancialYear
    payments: list[PaymentInput] = []
    assessment_date: Optional[date] = None
    as_of: Optional[date] = None
