"""
Indian Advance Tax Calculator

Advance tax is payable in four installments during the financial year:
- 15 June: 15% of estimated tax
- 15 September: 45% cumulative
- 15 December: 75% cumulative
- 15 March (next calendar year): 100%

Required only when net tax liability exceeds 10,000.

Interest (simple, 1% per month on the shortfall):
- Section 234B: less than 90% of assessed tax paid as advance tax
- Section 234C: cumulative installment short on a due date
  (3 months for Q1-Q3, 1 month for Q4)

Every result here is derived fresh from its inputs. Nothing reads the
clock except `analyze`, and only when no reference date is passed.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Iterable, Optional, Union

Amount = Union[Decimal, int, float, str]


class InstallmentStatus(str, Enum):
    """Compliance status of an installment."""
    PENDING = "PENDING"
    PAID = "PAID"
    PARTIAL = "PARTIAL"
    OVERDUE = "OVERDUE"


@dataclass(frozen=True)
class QuarterRule:
    """Statutory parameters of one installment."""
    quarter: int
    month: int
    day: int
    year_offset: int  # 1 when the due date falls in the FY's second calendar year
    cumulative_percentage: int
    deferment_months: int
    description: str


@dataclass(frozen=True)
class AdvanceTaxDueDate:
    quarter: int
    due_date: date
    cumulative_percentage: int
    description: str


@dataclass(frozen=True)
class Payment:
    """An advance tax payment (challan). Quarter is detected from the date if None."""
    amount: Decimal
    payment_date: date
    quarter: Optional[int] = None


@dataclass(frozen=True)
class QuarterlySchedule:
    """One installment row reconciled against payments."""
    quarter: int
    due_date: date
    cumulative_percentage: int
    cumulative_amount_due: Decimal
    quarter_amount_due: Decimal
    amount_paid: Decimal
    shortfall: Decimal
    status: InstallmentStatus
    interest_234c: Decimal


@dataclass(frozen=True)
class Interest234BResult:
    """Section 234B interest (default in payment of advance tax)."""
    is_applicable: bool
    total_tax_liability: Decimal
    total_advance_tax_paid: Decimal
    shortfall: Decimal
    months_of_default: int
    interest: Decimal
    reason: str


@dataclass(frozen=True)
class QuarterInterest:
    quarter: int
    shortfall: Decimal
    months: int
    interest: Decimal


@dataclass(frozen=True)
class Interest234CResult:
    """Section 234C interest (deferment of installments)."""
    quarterly_interest: tuple[QuarterInterest, ...]
    total_interest: Decimal


@dataclass(frozen=True)
class AdvanceTaxAnalysis:
    """Complete advance tax analysis for a financial year."""
    net_tax_liability: Decimal
    advance_tax_required: bool
    schedules: tuple[QuarterlySchedule, ...]
    interest_234b: Interest234BResult
    interest_234c: Interest234CResult
    total_interest: Decimal


def _to_decimal(value: Amount) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _round_amount(value: Decimal) -> Decimal:
    """Round to whole currency units, half up."""
    return value.quantize(Decimal("1"), rounding=ROUND_HALF_UP)


class AdvanceTaxCalculator:
    """
    Calculator for Indian advance tax installments and interest.

    Key rules:
    - Cumulative installments of 15/45/75/100% by the four due dates
    - 234B: 1% per month from 1 April when less than 90% is paid
    - 234C: 1% per month for a fixed deferment window per installment
    - All amounts rounded to the nearest rupee
    """

    THRESHOLD = Decimal("10000")
    INTEREST_RATE = Decimal("0.01")
    THRESHOLD_234B = Decimal("90")
    DAYS_PER_MONTH = 30

    QUARTER_RULES: tuple[QuarterRule, ...] = (
        QuarterRule(1, 6, 15, 0, 15, 3, "First Installment (15% of tax)"),
        QuarterRule(2, 9, 15, 0, 45, 3, "Second Installment (45% cumulative)"),
        QuarterRule(3, 12, 15, 0, 75, 3, "Third Installment (75% cumulative)"),
        QuarterRule(4, 3, 15, 1, 100, 1, "Fourth Installment (100% of tax)"),
    )

    @staticmethod
    def get_fy_start_year(financial_year: str) -> int:
        """Start year of a financial year label: "2024-25" -> 2024."""
        return int(financial_year.split("-")[0])

    @classmethod
    def get_rule(cls, quarter: int) -> QuarterRule:
        return cls.QUARTER_RULES[quarter - 1]

    @classmethod
    def get_due_dates(cls, financial_year: str) -> tuple[AdvanceTaxDueDate, ...]:
        """Get the four installment due dates for a financial year."""
        start_year = cls.get_fy_start_year(financial_year)
        return tuple(
            AdvanceTaxDueDate(
                quarter=rule.quarter,
                due_date=date(start_year + rule.year_offset, rule.month, rule.day),
                cumulative_percentage=rule.cumulative_percentage,
                description=rule.description,
            )
            for rule in cls.QUARTER_RULES
        )

    @classmethod
    def is_advance_tax_applicable(cls, net_tax_liability: Amount) -> bool:
        """Advance tax is required only above the 10,000 threshold."""
        return _to_decimal(net_tax_liability) > cls.THRESHOLD

    @classmethod
    def detect_quarter(cls, payment_date: date, financial_year: str) -> int:
        """
        Find the installment a payment belongs to.

        A payment counts towards the first installment due on or after its
        date. Payments after the last due date go to Q4.
        """
        for due_date in cls.get_due_dates(financial_year):
            if payment_date <= due_date.due_date:
                return due_date.quarter
        return 4

    @classmethod
    def allocate_payments(
        cls,
        payments: Iterable[Payment],
        financial_year: str
    ) -> dict[int, Decimal]:
        """Total payments per quarter. Every quarter is present."""
        paid = {rule.quarter: Decimal("0") for rule in cls.QUARTER_RULES}

        for payment in payments:
            quarter = payment.quarter or cls.detect_quarter(payment.payment_date, financial_year)
            paid[quarter] += _to_decimal(payment.amount)

        return paid

    @classmethod
    def calculate_quarter_interest_234c(cls, shortfall: Amount, quarter: int) -> Decimal:
        """234C interest for a single installment."""
        months = cls.get_rule(quarter).deferment_months
        return _round_amount(_to_decimal(shortfall) * cls.INTEREST_RATE * months)

    @classmethod
    def calculate_schedule(
        cls,
        net_tax_liability: Amount,
        financial_year: str,
        payments: Iterable[Payment],
        as_of: date
    ) -> tuple[QuarterlySchedule, ...]:
        """Reconcile payments against the installment schedule as of a date."""
        liability = _to_decimal(net_tax_liability)
        paid_by_quarter = cls.allocate_payments(payments, financial_year)

        schedules = []
        cumulative_paid = Decimal("0")
        prev_cumulative_due = Decimal("0")

        for due in cls.get_due_dates(financial_year):
            cumulative_due = _round_amount(liability * due.cumulative_percentage / 100)
            quarter_due = cumulative_due - prev_cumulative_due
            prev_cumulative_due = cumulative_due

            quarter_paid = paid_by_quarter[due.quarter]
            cumulative_paid += quarter_paid

            shortfall = max(Decimal("0"), cumulative_due - cumulative_paid)
            is_past_due = as_of > due.due_date

            if cumulative_paid >= cumulative_due:
                status = InstallmentStatus.PAID
            elif not is_past_due:
                status = InstallmentStatus.PENDING
            elif cumulative_paid > 0:
                status = InstallmentStatus.PARTIAL
            else:
                status = InstallmentStatus.OVERDUE

            interest = Decimal("0")
            if is_past_due and shortfall > 0:
                interest = cls.calculate_quarter_interest_234c(shortfall, due.quarter)

            schedules.append(QuarterlySchedule(
                quarter=due.quarter,
                due_date=due.due_date,
                cumulative_percentage=due.cumulative_percentage,
                cumulative_amount_due=cumulative_due,
                quarter_amount_due=quarter_due,
                amount_paid=quarter_paid,
                shortfall=shortfall,
                status=status,
                interest_234c=interest,
            ))

        return tuple(schedules)

    @classmethod
    def calculate_interest_234b(
        cls,
        total_tax_liability: Amount,
        total_advance_tax_paid: Amount,
        assessment_date: date
    ) -> Interest234BResult:
        """
        Interest under Section 234B.

        Runs from 1 April of the assessment date's calendar year up to the
        assessment date, counted in 30-day months rounded up (minimum 1).
        """
        liability = _to_decimal(total_tax_liability)
        paid = _to_decimal(total_advance_tax_paid)
        threshold = liability * cls.THRESHOLD_234B / 100

        if paid >= threshold:
            return Interest234BResult(
                is_applicable=False,
                total_tax_liability=liability,
                total_advance_tax_paid=paid,
                shortfall=Decimal("0"),
                months_of_default=0,
                interest=Decimal("0"),
                reason="Paid 90% or more of tax liability as advance tax",
            )

        shortfall = _round_amount(liability - paid)

        april_first = date(assessment_date.year, 4, 1)
        days = (assessment_date - april_first).days
        months = max(1, -(-days // cls.DAYS_PER_MONTH))

        interest = _round_amount(shortfall * cls.INTEREST_RATE * months)

        return Interest234BResult(
            is_applicable=True,
            total_tax_liability=liability,
            total_advance_tax_paid=paid,
            shortfall=shortfall,
            months_of_default=months,
            interest=interest,
            reason=f"Advance tax paid ({paid:,}) is less than 90% of tax liability",
        )

    @classmethod
    def calculate_interest_234c(
        cls,
        schedules: Iterable[QuarterlySchedule]
    ) -> Interest234CResult:
        """Aggregate 234C interest. Quarters without interest are still listed."""
        quarterly = tuple(
            QuarterInterest(
                quarter=s.quarter,
                shortfall=s.shortfall,
                months=cls.get_rule(s.quarter).deferment_months,
                interest=s.interest_234c,
            )
            for s in schedules
        )
        total = sum((q.interest for q in quarterly), Decimal("0"))
        return Interest234CResult(quarterly_interest=quarterly, total_interest=total)

    @classmethod
    def analyze(
        cls,
        net_tax_liability: Amount,
        financial_year: str,
        payments: Iterable[Payment] = (),
        assessment_date: Optional[date] = None,
        as_of: Optional[date] = None
    ) -> AdvanceTaxAnalysis:
        """
        Full analysis: schedule, 234B and 234C interest.

        `as_of` drives installment status; it falls back to the assessment
        date and then to today. The assessment date falls back to `as_of`.
        """
        if as_of is None:
            as_of = assessment_date or date.today()
        if assessment_date is None:
            assessment_date = as_of

        liability = _to_decimal(net_tax_liability)
        payments = tuple(payments)

        schedules = cls.calculate_schedule(liability, financial_year, payments, as_of)
        total_paid = sum((_to_decimal(p.amount) for p in payments), Decimal("0"))

        interest_234b = cls.calculate_interest_234b(liability, total_paid, assessment_date)
        interest_234c = cls.calculate_interest_234c(schedules)

        return AdvanceTaxAnalysis(
            net_tax_liability=liability,
            advance_tax_required=cls.is_advance_tax_applicable(liability),
            schedules=schedules,
            interest_234b=interest_234b,
            interest_234c=interest_234c,
            total_interest=interest_234b.interest + interest_234c.total_interest,
        )
