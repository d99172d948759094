from .advance_tax_calculator import AdvanceTaxCalculator, AdvanceTaxAnalysis, Payment
from .advance_tax_service import analyze_estimate, recalculate_estimate

__all__ = [
    "AdvanceTaxCalculator",
    "AdvanceTaxAnalysis",
    "Payment",
    "analyze_estimate",
    "recalculate_estimate",
]
