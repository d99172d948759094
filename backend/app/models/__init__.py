from .database import Base, engine, get_db, init_db
from .entities import (
    Taxpayer,
    AdvanceTaxEstimate,
    AdvanceTaxSchedule,
    AdvanceTaxPayment,
    TaxRegime,
)

__all__ = [
    "Base",
    "engine",
    "get_db",
    "init_db",
    "Taxpayer",
    "AdvanceTaxEstimate",
    "AdvanceTaxSchedule",
    "AdvanceTaxPayment",
    "TaxRegime",
]
