from .taxpayers import router as taxpayers_router
from .advance_tax import router as advance_tax_router

__all__ = ["taxpayers_router", "advance_tax_router"]
