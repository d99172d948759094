"""
Advance Tax Tracker

A FastAPI application for tracking Indian advance tax installments and
the interest charged on short or late payment.

Supports:
- Quarterly installment schedule (15/45/75/100% by 15 Jun/Sep/Dec/Mar)
- Challan payments with automatic quarter detection
- Interest under Section 234B (default) and 234C (deferment)
"""

import logging

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import settings
from .models import init_db
from .routers import taxpayers_router, advance_tax_router

logging.basicConfig(level=settings.LOG_LEVEL)
structlog.configure(
    wrapper_class=structlog.make_filtering_bound_logger(
        logging.getLevelName(settings.LOG_LEVEL)
    ),
)

# Create FastAPI app
app = FastAPI(
    title=settings.APP_TITLE,
    description="Track advance tax installments and 234B/234C interest",
    version=settings.APP_VERSION
)

# CORS middleware for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(taxpayers_router)
app.include_router(advance_tax_router)


@app.on_event("startup")
async def startup():
    """Initialize database on startup."""
    init_db()


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "name": settings.APP_TITLE,
        "version": settings.APP_VERSION,
        "description": "Track advance tax installments and 234B/234C interest",
        "endpoints": {
            "taxpayers": "/taxpayers",
            "advance_tax": {
                "estimates": "/advance-tax",
                "payments": "/advance-tax/{estimate_id}/payments",
                "calculate": "/advance-tax/{estimate_id}/calculate",
                "interest": "/advance-tax/{estimate_id}/interest",
                "due_dates": "/advance-tax/due-dates/{financial_year}",
                "analyze": "/advance-tax/analyze"
            }
        },
        "rules": {
            "threshold": "Advance tax required above 10,000 net liability",
            "installments": "15% by 15 Jun, 45% by 15 Sep, 75% by 15 Dec, 100% by 15 Mar",
            "234B": "1% per month when less than 90% paid in advance",
            "234C": "1% per month on installment shortfall (3 months Q1-Q3, 1 month Q4)"
        },
        "documentation": "/docs"
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}
