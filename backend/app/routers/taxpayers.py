"""Taxpayer router for tracking several people in one household."""

from typing import List

import structlog
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..models import get_db, Taxpayer
from ..schemas import TaxpayerCreate, TaxpayerUpdate, TaxpayerResponse

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/taxpayers", tags=["taxpayers"])


def get_taxpayer_or_404(db: Session, taxpayer_id: int) -> Taxpayer:
    taxpayer = db.query(Taxpayer).filter(Taxpayer.id == taxpayer_id).first()
    if not taxpayer:
        raise HTTPException(status_code=404, detail="Taxpayer not found")
    return taxpayer


@router.get("/", response_model=List[TaxpayerResponse])
async def get_taxpayers(db: Session = Depends(get_db)) -> List[Taxpayer]:
    """Get all taxpayers, primary first."""
    return db.query(Taxpayer).order_by(Taxpayer.is_primary.desc(), Taxpayer.name).all()


@router.get("/primary/default", response_model=TaxpayerResponse)
async def get_or_create_primary(db: Session = Depends(get_db)) -> Taxpayer:
    """Get the primary taxpayer, creating a default one if none exists."""
    primary = db.query(Taxpayer).filter(Taxpayer.is_primary == True).first()

    if not primary:
        any_taxpayer = db.query(Taxpayer).first()
        if any_taxpayer:
            any_taxpayer.is_primary = True
            db.commit()
            db.refresh(any_taxpayer)
            return any_taxpayer

        primary = Taxpayer(name="Me", is_primary=True, color="#3B82F6")
        db.add(primary)
        db.commit()
        db.refresh(primary)
        logger.info("taxpayer.created_default", taxpayer_id=primary.id)

    return primary


@router.get("/{taxpayer_id}", response_model=TaxpayerResponse)
async def get_taxpayer(taxpayer_id: int, db: Session = Depends(get_db)) -> Taxpayer:
    """Get a specific taxpayer by ID."""
    return get_taxpayer_or_404(db, taxpayer_id)


@router.post("/", response_model=TaxpayerResponse, status_code=201)
async def create_taxpayer(taxpayer: TaxpayerCreate, db: Session = Depends(get_db)) -> Taxpayer:
    """Create a taxpayer. The first one is always primary."""
    is_primary = taxpayer.is_primary or db.query(Taxpayer).count() == 0

    if is_primary:
        db.query(Taxpayer).filter(Taxpayer.is_primary == True).update({"is_primary": False})

    db_taxpayer = Taxpayer(
        name=taxpayer.name,
        is_primary=is_primary,
        pan=taxpayer.pan,
        color=taxpayer.color,
    )
    db.add(db_taxpayer)
    db.commit()
    db.refresh(db_taxpayer)
    logger.info("taxpayer.created", taxpayer_id=db_taxpayer.id, is_primary=is_primary)
    return db_taxpayer


@router.put("/{taxpayer_id}", response_model=TaxpayerResponse)
async def update_taxpayer(
    taxpayer_id: int,
    taxpayer: TaxpayerUpdate,
    db: Session = Depends(get_db)
) -> Taxpayer:
    """Update a taxpayer's details."""
    db_taxpayer = get_taxpayer_or_404(db, taxpayer_id)

    if taxpayer.name is not None:
        db_taxpayer.name = taxpayer.name
    if taxpayer.pan is not None:
        db_taxpayer.pan = taxpayer.pan
    if taxpayer.color is not None:
        db_taxpayer.color = taxpayer.color

    db.commit()
    db.refresh(db_taxpayer)
    return db_taxpayer


@router.delete("/{taxpayer_id}")
async def delete_taxpayer(taxpayer_id: int, db: Session = Depends(get_db)) -> dict:
    """Delete a taxpayer that has no estimates."""
    db_taxpayer = get_taxpayer_or_404(db, taxpayer_id)

    if db_taxpayer.estimates:
        raise HTTPException(
            status_code=400,
            detail="Cannot delete taxpayer with advance tax estimates. Delete the estimates first."
        )

    db.delete(db_taxpayer)
    db.commit()
    logger.info("taxpayer.deleted", taxpayer_id=taxpayer_id)
    return {"message": "Taxpayer deleted successfully"}


@router.post("/{taxpayer_id}/set-primary", response_model=TaxpayerResponse)
async def set_primary_taxpayer(taxpayer_id: int, db: Session = Depends(get_db)) -> Taxpayer:
    """Set a taxpayer as primary."""
    db_taxpayer = get_taxpayer_or_404(db, taxpayer_id)

    db.query(Taxpayer).filter(Taxpayer.is_primary == True).update({"is_primary": False})

    db_taxpayer.is_primary = True
    db.commit()
    db.refresh(db_taxpayer)
    return db_taxpayer
