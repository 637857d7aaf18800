# adwise/routers/auth_routes.py
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from adwise.auth import get_current_principal, token_for_profile
from adwise.core.principal import Principal
from adwise.database import models, schemas
from adwise.database.database import get_db
from adwise.core.passwords import hash_password, needs_rehash, verify_password

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


# -------------------- Register --------------------
@router.post("/register", status_code=status.HTTP_201_CREATED, response_model=schemas.ProfileResponse)
def register(payload: schemas.ProfileCreate, db: Session = Depends(get_db)):
    """Create a customer or billboard-owner profile."""
    existing = db.query(models.Profile).filter(models.Profile.email == payload.email).first()
    if existing:
        logger.warning("Attempt to register with existing email: %s", payload.email)
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered")

    profile = models.Profile(
        email=payload.email,
        password=hash_password(payload.password),
        full_name=payload.full_name,
        company_name=payload.company_name,
        phone=payload.phone,
        role=payload.role.value,
    )
    db.add(profile)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered")
    db.refresh(profile)
    logger.info("Registered %s profile %s", profile.role, profile.id)
    return profile


# -------------------- Login --------------------
@router.post("/login", response_model=schemas.Token)
def login(form_data: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(get_db)):
    """
    Expects form-urlencoded data with username (email) and password.
    """
    profile = db.query(models.Profile).filter(models.Profile.email == form_data.username).first()
    if not profile or not verify_password(form_data.password, profile.password):
        logger.warning("Login failed for %s", form_data.username)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    if needs_rehash(profile.password):
        profile.password = hash_password(form_data.password)
        db.commit()
        logger.info("Upgraded password hash for profile %s", profile.id)

    logger.info("Login successful for profile %s", profile.id)
    return {
        "access_token": token_for_profile(profile),
        "token_type": "bearer",
        "role": profile.role,
        "profile_id": profile.id,
    }


# -------------------- Me --------------------
@router.get("/me", response_model=schemas.ProfileResponse)
def me(principal: Principal = Depends(get_current_principal), db: Session = Depends(get_db)):
    return db.get(models.Profile, principal.profile_id)
