# adwise/auth.py

from datetime import datetime, timedelta

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from adwise.core.config import settings
from adwise.core.principal import Principal
from adwise.database import models
from adwise.database.database import get_db

# =====================================
# ✅ Configurations
# =====================================
SECRET_KEY = settings.SECRET_KEY
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = settings.ACCESS_TOKEN_EXPIRE_MINUTES

# =====================================
# ✅ JWT Helpers
# =====================================
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")


def create_access_token(data: dict) -> str:
    """Create a new JWT access token."""
    to_encode = data.copy()
    expire = datetime.utcnow() + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def token_for_profile(profile: models.Profile) -> str:
    return create_access_token({"sub": str(profile.id), "role": profile.role})


def decode_access_token(token: str) -> dict:
    """Decode and verify a JWT token."""
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )


# =====================================
# ✅ Current Principal
# =====================================
def get_current_principal(
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> Principal:
    """Resolve the bearer token to a principal for the profile it names."""
    payload = decode_access_token(token)
    subject = payload.get("sub")
    role = payload.get("role")
    if not subject or not role:
        raise HTTPException(status_code=401, detail="Invalid credentials")

    try:
        profile_id = int(subject)
    except (TypeError, ValueError):
        raise HTTPException(status_code=401, detail="Invalid credentials")

    profile = db.get(models.Profile, profile_id)
    if profile is None:
        raise HTTPException(status_code=404, detail="Profile not found")
    # the stored role wins over whatever the token claims
    return Principal.for_role(profile.id, profile.role, email=profile.email)


# =====================================
# ✅ Capability-based Access Control
# =====================================
def require_capability(capability: str):
    """Dependency to restrict access to principals holding ``capability``."""
    def checker(principal: Principal = Depends(get_current_principal)) -> Principal:
        if not principal.can(capability):
            raise HTTPException(
                status_code=403,
                detail=f"Access forbidden: {capability} capability required",
            )
        return principal
    return checker
