# adwise/routers/health.py
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from adwise.core.redis import health_check_redis
from adwise.database.database import get_db

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
def health(db: Session = Depends(get_db)):
    """Liveness plus a trivial database round trip."""
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        raise HTTPException(status_code=503, detail=f"Database error: {e.__class__.__name__}") from e
    return {"ok": True, "database": "ok"}


@router.get("/redis")
async def redis_health():
    result = await health_check_redis()
    if result["status"] != "healthy":
        # Do not leak secrets; just return an operational error
        raise HTTPException(status_code=503, detail=f"Redis error: {result.get('error')}")
    return result
