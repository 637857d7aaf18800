"""
Persistence gateway over the SQLAlchemy session.

Every write goes through ``atomic()``: commit on success, rollback and
``PersistenceError`` on any database failure. ``update`` is a conditional
UPDATE so callers can express compare-and-set transitions.
"""
import logging
from contextlib import contextmanager
from datetime import date
from typing import Any, Dict, Iterator, List, Optional, Type

from sqlalchemy import func, select, update as sql_update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from adwise.core.errors import NotFound, PersistenceError
from adwise.database.models import Base, Billboard, Booking, Campaign, Profile

logger = logging.getLogger(__name__)

RECENT_ACTIVITY_LIMIT = 5

TABLES: Dict[str, Type[Base]] = {
    "profiles": Profile,
    "billboards": Billboard,
    "bookings": Booking,
    "campaigns": Campaign,
}


def _model_for(table: str) -> Type[Base]:
    try:
        return TABLES[table]
    except KeyError:
        raise ValueError(f"Unknown table: {table}") from None


def _columns(model: Type[Base]) -> set:
    return {col.name for col in model.__table__.columns}


class MarketplaceRepository:
    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def atomic(self) -> Iterator[Session]:
        try:
            yield self.db
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("Database write failed; transaction rolled back")
            raise PersistenceError("Database write failed", details={"reason": str(exc.__class__.__name__)}) from exc
        except Exception:
            self.db.rollback()
            raise

    # ------------------------------------------------------------------
    # Generic CRUD
    # ------------------------------------------------------------------
    def insert(self, table: str, record: Dict[str, Any]) -> Any:
        model = _model_for(table)
        unknown = set(record) - _columns(model)
        if unknown:
            raise ValueError(f"Unknown columns for {table}: {sorted(unknown)}")
        obj = model(**record)
        self.db.add(obj)
        self.db.flush()
        return obj

    def update(
        self,
        table: str,
        record_id: int,
        patch: Dict[str, Any],
        expected: Optional[Dict[str, Any]] = None,
    ) -> bool:
        """Apply ``patch`` to one row if it still matches ``expected``.

        Returns False when no row matched, i.e. the row is missing or another
        writer changed one of the expected columns first.
        """
        model = _model_for(table)
        conditions = [model.id == record_id]
        for column, value in (expected or {}).items():
            attr = getattr(model, column)
            if isinstance(value, (list, tuple, set, frozenset)):
                conditions.append(attr.in_(list(value)))
            elif value is None:
                conditions.append(attr.is_(None))
            else:
                conditions.append(attr == value)

        stmt = sql_update(model).where(*conditions).values(**patch).execution_options(synchronize_session=False)
        result = self.db.execute(stmt)
        if result.rowcount != 1:
            return False
        # refresh any instance already in the identity map
        self.db.get(model, record_id, populate_existing=True)
        logger.debug("Updated %s %s with %s", table, record_id, patch)
        return True

    def select(self, table: str, order_by: Optional[str] = None, **filters: Any) -> List[Any]:
        model = _model_for(table)
        stmt = select(model)
        for column, value in filters.items():
            stmt = stmt.where(getattr(model, column) == value)
        if order_by:
            desc = order_by.startswith("-")
            col = getattr(model, order_by.lstrip("-"))
            stmt = stmt.order_by(col.desc() if desc else col.asc())
        return list(self.db.execute(stmt).scalars().all())

    def get(self, table: str, record_id: int, for_update: bool = False) -> Any:
        model = _model_for(table)
        stmt = select(model).where(model.id == record_id)
        if for_update:
            stmt = stmt.with_for_update()
        obj = self.db.execute(stmt.execution_options(populate_existing=True)).scalars().first()
        if obj is None:
            raise NotFound(f"{table[:-1].capitalize()} {record_id} not found")
        return obj

    # ------------------------------------------------------------------
    # Named queries
    # ------------------------------------------------------------------
    def get_booking_with_relations(self, booking_id: int) -> Booking:
        stmt = (
            select(Booking)
            .options(
                joinedload(Booking.billboard).joinedload(Billboard.owner),
                joinedload(Booking.customer),
                joinedload(Booking.campaign),
            )
            .where(Booking.id == booking_id)
            .execution_options(populate_existing=True)
        )
        booking = self.db.execute(stmt).scalars().first()
        if booking is None:
            raise NotFound(f"Booking {booking_id} not found")
        return booking

    def list_bookings_for_customer(self, customer_id: int) -> List[Booking]:
        stmt = (
            select(Booking)
            .options(joinedload(Booking.billboard), joinedload(Booking.campaign))
            .where(Booking.customer_id == customer_id)
            .order_by(Booking.created_at.desc(), Booking.id.desc())
        )
        return list(self.db.execute(stmt).scalars().unique().all())

    def list_bookings_for_owner(self, owner_id: int) -> List[Booking]:
        stmt = (
            select(Booking)
            .join(Booking.billboard)
            .options(joinedload(Booking.billboard), joinedload(Booking.customer))
            .where(Billboard.owner_id == owner_id)
            .order_by(Booking.created_at.desc(), Booking.id.desc())
        )
        return list(self.db.execute(stmt).scalars().unique().all())

    def list_available_billboards(self) -> List[Billboard]:
        return self.select("billboards", order_by="id", is_available=True)

    def owner_stats(self, owner_id: int) -> Dict[str, Any]:
        billboard_count = self.db.execute(
            select(func.count(Billboard.id)).where(Billboard.owner_id == owner_id)
        ).scalar_one()
        booking_count, revenue = self.db.execute(
            select(func.count(Booking.id), func.coalesce(func.sum(Booking.total_cost), 0))
            .join(Booking.billboard)
            .where(Billboard.owner_id == owner_id)
        ).one()
        return {
            "total_billboards": billboard_count,
            "total_bookings": booking_count,
            "total_revenue": revenue,
            "recent_activity": self.list_bookings_for_owner(owner_id)[:RECENT_ACTIVITY_LIMIT],
        }

    def customer_stats(self, customer_id: int, today: Optional[date] = None) -> Dict[str, Any]:
        """A campaign counts as active while ``start_date <= today < end_date``."""
        today = today or date.today()
        campaigns = self.select("campaigns", customer_id=customer_id)
        booking_count, spent = self.db.execute(
            select(func.count(Booking.id), func.coalesce(func.sum(Booking.total_cost), 0)).where(
                Booking.customer_id == customer_id
            )
        ).one()
        return {
            "total_campaigns": len(campaigns),
            "active_campaigns": sum(
                1 for c in campaigns if c.start_date and c.end_date and c.start_date <= today < c.end_date
            ),
            "total_bookings": booking_count,
            "total_spent": spent,
            "recent_activity": self.list_bookings_for_customer(customer_id)[:RECENT_ACTIVITY_LIMIT],
        }
