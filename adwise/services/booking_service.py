"""
Booking lifecycle: creation, NOC review, payment and fulfilment.

A booking carries three independent states:

* ``status``          pending -> confirmed -> active -> completed, with
                      pending/confirmed -> cancelled as the escape hatch
* ``noc_status``      not_applied (never moves) or pending -> approved | rejected
* ``payment_status``  pending -> completed

Each write is a conditional update on the state the decision was made
against, inside one unit of work. If another writer got there first the
update matches no row and nothing is committed.
"""
import logging
from dataclasses import dataclass
from datetime import date
from typing import Dict, FrozenSet, List, Optional

from adwise.core.config import settings
from adwise.core.errors import (
    AuthorizationError,
    InvalidRange,
    InvalidTransition,
    PersistenceError,
    ValidationError,
    VerificationFailed,
)
from adwise.core.principal import CREATE_BOOKINGS, PAY_BOOKINGS, REVIEW_BOOKINGS, Principal
from adwise.database.models import Booking, BookingStatus, CampaignStatus, NocStatus, PaymentStatus
from adwise.services.payment_service import PaymentGatewayAdapter
from adwise.services.pricing import calculate_total_cost
from adwise.services.repository import MarketplaceRepository

logger = logging.getLogger(__name__)

STATUS_TRANSITIONS: Dict[str, FrozenSet[str]] = {
    BookingStatus.pending.value: frozenset({BookingStatus.confirmed.value, BookingStatus.cancelled.value}),
    BookingStatus.confirmed.value: frozenset({BookingStatus.active.value, BookingStatus.cancelled.value}),
    BookingStatus.active.value: frozenset({BookingStatus.completed.value}),
    BookingStatus.completed.value: frozenset(),
    BookingStatus.cancelled.value: frozenset(),
}

PAYABLE_STATUSES = frozenset({BookingStatus.pending.value, BookingStatus.confirmed.value})
NOC_CLEARED = frozenset({NocStatus.approved.value, NocStatus.not_applied.value})
NOC_BLOCKING = frozenset({NocStatus.pending.value, NocStatus.rejected.value})

AUTO_CAMPAIGN_DESCRIPTION = "Auto-created campaign from billboard booking"


@dataclass
class PaymentOrder:
    booking_id: int
    order_id: str
    key_id: str
    amount: int  # paise
    currency: str
    reused: bool = False


@dataclass
class PaymentConfirmation:
    booking_id: int
    success: bool
    message: str
    campaign_id: Optional[int] = None
    already_processed: bool = False


class _LostRace(Exception):
    """The conditional update matched no row."""


class BookingLifecycleManager:
    def __init__(
        self,
        repository: MarketplaceRepository,
        gateway: PaymentGatewayAdapter,
        require_noc_before_payment: Optional[bool] = None,
        currency: Optional[str] = None,
    ):
        self.repository = repository
        self.gateway = gateway
        self.require_noc_before_payment = (
            settings.REQUIRE_NOC_BEFORE_PAYMENT if require_noc_before_payment is None else require_noc_before_payment
        )
        self.currency = currency or settings.PAYMENT_CURRENCY

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def get_booking(self, principal: Principal, booking_id: int) -> Booking:
        booking = self.repository.get_booking_with_relations(booking_id)
        is_customer = booking.customer_id == principal.profile_id
        is_owner = booking.billboard.owner_id == principal.profile_id
        if not (is_customer or is_owner):
            raise AuthorizationError("You do not have access to this booking")
        return booking

    def list_bookings(self, principal: Principal) -> List[Booking]:
        if principal.can(REVIEW_BOOKINGS):
            return self.repository.list_bookings_for_owner(principal.profile_id)
        return self.repository.list_bookings_for_customer(principal.profile_id)

    # ------------------------------------------------------------------
    # Customer: create
    # ------------------------------------------------------------------
    def create_booking(
        self,
        principal: Principal,
        billboard_id: int,
        start_date: date,
        end_date: date,
        campaign_name: str,
        notes: Optional[str] = None,
        creative_url: Optional[str] = None,
        creative_description: Optional[str] = None,
        noc_category: Optional[str] = None,
    ) -> Booking:
        principal.require(CREATE_BOOKINGS)
        if not campaign_name or not campaign_name.strip():
            raise ValidationError("Campaign name is required")
        if start_date is None or end_date is None:
            raise ValidationError("Start and end dates are required")
        if end_date <= start_date:
            raise InvalidRange(
                "End date must be after start date",
                details={"start_date": start_date.isoformat(), "end_date": end_date.isoformat()},
            )

        billboard = self.repository.get("billboards", billboard_id)
        if not billboard.is_available:
            raise ValidationError("Billboard is not available for booking", details={"billboard_id": billboard_id})

        total_cost = calculate_total_cost(start_date, end_date, billboard.price_per_month)
        noc_category = (noc_category or "").strip() or None
        noc_status = NocStatus.pending if noc_category else NocStatus.not_applied

        with self.repository.atomic():
            booking = self.repository.insert(
                "bookings",
                {
                    "billboard_id": billboard.id,
                    "customer_id": principal.profile_id,
                    "start_date": start_date,
                    "end_date": end_date,
                    "campaign_name": campaign_name.strip(),
                    "total_cost": total_cost,
                    "notes": notes,
                    "creative_url": creative_url,
                    "creative_description": creative_description,
                    "status": BookingStatus.pending.value,
                    "payment_status": PaymentStatus.pending.value,
                    "noc_status": noc_status.value,
                    "noc_category": noc_category,
                },
            )

        logger.info(
            "Booking %s created: billboard=%s customer=%s %s..%s total_cost=%s noc=%s",
            booking.id,
            billboard.id,
            principal.profile_id,
            start_date,
            end_date,
            total_cost,
            noc_status.value,
        )
        return self.repository.get_booking_with_relations(booking.id)

    # ------------------------------------------------------------------
    # Owner: NOC review and status changes
    # ------------------------------------------------------------------
    def _load_for_owner(self, principal: Principal, booking_id: int) -> Booking:
        principal.require(REVIEW_BOOKINGS)
        booking = self.repository.get_booking_with_relations(booking_id)
        if booking.billboard.owner_id != principal.profile_id:
            raise AuthorizationError("Only the billboard owner can manage this booking")
        return booking

    def _apply(self, booking_id: int, patch: Dict[str, object], expected: Dict[str, object]) -> Booking:
        with self.repository.atomic():
            if not self.repository.update("bookings", booking_id, patch, expected=expected):
                raise InvalidTransition(
                    "Booking changed while the update was in progress; reload and try again",
                    details={"booking_id": booking_id},
                )
        return self.repository.get_booking_with_relations(booking_id)

    def approve_noc(self, principal: Principal, booking_id: int) -> Booking:
        return self.decide_noc(principal, booking_id, approved=True)

    def reject_noc(self, principal: Principal, booking_id: int) -> Booking:
        return self.decide_noc(principal, booking_id, approved=False)

    def decide_noc(self, principal: Principal, booking_id: int, approved: bool) -> Booking:
        booking = self._load_for_owner(principal, booking_id)
        if booking.noc_status != NocStatus.pending.value:
            raise InvalidTransition(
                f"NOC is {booking.noc_status}; only a pending NOC can be decided",
                details={"booking_id": booking_id, "noc_status": booking.noc_status},
            )
        if booking.status == BookingStatus.cancelled.value:
            raise InvalidTransition(
                "Cannot decide the NOC of a cancelled booking",
                details={"booking_id": booking_id, "status": booking.status},
            )

        if approved:
            updated = self._apply(
                booking_id,
                {"noc_status": NocStatus.approved.value},
                expected={"noc_status": NocStatus.pending.value, "status": booking.status},
            )
        else:
            if BookingStatus.cancelled.value not in STATUS_TRANSITIONS[booking.status]:
                raise InvalidTransition(
                    f"Cannot reject the NOC of a {booking.status} booking",
                    details={"booking_id": booking_id, "status": booking.status},
                )
            updated = self._apply(
                booking_id,
                {"noc_status": NocStatus.rejected.value, "status": BookingStatus.cancelled.value},
                expected={"noc_status": NocStatus.pending.value, "status": booking.status},
            )

        logger.info(
            "NOC %s for booking %s by owner %s",
            "approved" if approved else "rejected",
            booking_id,
            principal.profile_id,
        )
        return updated

    def advance_status(self, principal: Principal, booking_id: int, new_status: str) -> Booking:
        valid = {s.value for s in BookingStatus}
        if new_status not in valid:
            raise ValidationError(f"Unknown booking status: {new_status}", details={"allowed": sorted(valid)})

        booking = self._load_for_owner(principal, booking_id)
        if new_status not in STATUS_TRANSITIONS[booking.status]:
            raise InvalidTransition(
                f"Cannot move booking from {booking.status} to {new_status}",
                details={"booking_id": booking_id, "allowed": sorted(STATUS_TRANSITIONS[booking.status])},
            )
        if new_status == BookingStatus.confirmed.value and booking.noc_status in NOC_BLOCKING:
            raise InvalidTransition(
                "The NOC must be approved before the booking can be confirmed",
                details={"booking_id": booking_id, "noc_status": booking.noc_status},
            )

        updated = self._apply(booking_id, {"status": new_status}, expected={"status": booking.status})
        logger.info("Booking %s moved %s -> %s by owner %s", booking_id, booking.status, new_status, principal.profile_id)
        return updated

    # ------------------------------------------------------------------
    # Customer: payment
    # ------------------------------------------------------------------
    def initiate_payment(self, principal: Principal, booking_id: int) -> PaymentOrder:
        principal.require(PAY_BOOKINGS)
        booking = self.repository.get_booking_with_relations(booking_id)
        if booking.customer_id != principal.profile_id:
            raise AuthorizationError("Only the customer who made the booking can pay for it")
        if booking.payment_status != PaymentStatus.pending.value:
            raise InvalidTransition("Booking is already paid", details={"booking_id": booking_id})
        if booking.status not in PAYABLE_STATUSES:
            raise InvalidTransition(
                f"A {booking.status} booking cannot be paid",
                details={"booking_id": booking_id, "status": booking.status},
            )
        if booking.noc_status == NocStatus.rejected.value or (
            self.require_noc_before_payment and booking.noc_status not in NOC_CLEARED
        ):
            raise InvalidTransition(
                "The billboard owner must approve the NOC before payment",
                details={"booking_id": booking_id, "noc_status": booking.noc_status},
            )

        amount = booking.total_cost * 100
        if booking.razorpay_order_id:
            # total_cost never changes, so an earlier order is still valid
            logger.info("Reusing Razorpay order %s for booking %s", booking.razorpay_order_id, booking_id)
            return PaymentOrder(
                booking_id=booking_id,
                order_id=booking.razorpay_order_id,
                key_id=self.gateway.key_id,
                amount=amount,
                currency=self.currency,
                reused=True,
            )

        order = self.gateway.create_order(
            amount,
            self.currency,
            receipt_id=f"booking_{booking_id}",
            metadata={
                "booking_id": booking_id,
                "billboard_id": booking.billboard_id,
                "campaign_name": booking.campaign_name or "",
            },
        )
        self._apply(
            booking_id,
            {"razorpay_order_id": order.order_id},
            expected={
                "payment_status": PaymentStatus.pending.value,
                "razorpay_order_id": None,
                "status": sorted(PAYABLE_STATUSES),
                "noc_status": booking.noc_status,
            },
        )
        return PaymentOrder(
            booking_id=booking_id,
            order_id=order.order_id,
            key_id=order.key_id,
            amount=order.amount,
            currency=order.currency,
        )

    def confirm_payment(
        self,
        order_id: str,
        payment_id: str,
        signature: str,
        booking_id: int,
    ) -> PaymentConfirmation:
        """Apply a verified gateway callback to the booking.

        Safe to call repeatedly: once the payment is recorded, later calls
        return success without touching the booking or creating campaigns.
        """
        if not order_id or not payment_id or not signature or booking_id is None:
            raise ValidationError("order id, payment id, signature and booking id are required")

        if not self.gateway.verify_payment(order_id, payment_id, signature):
            logger.error(
                "Payment signature mismatch: booking=%s order=%s payment=%s; needs manual reconciliation",
                booking_id,
                order_id,
                payment_id,
            )
            raise VerificationFailed(
                "Payment verification failed",
                details={"booking_id": booking_id, "order_id": order_id, "payment_id": payment_id},
            )

        try:
            with self.repository.atomic():
                result = self._record_payment(order_id, payment_id, booking_id)
        except PersistenceError as exc:
            logger.error(
                "Verified payment %s for booking %s was not recorded; needs manual reconciliation",
                payment_id,
                booking_id,
            )
            exc.hint = VerificationFailed.hint
            raise
        except _LostRace:
            booking = self.repository.get("bookings", booking_id)
            if booking.payment_status == PaymentStatus.completed.value:
                return self._already_processed(booking, payment_id)
            raise InvalidTransition(
                "Booking changed while the payment was being recorded",
                details={"booking_id": booking_id},
            )

        if result.already_processed:
            return result
        logger.info("Payment verified: booking=%s payment=%s campaign=%s", booking_id, payment_id, result.campaign_id)
        return result

    def _already_processed(self, booking: Booking, payment_id: str) -> PaymentConfirmation:
        if booking.razorpay_payment_id != payment_id:
            logger.warning(
                "Booking %s already paid with %s; ignoring callback for payment %s",
                booking.id,
                booking.razorpay_payment_id,
                payment_id,
            )
        return PaymentConfirmation(
            booking_id=booking.id,
            success=True,
            message="Payment already verified",
            campaign_id=booking.campaign_id,
            already_processed=True,
        )

    def _record_payment(self, order_id: str, payment_id: str, booking_id: int) -> PaymentConfirmation:
        booking = self.repository.get("bookings", booking_id, for_update=True)
        if booking.payment_status == PaymentStatus.completed.value:
            return self._already_processed(booking, payment_id)

        if booking.razorpay_order_id != order_id:
            logger.error(
                "Verified payment %s for order %s does not match booking %s order %s; needs manual reconciliation",
                payment_id,
                order_id,
                booking_id,
                booking.razorpay_order_id,
            )
            raise VerificationFailed(
                "Payment order does not belong to this booking",
                details={"booking_id": booking_id, "order_id": order_id},
            )
        if booking.status not in PAYABLE_STATUSES:
            logger.error(
                "Verified payment %s received for %s booking %s; needs manual reconciliation",
                payment_id,
                booking.status,
                booking_id,
            )
            raise VerificationFailed(
                f"Payment received for a {booking.status} booking",
                details={"booking_id": booking_id, "status": booking.status},
            )

        campaign_id = booking.campaign_id
        if campaign_id is None:
            campaign = self.repository.insert(
                "campaigns",
                {
                    "customer_id": booking.customer_id,
                    "name": booking.campaign_name or f"Booking #{booking.id}",
                    "description": AUTO_CAMPAIGN_DESCRIPTION,
                    "budget": booking.total_cost,
                    "status": CampaignStatus.active.value,
                    "start_date": booking.start_date,
                    "end_date": booking.end_date,
                },
            )
            campaign_id = campaign.id
            logger.info("Auto-created campaign %s for booking %s", campaign_id, booking_id)

        updated = self.repository.update(
            "bookings",
            booking_id,
            {
                "payment_status": PaymentStatus.completed.value,
                "status": BookingStatus.confirmed.value,
                "razorpay_order_id": order_id,
                "razorpay_payment_id": payment_id,
                "campaign_id": campaign_id,
            },
            expected={
                "payment_status": PaymentStatus.pending.value,
                "status": booking.status,
                "razorpay_order_id": order_id,
            },
        )
        if not updated:
            raise _LostRace()

        return PaymentConfirmation(
            booking_id=booking_id,
            success=True,
            message="Payment verified successfully",
            campaign_id=campaign_id,
        )
