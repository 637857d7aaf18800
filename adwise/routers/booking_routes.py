# adwise/routers/booking_routes.py
"""
Booking lifecycle routes: create, NOC review, status changes and payment
initiation. All state rules live in BookingLifecycleManager; these handlers
only translate errors into HTTP responses.
"""
import logging
from typing import List

from fastapi import APIRouter, Depends, Response, status

from adwise.auth import get_current_principal
from adwise.core.errors import AdWiseError
from adwise.core.principal import Principal
from adwise.database import schemas
from adwise.deps import get_lifecycle_manager, http_error
from adwise.services.booking_service import BookingLifecycleManager
from adwise.services.noc_certificate import certificate_filename, generate_noc_pdf

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bookings", tags=["Bookings"])


@router.post("", status_code=status.HTTP_201_CREATED, response_model=schemas.BookingResponse)
def create_booking(
    payload: schemas.BookingCreate,
    principal: Principal = Depends(get_current_principal),
    manager: BookingLifecycleManager = Depends(get_lifecycle_manager),
):
    try:
        return manager.create_booking(principal, **payload.model_dump())
    except AdWiseError as e:
        raise http_error(e) from e


@router.get("", response_model=List[schemas.BookingResponse])
def list_bookings(
    principal: Principal = Depends(get_current_principal),
    manager: BookingLifecycleManager = Depends(get_lifecycle_manager),
):
    """Customers see their own bookings; owners see bookings on their billboards."""
    return manager.list_bookings(principal)


@router.get("/{booking_id}", response_model=schemas.BookingResponse)
def get_booking(
    booking_id: int,
    principal: Principal = Depends(get_current_principal),
    manager: BookingLifecycleManager = Depends(get_lifecycle_manager),
):
    try:
        return manager.get_booking(principal, booking_id)
    except AdWiseError as e:
        raise http_error(e) from e


@router.post("/{booking_id}/noc", response_model=schemas.BookingResponse)
def decide_noc(
    booking_id: int,
    payload: schemas.NocDecision,
    principal: Principal = Depends(get_current_principal),
    manager: BookingLifecycleManager = Depends(get_lifecycle_manager),
):
    try:
        return manager.decide_noc(principal, booking_id, payload.approved)
    except AdWiseError as e:
        raise http_error(e) from e


@router.post("/{booking_id}/status", response_model=schemas.BookingResponse)
def change_status(
    booking_id: int,
    payload: schemas.StatusChange,
    principal: Principal = Depends(get_current_principal),
    manager: BookingLifecycleManager = Depends(get_lifecycle_manager),
):
    try:
        return manager.advance_status(principal, booking_id, payload.status.value)
    except AdWiseError as e:
        raise http_error(e) from e


@router.get("/{booking_id}/noc.pdf")
def download_noc(
    booking_id: int,
    principal: Principal = Depends(get_current_principal),
    manager: BookingLifecycleManager = Depends(get_lifecycle_manager),
):
    try:
        booking = manager.get_booking(principal, booking_id)
        pdf = generate_noc_pdf(booking)
    except AdWiseError as e:
        raise http_error(e) from e
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{certificate_filename(booking)}"'},
    )


@router.post("/{booking_id}/pay", response_model=schemas.PaymentOrderResponse)
def initiate_payment(
    booking_id: int,
    principal: Principal = Depends(get_current_principal),
    manager: BookingLifecycleManager = Depends(get_lifecycle_manager),
):
    """Create (or reuse) the Razorpay order the checkout widget opens."""
    try:
        order = manager.initiate_payment(principal, booking_id)
    except AdWiseError as e:
        raise http_error(e) from e
    return {
        "booking_id": order.booking_id,
        "order_id": order.order_id,
        "key_id": order.key_id,
        "amount": order.amount,
        "currency": order.currency,
        "reused": order.reused,
    }
