# adwise/routers/payment_routes.py
"""
Payment routes (Razorpay)

Both handlers answer with a JSON body on failure rather than an HTTP
exception so the checkout client can show ``error`` directly.
"""
import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from adwise.auth import get_current_principal
from adwise.core.config import settings
from adwise.core.errors import AdWiseError, GatewayUnavailable
from adwise.core.principal import Principal
from adwise.database import schemas
from adwise.deps import get_lifecycle_manager, get_payment_gateway
from adwise.services.booking_service import BookingLifecycleManager
from adwise.services.payment_service import PaymentGatewayAdapter

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/payments", tags=["Payments"])


@router.get("/health")
def payment_health(gateway: PaymentGatewayAdapter = Depends(get_payment_gateway)) -> Dict[str, Any]:
    gateway_status = gateway.status()
    if gateway.configured:
        gateway_status["status"] = "healthy"
        gateway_status["message"] = "Razorpay integration configured"
    else:
        gateway_status["status"] = "unhealthy"
        gateway_status["message"] = "Razorpay credentials not configured"
    return gateway_status


@router.get("/gateway-status")
def get_gateway_status(gateway: PaymentGatewayAdapter = Depends(get_payment_gateway)) -> Dict[str, Any]:
    return gateway.status()


@router.post("/create-order")
def create_order(
    payload: schemas.CreateOrderRequest,
    principal: Principal = Depends(get_current_principal),
    gateway: PaymentGatewayAdapter = Depends(get_payment_gateway),
):
    """Raw gateway order creation. Booking checkout goes through /bookings/{id}/pay."""
    try:
        order = gateway.create_order(
            payload.amount,
            payload.currency or settings.PAYMENT_CURRENCY,
            receipt_id=payload.receipt or f"receipt_{principal.profile_id}",
            metadata=payload.notes,
        )
    except GatewayUnavailable as e:
        logger.error("Error in create-order: %s", e.message)
        return JSONResponse(status_code=500, content=e.to_dict())
    return {"order": order.raw, "key_id": order.key_id}


@router.post("/verify")
def verify_payment(
    payload: schemas.VerifyPaymentRequest,
    principal: Principal = Depends(get_current_principal),
    manager: BookingLifecycleManager = Depends(get_lifecycle_manager),
):
    """Apply the checkout callback. Repeating it after success is harmless."""
    logger.info("Verifying payment for booking %s (principal %s)", payload.booking_id, principal.profile_id)
    try:
        result = manager.confirm_payment(
            payload.razorpay_order_id,
            payload.razorpay_payment_id,
            payload.razorpay_signature,
            payload.booking_id,
        )
    except AdWiseError as e:
        return JSONResponse(status_code=e.status_code, content=e.to_dict())

    return schemas.VerifyPaymentResponse(
        success=result.success,
        message=result.message,
        booking_id=result.booking_id,
        campaign_id=result.campaign_id,
        already_processed=result.already_processed,
    )
