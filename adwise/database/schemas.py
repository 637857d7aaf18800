# adwise/database/schemas.py
# =========================================================
# 🧩 AdWise Billboard Marketplace Schemas (Pydantic v2)
# =========================================================

from datetime import date, datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, EmailStr, Field

from adwise.database.models import BookingStatus, TrafficTier, UserRole


# =========================================================
# ✅ Base Config for ORM Compatibility (Pydantic v2)
# =========================================================
class ConfigModel(BaseModel):
    class Config:
        from_attributes = True


# =========================================================
# 👤 Profile Schemas
# =========================================================
class ProfileBase(BaseModel):
    email: EmailStr
    full_name: Optional[str] = None
    company_name: Optional[str] = None
    phone: Optional[str] = None


class ProfileCreate(ProfileBase):
    password: str = Field(..., min_length=6)
    role: UserRole = UserRole.customer


class ProfileResponse(ProfileBase, ConfigModel):
    id: int
    role: str
    created_at: Optional[datetime] = None


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    role: str
    profile_id: int


# =========================================================
# 🪧 Billboard Schemas
# =========================================================
class BillboardBase(BaseModel):
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    location: str = Field(..., min_length=1)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    width: float = Field(..., gt=0)
    height: float = Field(..., gt=0)
    price_per_month: float = Field(..., gt=0)
    traffic_score: Optional[TrafficTier] = None
    daily_impressions: Optional[int] = Field(None, ge=0)
    image_url: Optional[str] = None
    is_available: bool = True


class BillboardCreate(BillboardBase):
    pass


class BillboardUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    width: Optional[float] = Field(None, gt=0)
    height: Optional[float] = Field(None, gt=0)
    price_per_month: Optional[float] = Field(None, gt=0)
    traffic_score: Optional[TrafficTier] = None
    daily_impressions: Optional[int] = Field(None, ge=0)
    image_url: Optional[str] = None
    is_available: Optional[bool] = None


class BillboardResponse(ConfigModel):
    id: int
    owner_id: int
    title: str
    description: Optional[str] = None
    location: str
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    width: float
    height: float
    price_per_month: float
    traffic_score: Optional[str] = None
    daily_impressions: Optional[int] = None
    image_url: Optional[str] = None
    is_available: bool
    created_at: Optional[datetime] = None


class BillboardSummary(ConfigModel):
    id: int
    title: str
    location: str
    price_per_month: float
    owner_id: int


# =========================================================
# 📅 Booking Schemas
# =========================================================
class BookingCreate(BaseModel):
    billboard_id: int
    start_date: date
    end_date: date
    campaign_name: str = Field(..., min_length=1)
    notes: Optional[str] = None
    creative_url: Optional[str] = None
    creative_description: Optional[str] = None
    noc_category: Optional[str] = None


class BookingResponse(ConfigModel):
    id: int
    billboard_id: int
    customer_id: int
    campaign_id: Optional[int] = None
    start_date: date
    end_date: date
    campaign_name: Optional[str] = None
    total_cost: int
    notes: Optional[str] = None
    creative_url: Optional[str] = None
    creative_description: Optional[str] = None
    status: str
    payment_status: str
    noc_status: str
    noc_category: Optional[str] = None
    razorpay_order_id: Optional[str] = None
    razorpay_payment_id: Optional[str] = None
    created_at: Optional[datetime] = None
    billboard: Optional[BillboardSummary] = None


class NocDecision(BaseModel):
    approved: bool


class StatusChange(BaseModel):
    status: BookingStatus


# =========================================================
# 💳 Payment Schemas
# =========================================================
class PaymentOrderResponse(BaseModel):
    booking_id: int
    order_id: str
    key_id: str
    amount: int  # paise
    currency: str
    reused: bool = False


class CreateOrderRequest(BaseModel):
    amount: int = Field(..., description="Amount in paise")
    currency: str = "INR"
    receipt: Optional[str] = None
    notes: Dict[str, Any] = Field(default_factory=dict)


class VerifyPaymentRequest(BaseModel):
    razorpay_order_id: Optional[str] = None
    razorpay_payment_id: Optional[str] = None
    razorpay_signature: Optional[str] = None
    booking_id: Optional[int] = None


class VerifyPaymentResponse(BaseModel):
    success: bool
    message: str
    booking_id: int
    campaign_id: Optional[int] = None
    already_processed: bool = False


# =========================================================
# 🚦 Traffic & AI Schemas
# =========================================================
class TrafficRequest(BaseModel):
    latitude: Optional[float] = None
    longitude: Optional[float] = None


class RecommendationRequest(BaseModel):
    budget: Optional[float] = Field(None, gt=0)
    preferred_traffic: Optional[TrafficTier] = None
    location_preference: Optional[str] = None


class RecommendationResponse(BaseModel):
    success: bool = True
    recommendations: List[Dict[str, Any]] = Field(default_factory=list)
    summary: str = ""
    message: Optional[str] = None


# =========================================================
# 📣 Campaign & Dashboard Schemas
# =========================================================
class CampaignCreate(BaseModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    budget: Optional[float] = Field(None, ge=0)
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class CampaignResponse(ConfigModel):
    id: int
    customer_id: int
    name: str
    description: Optional[str] = None
    budget: Optional[float] = None
    status: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    created_at: Optional[datetime] = None


class DashboardStats(BaseModel):
    role: str
    total_billboards: Optional[int] = None
    total_bookings: int = 0
    total_revenue: Optional[float] = None
    total_campaigns: Optional[int] = None
    active_campaigns: Optional[int] = None
    total_spent: Optional[float] = None
    recent_activity: List[BookingResponse] = Field(default_factory=list)
