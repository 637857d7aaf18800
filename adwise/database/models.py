# adwise/database/models.py
import enum
from datetime import datetime

from sqlalchemy import Boolean, Column, Date, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from adwise.database.database import Base


class UserRole(str, enum.Enum):
    customer = "customer"
    owner = "owner"


class TrafficTier(str, enum.Enum):
    low = "low"
    medium = "medium"
    high = "high"


class BookingStatus(str, enum.Enum):
    pending = "pending"
    confirmed = "confirmed"
    active = "active"
    completed = "completed"
    cancelled = "cancelled"


class PaymentStatus(str, enum.Enum):
    pending = "pending"
    completed = "completed"


class NocStatus(str, enum.Enum):
    not_applied = "not_applied"
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


class CampaignStatus(str, enum.Enum):
    draft = "draft"
    active = "active"
    paused = "paused"
    completed = "completed"


# ==========================
# ✅ PROFILE MODEL
# ==========================
class Profile(Base):
    __tablename__ = "profiles"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(100), unique=True, nullable=False, index=True)
    password = Column(String(255), nullable=False)
    full_name = Column(String(150), nullable=True)
    company_name = Column(String(150), nullable=True)
    phone = Column(String(20), nullable=True)
    role = Column(String(20), nullable=False, default=UserRole.customer.value)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    billboards = relationship("Billboard", back_populates="owner")
    bookings = relationship("Booking", back_populates="customer")
    campaigns = relationship("Campaign", back_populates="customer")


# ==========================
# ✅ BILLBOARD MODEL
# ==========================
class Billboard(Base):
    __tablename__ = "billboards"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(Integer, ForeignKey("profiles.id"), nullable=False, index=True)
    title = Column(String(150), nullable=False)
    description = Column(Text, nullable=True)
    location = Column(String(300), nullable=False)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    width = Column(Float, nullable=False)
    height = Column(Float, nullable=False)
    price_per_month = Column(Float, nullable=False)
    traffic_score = Column(String(20), nullable=True)
    daily_impressions = Column(Integer, nullable=True)
    image_url = Column(String(500), nullable=True)
    is_available = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    owner = relationship("Profile", back_populates="billboards")
    bookings = relationship("Booking", back_populates="billboard")


# ==========================
# ✅ CAMPAIGN MODEL
# ==========================
class Campaign(Base):
    __tablename__ = "campaigns"

    id = Column(Integer, primary_key=True, index=True)
    customer_id = Column(Integer, ForeignKey("profiles.id"), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    budget = Column(Float, nullable=True)
    status = Column(String(20), nullable=True)  # null means draft
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    customer = relationship("Profile", back_populates="campaigns")
    bookings = relationship("Booking", back_populates="campaign")


# ==========================
# ✅ BOOKING MODEL
# ==========================
class Booking(Base):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    billboard_id = Column(Integer, ForeignKey("billboards.id"), nullable=False, index=True)
    customer_id = Column(Integer, ForeignKey("profiles.id"), nullable=False, index=True)
    campaign_id = Column(Integer, ForeignKey("campaigns.id"), nullable=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    campaign_name = Column(String(200), nullable=True)
    total_cost = Column(Integer, nullable=False)  # whole rupees
    notes = Column(Text, nullable=True)
    creative_url = Column(String(500), nullable=True)
    creative_description = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default=BookingStatus.pending.value)
    payment_status = Column(String(20), nullable=False, default=PaymentStatus.pending.value)
    noc_status = Column(String(20), nullable=False, default=NocStatus.not_applied.value)
    noc_category = Column(String(100), nullable=True)
    razorpay_order_id = Column(String(100), nullable=True, index=True)
    razorpay_payment_id = Column(String(100), nullable=True, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    billboard = relationship("Billboard", back_populates="bookings")
    customer = relationship("Profile", back_populates="bookings")
    campaign = relationship("Campaign", back_populates="bookings")
