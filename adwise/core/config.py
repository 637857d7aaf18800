"""
Application configuration and settings
"""
import os
from dotenv import load_dotenv

load_dotenv()

# Redis Configuration
REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")
REDIS_KEY_PREFIX = os.getenv("REDIS_KEY_PREFIX", "adwise")

# Database Configuration (reference)
DATABASE_URL = os.getenv("DATABASE_URL")

# Razorpay Configuration
RAZORPAY_KEY_ID = os.getenv("RAZORPAY_KEY_ID", "")
RAZORPAY_KEY_SECRET = os.getenv("RAZORPAY_KEY_SECRET", "")
PAYMENT_CURRENCY = os.getenv("PAYMENT_CURRENCY", "INR")

# Booking policy: the owner must clear the NOC before the customer can pay
REQUIRE_NOC_BEFORE_PAYMENT = os.getenv("REQUIRE_NOC_BEFORE_PAYMENT", "true").lower() == "true"

# TomTom traffic flow API
TOMTOM_API_KEY = os.getenv("TOMTOM_API_KEY", "")
TOMTOM_BASE_URL = os.getenv("TOMTOM_BASE_URL", "https://api.tomtom.com")
TRAFFIC_TIMEOUT_SECONDS = float(os.getenv("TRAFFIC_TIMEOUT_SECONDS", "10"))

# AI recommendations (OpenAI-compatible gateway)
AI_API_KEY = os.getenv("AI_API_KEY", "")
AI_BASE_URL = os.getenv("AI_BASE_URL", "https://ai.gateway.lovable.dev/v1")
AI_MODEL = os.getenv("AI_MODEL", "google/gemini-2.5-flash")
AI_MAX_REQUESTS_PER_MINUTE = int(os.getenv("AI_MAX_REQUESTS_PER_MINUTE", "10"))

# Auth
SECRET_KEY = os.getenv("SECRET_KEY", "supersecretkey")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))
BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "12"))

# CORS
DEFAULT_CORS_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:5173",
    "http://localhost:8080",
    "http://127.0.0.1:3000",
    "http://127.0.0.1:5173",
    "http://127.0.0.1:8080",
]
CORS_ORIGINS_ENV = os.getenv("CORS_ORIGINS", "")
if CORS_ORIGINS_ENV:
    CORS_ORIGINS = [origin.strip() for origin in CORS_ORIGINS_ENV.split(",") if origin.strip()]
else:
    CORS_ORIGINS = DEFAULT_CORS_ORIGINS


class Settings:
    PROJECT_NAME: str = "AdWise Billboard Marketplace API"
    VERSION: str = "1.0.0"
    REDIS_URL = REDIS_URL
    REDIS_KEY_PREFIX = REDIS_KEY_PREFIX
    RAZORPAY_KEY_ID = RAZORPAY_KEY_ID
    RAZORPAY_KEY_SECRET = RAZORPAY_KEY_SECRET
    PAYMENT_CURRENCY = PAYMENT_CURRENCY
    REQUIRE_NOC_BEFORE_PAYMENT = REQUIRE_NOC_BEFORE_PAYMENT
    TOMTOM_API_KEY = TOMTOM_API_KEY
    TOMTOM_BASE_URL = TOMTOM_BASE_URL
    TRAFFIC_TIMEOUT_SECONDS = TRAFFIC_TIMEOUT_SECONDS
    AI_API_KEY = AI_API_KEY
    AI_BASE_URL = AI_BASE_URL
    AI_MODEL = AI_MODEL
    AI_MAX_REQUESTS_PER_MINUTE = AI_MAX_REQUESTS_PER_MINUTE
    SECRET_KEY = SECRET_KEY
    ACCESS_TOKEN_EXPIRE_MINUTES = ACCESS_TOKEN_EXPIRE_MINUTES
    BCRYPT_ROUNDS = BCRYPT_ROUNDS
    CORS_ORIGINS = CORS_ORIGINS


settings = Settings()
