import os

from dotenv import load_dotenv

load_dotenv()

# "sqlite://" is an in-memory database; it lives as long as the process.
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite://")

SECRET_KEY = os.getenv("SECRET_KEY", "change-me-flight-booking-secret")
TOKEN_MAX_AGE_SECONDS = int(os.getenv("TOKEN_MAX_AGE_SECONDS", str(24 * 60 * 60)))
BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "10"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "3000"))
