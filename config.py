import os

# Database
DATABASE_URL = os.getenv("DATABASE_URL", "mongodb://localhost:27017")
DATABASE_NAME = os.getenv("DATABASE_NAME", "school-cms")
DB_MAX_POOL_SIZE = int(os.getenv("DB_MAX_POOL_SIZE", "10"))
DB_SERVER_SELECTION_TIMEOUT_MS = int(os.getenv("DB_SERVER_SELECTION_TIMEOUT_MS", "5000"))
DB_SOCKET_TIMEOUT_MS = int(os.getenv("DB_SOCKET_TIMEOUT_MS", "45000"))

# Auth
# The fallback secret is insecure; main.py warns when it is in use.
JWT_SECRET_IS_DEFAULT = os.getenv("JWT_SECRET") is None
JWT_SECRET = os.getenv("JWT_SECRET", "dev-secret-change-me")
JWT_ALGO = "HS256"
JWT_EXPIRE_DAYS = int(os.getenv("JWT_EXPIRE_DAYS", "7"))
AUTH_COOKIE_NAME = os.getenv("AUTH_COOKIE_NAME", "auth-token")
COOKIE_SECURE = os.getenv("COOKIE_SECURE", "false").lower() == "true"
MIN_PASSWORD_LENGTH = 6

# Seeding
SEED_SECRET = os.getenv("SEED_SECRET")
SEED_ADMIN_EMAIL = os.getenv("SEED_ADMIN_EMAIL", "admin@school.edu")
SEED_ADMIN_PASSWORD = os.getenv("SEED_ADMIN_PASSWORD", "admin123")

# Media host
CLOUDINARY_CLOUD_NAME = os.getenv("CLOUDINARY_CLOUD_NAME")
CLOUDINARY_API_KEY = os.getenv("CLOUDINARY_API_KEY")
CLOUDINARY_API_SECRET = os.getenv("CLOUDINARY_API_SECRET")

# Local uploads
UPLOAD_DIR = os.getenv("UPLOAD_DIR", os.path.join("public", "uploads"))
UPLOAD_URL_PREFIX = "/uploads"

# Rate limits
RATE_LIMIT_ENABLED = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"
LOGIN_RATE_LIMIT = os.getenv("LOGIN_RATE_LIMIT", "10/minute")
CONTACT_RATE_LIMIT = os.getenv("CONTACT_RATE_LIMIT", "5/minute")

# Server
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
PORT = int(os.getenv("PORT", "8000"))
