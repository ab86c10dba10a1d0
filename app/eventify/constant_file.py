from dotenv import load_dotenv
import os

# Load environment variables from .env
load_dotenv()


def required_env(name: str) -> str:
    value = os.getenv(name)
    if not value:
        raise RuntimeError(f"{name} must be set (environment or .env)")
    return value


# ------------------ Database ------------------
DB_USER = os.getenv("DB_USER")
DB_PASSWORD = os.getenv("DB_PASSWORD")
DB_HOST = os.getenv("DB_HOST", "localhost")
DB_PORT = os.getenv("DB_PORT", "5432")
DB_NAME = os.getenv("DB_NAME", "eventify")

DATABASE_URL = os.getenv(
    "DATABASE_URL",
    f"postgresql+psycopg2://{DB_USER}:{DB_PASSWORD}@{DB_HOST}:{DB_PORT}/{DB_NAME}",
)

# ------------------ Auth ------------------
JWT_SECRET = required_env("JWT_SECRET")
JWT_ALGORITHM = "HS256"
JWT_EXPIRE_MINUTES = int(os.getenv("JWT_EXPIRE_MINUTES", "1440"))

OTP_EXPIRE_MINUTES = 5

# ------------------ Email ------------------
eventify_email = os.getenv("EMAIL_USER", "")
eventify_email_password = os.getenv("EMAIL_PASSWORD", "")
smtp_host = os.getenv("SMTP_HOST", "smtp.gmail.com")
smtp_port = int(os.getenv("SMTP_PORT", "587"))
email_from_name = os.getenv("EMAIL_FROM_NAME", "Eventify")

password_reset_subject = "Eventify - Password Reset OTP"
app_url = os.getenv("APP_URL", "http://localhost:8000")

# ------------------ Scheduler ------------------
REMINDER_SCHEDULER_ENABLED = os.getenv("REMINDER_SCHEDULER_ENABLED", "true").lower() in ("1", "true", "yes")
REMINDER_INTERVAL_MINUTES = int(os.getenv("REMINDER_INTERVAL_MINUTES", "60"))

# ------------------ Misc ------------------
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://localhost:3001").split(",")
    if origin.strip()
]

DEFAULT_PAGE_SIZE = 12
MAX_PAGE_SIZE = 100
