import os
from typing import List

from dotenv import load_dotenv

load_dotenv()

DEFAULT_ENV_NAME = "not yet set"


def unescape_private_key(value: str) -> str:
    # Los .env guardan la llave en una sola línea con "\n" literales
    return (value or "").replace("\\n", "\n")


def _split_csv(value: str) -> List[str]:
    return [item.strip() for item in (value or "").split(",") if item.strip()]


# ===== Firebase Admin (service account) =====
FIREBASE_ADMIN_PROJECT_ID = os.getenv("FIREBASE_ADMIN_PROJECT_ID", "")
FIREBASE_ADMIN_CLIENT_EMAIL = os.getenv("FIREBASE_ADMIN_CLIENT_EMAIL", "")
FIREBASE_ADMIN_PRIVATE_KEY = unescape_private_key(os.getenv("FIREBASE_ADMIN_PRIVATE_KEY", ""))

# ===== Identity Toolkit REST (sign-in) =====
FIREBASE_WEB_API_KEY = os.getenv("FIREBASE_WEB_API_KEY", "")
IDENTITY_HTTP_TIMEOUT = float(os.getenv("IDENTITY_HTTP_TIMEOUT", "20"))

# ===== Server =====
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "0"))
ALLOWED_ORIGINS = _split_csv(
    os.getenv("ALLOWED_ORIGINS", "http://localhost:3000,https://deployedApp.com")
)

# ===== Blog =====
BLOG_COLLECTION = os.getenv("BLOG_COLLECTION", "posts")
BLOG_PAGE_SIZE = int(os.getenv("BLOG_PAGE_SIZE", "20"))


def app_environment() -> str:
    """Nombre del entorno actual (APP_ENV, o NODE_ENV como respaldo); se lee en cada llamada."""
    return os.getenv("APP_ENV") or os.getenv("NODE_ENV") or DEFAULT_ENV_NAME


def firebase_credentials_configured() -> bool:
    return bool(FIREBASE_ADMIN_PROJECT_ID and FIREBASE_ADMIN_CLIENT_EMAIL and FIREBASE_ADMIN_PRIVATE_KEY)
