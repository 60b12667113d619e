from pathlib import Path
import os

from dotenv import load_dotenv

# Load environment variables from repo root and taskboard/.env (if present).
REPO_ROOT = Path(__file__).resolve().parents[1]
load_dotenv(REPO_ROOT / ".env")
load_dotenv(Path(__file__).resolve().parent / ".env")

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./taskboard.db")
SECRET_KEY = os.getenv("SECRET_KEY", "change-me")
# Sessions last a week
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(7 * 24 * 60)))

GOOGLE_CLIENT_ID = os.getenv("GOOGLE_CLIENT_ID", "")

PORT = int(os.getenv("PORT", "5000"))

_cors_origins = os.getenv("CORS_ORIGINS", "http://localhost:5173")
CORS_ORIGINS = [origin.strip() for origin in _cors_origins.split(",") if origin.strip()]

# Client side
API_URL = os.getenv("TASKBOARD_API_URL", f"http://localhost:{PORT}/api")
PREFERENCES_PATH = Path(
    os.getenv("TASKBOARD_PREFERENCES", str(Path.home() / ".taskboard" / "preferences.json"))
)
