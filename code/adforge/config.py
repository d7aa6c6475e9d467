"""
AdForge - Client Configuration
Loads environment variables from .env and exposes them as typed settings.
"""
import os
from pathlib import Path
from dotenv import load_dotenv

# Load the nearest .env walking up from this file
_here = Path(__file__).resolve()
for _parent in [_here.parent, *_here.parents]:
    _candidate = _parent / ".env"
    if _candidate.exists():
        load_dotenv(_candidate, override=False)
        break


class Settings:
    # Backend
    API_BASE_URL: str = os.getenv("ADFORGE_API_BASE_URL", "http://localhost:8000").rstrip("/")
    API_TOKEN: str = os.getenv("ADFORGE_API_TOKEN", "")
    HTTP_TIMEOUT_S: float = float(os.getenv("ADFORGE_HTTP_TIMEOUT_S", "10"))

    # Job polling
    POLL_INTERVAL_S: float = float(os.getenv("ADFORGE_POLL_INTERVAL_S", "1.0"))
    POLL_MAX_ATTEMPTS: int = int(os.getenv("ADFORGE_POLL_MAX_ATTEMPTS", "180"))
    CINEMATIC_POLL_INTERVAL_S: float = float(os.getenv("ADFORGE_CINEMATIC_POLL_INTERVAL_S", "5.0"))

    # Client state
    STATE_DB_PATH: str = os.getenv(
        "ADFORGE_STATE_DB_PATH",
        str(Path.home() / ".adforge" / "state.db"),
    )
    GENERATION_REDIRECT_AFTER_S: int = int(os.getenv("ADFORGE_GENERATION_REDIRECT_AFTER_S", "180"))
    TRACKED_JOB_TTL_S: int = int(os.getenv("ADFORGE_TRACKED_JOB_TTL_S", "1800"))

    # Application
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    @property
    def api_token_set(self) -> bool:
        """True when a real (non-placeholder) API token is set."""
        placeholders = {"", "your_adforge_api_token_here"}
        return self.API_TOKEN not in placeholders


settings = Settings()
