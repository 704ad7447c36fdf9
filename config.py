"""
Configuration for the shop backend.

Settings come from environment variables (a local .env file is loaded first).
"""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from dotenv import load_dotenv

load_dotenv()


def _project_root() -> Path:
    return Path(__file__).resolve().parent


@dataclass
class Settings:
    """Runtime settings for the API and the record store."""

    data_dir: Path = field(default_factory=lambda: _project_root() / "data")

    # JWT
    jwt_secret: str = "dev-secret-change"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24 * 7  # 7 days

    log_level: str = "INFO"
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    port: int = 8000

    @classmethod
    def from_env(cls) -> "Settings":
        defaults = cls()
        origins = os.getenv("CORS_ORIGINS")
        return cls(
            data_dir=Path(os.getenv("DATA_DIR", str(defaults.data_dir))),
            jwt_secret=os.getenv("JWT_SECRET", defaults.jwt_secret),
            jwt_algorithm=os.getenv("JWT_ALGORITHM", defaults.jwt_algorithm),
            access_token_expire_minutes=int(
                os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", defaults.access_token_expire_minutes)
            ),
            log_level=os.getenv("LOG_LEVEL", defaults.log_level).upper(),
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()] if origins else defaults.cors_origins,
            port=int(os.getenv("PORT", defaults.port)),
        )


settings = Settings.from_env()
