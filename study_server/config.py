"""
Server Configuration

Loads configuration from environment variables and provides defaults.
Supports loading from .env file using python-dotenv.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

from dotenv import load_dotenv

from reading_engine.models.config import StudyConfig

# Single .env at the project root
root_env = Path(__file__).resolve().parent.parent / ".env"
if root_env.exists():
    load_dotenv(root_env)

DATA_SOURCES = ("memory", "json", "firebase")


def _split_csv(value: Optional[str]) -> Tuple[str, ...]:
    if not value:
        return ()
    return tuple(v.strip() for v in value.split(",") if v.strip())


@dataclass
class ServerConfig:
    """Server configuration."""

    # Server settings
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"
    cors_origins: Tuple[str, ...] = ("*",)

    # Data source: "memory" | "json" | "firebase"
    data_source: str = "memory"
    # When data_source=json: file holding every document
    store_json_path: Optional[Path] = None
    # When data_source=firebase: path to service account JSON and optional project id
    firebase_credentials_path: Optional[Path] = None
    firebase_project_id: Optional[str] = None

    # Emails with study-wide admin rights (lower-cased)
    super_admin_emails: Tuple[str, ...] = ()

    # Study tunables
    washout_days: int = 14
    block_size: int = 50

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """Load configuration from environment variables."""
        base_dir = Path(__file__).parent.parent
        data_source = os.getenv("DATA_SOURCE", "").strip().lower() or "memory"
        if data_source not in DATA_SOURCES:
            data_source = "memory"

        def _path_env(key: str, default: Optional[Path] = None) -> Optional[Path]:
            v = os.getenv(key)
            if not v:
                return default
            p = Path(v)
            return p if p.is_absolute() else (base_dir / p).resolve()

        return cls(
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "8000")),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            cors_origins=_split_csv(os.getenv("CORS_ORIGINS")) or ("*",),
            data_source=data_source,
            store_json_path=_path_env("STORE_JSON_PATH", base_dir / "data" / "store.json"),
            firebase_credentials_path=_path_env("FIREBASE_CREDENTIALS_PATH") or _path_env("GOOGLE_APPLICATION_CREDENTIALS"),
            firebase_project_id=os.getenv("FIREBASE_PROJECT_ID") or None,
            super_admin_emails=tuple(e.lower() for e in _split_csv(os.getenv("SUPER_ADMIN_EMAILS"))),
            washout_days=int(os.getenv("WASHOUT_DAYS", "14")),
            block_size=int(os.getenv("BLOCK_SIZE", "50")),
        )

    def validate(self) -> Tuple[bool, List[str]]:
        """
        Validate the configuration.

        Returns:
            (is_valid, list_of_errors)
        """
        errors = []
        if self.data_source == "firebase":
            cred = self.firebase_credentials_path
            if cred and not Path(cred).is_file():
                errors.append(f"Firebase credentials file not found: {cred}")
            if not cred and not self.firebase_project_id:
                errors.append("DATA_SOURCE=firebase needs FIREBASE_CREDENTIALS_PATH or FIREBASE_PROJECT_ID")
        if self.data_source == "json" and not self.store_json_path:
            errors.append("DATA_SOURCE=json needs STORE_JSON_PATH")
        if self.block_size < 1:
            errors.append(f"BLOCK_SIZE must be at least 1, got {self.block_size}")
        if self.washout_days < 0:
            errors.append(f"WASHOUT_DAYS cannot be negative, got {self.washout_days}")
        return len(errors) == 0, errors

    def study_config(self) -> StudyConfig:
        """Engine tunables derived from the environment."""
        return StudyConfig.from_dict({"washout_days": self.washout_days, "block_size": self.block_size})


# Global config instance
_config: Optional[ServerConfig] = None


def get_config() -> ServerConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = ServerConfig.from_env()
    return _config


def reload_config() -> ServerConfig:
    """Reload configuration from environment."""
    global _config
    _config = None
    return get_config()
