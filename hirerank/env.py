import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


def load_env() -> None:
    """Load .env from the working directory if present. Existing variables win."""
    env_path = Path.cwd() / ".env"
    if env_path.exists():
        load_dotenv(dotenv_path=env_path)


@dataclass
class Settings:
    db_path: Path
    log_level: str
    log_dir: Path
    synonyms_path: Optional[Path]


def load_settings() -> Settings:
    """Read hirerank settings from the environment."""
    synonyms = os.getenv("HIRERANK_SYNONYMS")
    return Settings(
        db_path=Path(os.getenv("HIRERANK_DB", "data/hirerank.db")),
        log_level=os.getenv("HIRERANK_LOG_LEVEL", "INFO"),
        log_dir=Path(os.getenv("HIRERANK_LOG_DIR", "logs")),
        synonyms_path=Path(synonyms) if synonyms else None,
    )
