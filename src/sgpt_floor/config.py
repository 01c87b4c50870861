"""Runtime configuration for sgpt-floor."""

import os
from dataclasses import dataclass, field
from pathlib import Path

# Default data directory
DATA_DIR = Path(__file__).parent.parent.parent / "data"


def _env_flag(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Settings:
    """Engine and service settings.

    The two policy flags decide the open equipment questions explicitly:

    - ``resting_holds_equipment``: resting clients count toward equipment
      occupancy (conservative changeover margin).
    - ``prefer_declared_substitutes``: try an exercise's declared substitute
      list before the movement-pattern scan.
    """

    data_dir: Path = field(default_factory=lambda: DATA_DIR)
    resting_holds_equipment: bool = True
    prefer_declared_substitutes: bool = False
    max_clients: int = 6
    high_rpe_threshold: int = 9
    high_rpe_extension: int = 30
    moderate_rpe_extension: int = 15
    log_level: str = "INFO"
    narration_model: str = "gpt-4o-mini"
    openai_api_key: str | None = None

    @property
    def db_path(self) -> Path:
        return get_db_path(self.data_dir)

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from ``SGPT_*`` environment variables."""
        data_dir = os.environ.get("SGPT_DATA_DIR")
        return cls(
            data_dir=Path(data_dir) if data_dir else DATA_DIR,
            resting_holds_equipment=_env_flag("SGPT_RESTING_HOLDS_EQUIPMENT", True),
            prefer_declared_substitutes=_env_flag(
                "SGPT_PREFER_DECLARED_SUBSTITUTES", False
            ),
            max_clients=int(os.environ.get("SGPT_MAX_CLIENTS", "6")),
            log_level=os.environ.get("SGPT_LOG_LEVEL", "INFO").upper(),
            narration_model=os.environ.get("SGPT_NARRATION_MODEL", "gpt-4o-mini"),
            openai_api_key=os.environ.get("OPENAI_API_KEY") or None,
        )


def get_db_path(data_dir: Path | None = None) -> Path:
    """Get the database file path."""
    if data_dir is None:
        data_dir = DATA_DIR
    data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir / "sgpt_floor.db"
