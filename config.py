"""Configuration management for Spendguard.

Reads configuration from ~/.config/spendguard.toml and creates default config if needed.
"""

from pathlib import Path
from dataclasses import dataclass
from decimal import Decimal
import tomllib
import tomli_w

from engine.rules import (
    BAD_ALERT_THRESHOLD,
    GOOD_DROP_RATIO,
    HABIT_THRESHOLD,
    IMPULSE_THRESHOLD,
)


@dataclass
class Config:
    """Application configuration."""

    base_dir: Path
    db_data_dir: Path
    db_filename: str
    log_level: str
    log_dir: Path
    default_user: str = "guest"
    llm_enabled: bool = False
    llm_provider: str = "openai"
    llm_openai_api_key: str = ""
    llm_openai_model: str = "gpt-4o-mini"
    impulse_threshold: Decimal = IMPULSE_THRESHOLD
    habit_threshold: int = HABIT_THRESHOLD
    bad_alert_threshold: Decimal = BAD_ALERT_THRESHOLD
    good_drop_ratio: Decimal = GOOD_DROP_RATIO
    persist_dismissals: bool = False

    @property
    def db_path(self) -> Path:
        """Get the full database path (data_dir/filename)."""
        return self.db_data_dir / self.db_filename

    @classmethod
    def default(cls) -> "Config":
        """Create a Config with default values."""
        home = Path.home()
        base_dir = home / "data" / "spendguard"
        return cls(
            base_dir=base_dir,
            db_data_dir=base_dir / "db",
            db_filename="spendguard.db",
            log_level="INFO",
            log_dir=base_dir / "logs",
        )


def get_config_path() -> Path:
    """Get the path to the config file."""
    return Path.home() / ".config" / "spendguard.toml"


def get_migrations_dir() -> Path:
    """Get the path to the migrations directory.

    This is always relative to the code location, not configurable.
    """
    return Path(__file__).parent / "db" / "migrations"


def load_config() -> Config:
    """Load configuration from file, creating default if it doesn't exist.

    Returns:
        Config object with loaded or default values.
    """
    config_path = get_config_path()

    # If config doesn't exist, create it with defaults
    if not config_path.exists():
        config = Config.default()
        _write_config(config)
        return config

    with open(config_path, "rb") as f:
        data = tomllib.load(f)

    return parse_config(data)


def parse_config(data: dict) -> Config:
    """Build a Config from parsed TOML data, filling defaults for missing keys.

    Args:
        data: Dictionary as returned by tomllib.

    Returns:
        Config object.
    """
    base_dir = Path(data.get("base_dir", Path.home() / "data" / "spendguard"))
    default_user = data.get("default_user", "guest")

    db_config = data.get("database", {})
    db_data_dir = Path(db_config.get("data_dir", base_dir / "db"))
    db_filename = db_config.get("filename", "spendguard.db")

    log_config = data.get("logging", {})
    log_level = log_config.get("level", "INFO")
    log_dir = Path(log_config.get("log_dir", base_dir / "logs"))

    llm_config = data.get("llm", {})

    # TOML floats go through str() so 0.25 stays 0.25
    rules = data.get("rules", {})
    impulse_threshold = Decimal(str(rules.get("impulse_threshold", IMPULSE_THRESHOLD)))
    bad_alert_threshold = Decimal(
        str(rules.get("bad_alert_threshold", BAD_ALERT_THRESHOLD))
    )
    good_drop_ratio = Decimal(str(rules.get("good_drop_ratio", GOOD_DROP_RATIO)))

    return Config(
        base_dir=base_dir,
        db_data_dir=db_data_dir,
        db_filename=db_filename,
        log_level=log_level,
        log_dir=log_dir,
        default_user=default_user,
        llm_enabled=llm_config.get("enabled", False),
        llm_provider=llm_config.get("provider", "openai"),
        llm_openai_api_key=llm_config.get("openai_api_key", ""),
        llm_openai_model=llm_config.get("openai_model", "gpt-4o-mini"),
        impulse_threshold=impulse_threshold,
        habit_threshold=int(rules.get("habit_threshold", HABIT_THRESHOLD)),
        bad_alert_threshold=bad_alert_threshold,
        good_drop_ratio=good_drop_ratio,
        persist_dismissals=rules.get("persist_dismissals", False),
    )


def _write_config(config: Config) -> None:
    """Write config to the config file.

    Args:
        config: Config object to write.
    """
    config_path = get_config_path()

    # Ensure config directory exists
    config_path.parent.mkdir(parents=True, exist_ok=True)

    data = {
        "base_dir": str(config.base_dir),
        "default_user": config.default_user,
        "database": {
            "data_dir": str(config.db_data_dir),
            "filename": config.db_filename,
        },
        "logging": {
            "level": config.log_level,
            "log_dir": str(config.log_dir),
        },
        "llm": {
            "enabled": config.llm_enabled,
            "provider": config.llm_provider,
            "openai_api_key": config.llm_openai_api_key,
            "openai_model": config.llm_openai_model,
        },
        "rules": {
            "impulse_threshold": float(config.impulse_threshold),
            "habit_threshold": config.habit_threshold,
            "bad_alert_threshold": float(config.bad_alert_threshold),
            "good_drop_ratio": float(config.good_drop_ratio),
            "persist_dismissals": config.persist_dismissals,
        },
    }

    with open(config_path, "wb") as f:
        tomli_w.dump(data, f)
