"""Layout and logging configuration."""

from dataclasses import dataclass
import os

from dotenv import find_dotenv, load_dotenv

from errors import ConfigError

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class LayoutSettings:
    node_separation: float = 500.0
    level_separation: float = 350.0
    spouse_separation: float = 250.0  # gap inside a couple, smaller than node_separation

    def __post_init__(self):
        for name in ("node_separation", "level_separation", "spouse_separation"):
            if getattr(self, name) <= 0:
                raise ConfigError(f"{name} must be positive, got {getattr(self, name)}")
        if self.spouse_separation >= self.node_separation:
            raise ConfigError(
                f"spouse_separation ({self.spouse_separation}) must be smaller than "
                f"node_separation ({self.node_separation})"
            )


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from None


def load_settings() -> LayoutSettings:
    """Load layout settings from the environment (and a .env file, if present)."""
    load_dotenv(find_dotenv(usecwd=True))
    defaults = LayoutSettings()
    return LayoutSettings(
        node_separation=_float_env("FAMTREE_NODE_SEPARATION", defaults.node_separation),
        level_separation=_float_env("FAMTREE_LEVEL_SEPARATION", defaults.level_separation),
        spouse_separation=_float_env("FAMTREE_SPOUSE_SEPARATION", defaults.spouse_separation),
    )


def load_log_level() -> str:
    load_dotenv(find_dotenv(usecwd=True))
    level = os.getenv("FAMTREE_LOG_LEVEL", "INFO").upper()
    if level not in LOG_LEVELS:
        raise ConfigError(f"FAMTREE_LOG_LEVEL must be one of {LOG_LEVELS}, got {level!r}")
    return level
