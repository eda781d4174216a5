from pathlib import Path
from typing import Optional, Union

import yaml
from pydantic import ValidationError
from pydantic_settings import BaseSettings

from normalizer import NormalizerConfigError
from schemas import NormalizerConfig


class Settings(BaseSettings):
    # =========================
    # Internal Security
    # =========================
    # Internal routes reject every request while this is unset
    CONTROL_WORKER_SHARED_SECRET: Optional[str] = None

    # =========================
    # Normalizer
    # =========================
    NORMALIZER_CONFIG_PATH: Optional[str] = None
    STAGE_QUEUE_SIZE: int = 1000

    # =========================
    # Service Metadata
    # =========================
    SERVICE_NAME: str = "event-normalizer"
    ENV: str = "development"
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


settings = Settings()


# =========================
# Normalizer Config Loading
# =========================

def load_normalizer_config(path: Optional[Union[str, Path]] = None) -> NormalizerConfig:
    """
    Load and validate the normalizer configuration from a YAML file.

    The mapping may sit at the top level or under a `normalizer` key.
    No path means the all-defaults configuration.
    """
    if not path:
        return NormalizerConfig()

    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except OSError as e:
        raise NormalizerConfigError(f"failed to read configuration {path}: {e}") from e
    except yaml.YAMLError as e:
        raise NormalizerConfigError(f"failed to parse configuration {path}: {e}") from e

    if raw is None:
        raw = {}
    if isinstance(raw, dict) and "normalizer" in raw:
        raw = raw["normalizer"] or {}
    if not isinstance(raw, dict):
        raise NormalizerConfigError(f"configuration {path} must be a mapping")

    try:
        return NormalizerConfig.model_validate(raw)
    except ValidationError as e:
        raise NormalizerConfigError(f"failed to load configuration {path}: {e}") from e
