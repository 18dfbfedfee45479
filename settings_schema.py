from typing import Optional

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError

from config import YamlConfig
from errors import ValidationError


class EngineSettings(BaseModel):
    db_path: str = "readiness.db"
    log_level: str = "INFO"
    corrected_rolling_windows: bool = False
    acute_window_days: int = Field(default=7, ge=1)
    chronic_window_days: int = Field(default=28, ge=1)
    event_webhook_url: Optional[str] = None
    event_webhook_token: Optional[str] = None
    event_timeout: float = Field(default=5.0, gt=0)


def validate_settings(data: dict) -> EngineSettings:
    try:
        return EngineSettings(**data)
    except PydanticValidationError as e:
        raise ValidationError(str(e))


def load_settings(path: str = "settings.yaml") -> EngineSettings:
    """Read ``path`` with environment overrides applied."""
    return validate_settings(YamlConfig(path).load())
