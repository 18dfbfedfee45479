import os
from typing import Any, Optional

import keyring
import keyring.errors
import yaml

APP_VERSION = "1.0.0"


class YamlConfig:
    """Engine settings kept in a YAML file.

    With ``ENCRYPT_SETTINGS=1`` the webhook credentials live in the system
    keyring and the file only records that a value was stored. Environment
    variables listed in ``ENV_OVERRIDES`` win over the file on load.
    """

    SENSITIVE_KEYS = frozenset({"event_webhook_url", "event_webhook_token"})

    ENV_OVERRIDES = {
        "DB_PATH": "db_path",
        "READINESS_LOG_LEVEL": "log_level",
        "READINESS_WEBHOOK_URL": "event_webhook_url",
    }

    MASK = "****"

    def __init__(self, path: str = "settings.yaml", service: Optional[str] = None) -> None:
        self.path = path
        self.encrypt = os.environ.get("ENCRYPT_SETTINGS") == "1"
        self.service = service or os.environ.get("READINESS_KEYRING_SERVICE", "readiness-engine")

    def _read_file(self) -> dict:
        if not os.path.exists(self.path):
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}

    def _write_file(self, data: dict) -> None:
        with open(self.path, "w", encoding="utf-8") as f:
            yaml.safe_dump(data, f, sort_keys=True)

    def load(self, apply_env: bool = True) -> dict:
        data = self._read_file()
        if self.encrypt:
            for key in self.SENSITIVE_KEYS & set(data):
                secret = keyring.get_password(self.service, key)
                if secret is None:
                    data.pop(key)
                else:
                    data[key] = secret
        if apply_env:
            for env_name, key in self.ENV_OVERRIDES.items():
                if os.environ.get(env_name):
                    data[key] = os.environ[env_name]
        return data

    def save(self, data: dict) -> None:
        """Write ``data``; keys set to ``None`` are left out of the file."""
        out = {k: v for k, v in data.items() if v is not None}
        if self.encrypt:
            for key in self.SENSITIVE_KEYS & set(out):
                keyring.set_password(self.service, key, str(out[key]))
                out[key] = True
        self._write_file(out)

    def update(self, **changes: Any) -> dict:
        """Merge ``changes`` into the stored settings and return the result."""
        data = self.load(apply_env=False)
        data.update(changes)
        self.save(data)
        return {k: v for k, v in data.items() if v is not None}

    def forget_secrets(self) -> None:
        """Drop stored webhook credentials from the keyring and the file."""
        for key in self.SENSITIVE_KEYS:
            try:
                keyring.delete_password(self.service, key)
            except keyring.errors.PasswordDeleteError:
                pass
        data = self._read_file()
        if self.SENSITIVE_KEYS & set(data):
            self._write_file({k: v for k, v in data.items() if k not in self.SENSITIVE_KEYS})

    @classmethod
    def masked(cls, data: dict) -> dict:
        return {k: cls.MASK if k in cls.SENSITIVE_KEYS and v else v for k, v in data.items()}
