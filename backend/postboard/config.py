"""Application settings and validation."""

import os
import re
from typing import Mapping, Optional


class ConfigError(RuntimeError):
    """Raised when the environment does not describe a runnable service."""


_ENVIRONMENTS = ("development", "production", "test")
_LOG_LEVELS = ("error", "warn", "info", "debug")
_TRUE = ("true", "1", "yes", "on")
_FALSE = ("false", "0", "no", "off")
_DURATION = re.compile(r"^(\d+)\s*([smhdw]?)$")
_UNIT_SECONDS = {"": 1, "s": 1, "m": 60, "h": 3600, "d": 86400, "w": 604800}


def parse_duration(value: str) -> int:
    """Parse `7d`, `12h`, `30m`, `45s` or plain seconds into seconds."""
    match = _DURATION.match(value.strip().lower())
    if not match:
        raise ValueError(f"invalid duration: {value!r}")
    amount, unit = match.groups()
    seconds = int(amount) * _UNIT_SECONDS[unit]
    if seconds <= 0:
        raise ValueError(f"duration must be positive: {value!r}")
    return seconds


class Settings:
    NODE_ENV: str
    PORT: int
    DATABASE_URL: str
    JWT_SECRET: str
    JWT_EXPIRES_IN: Optional[int]
    CORS_ORIGIN: str
    LOG_LEVEL: str
    ENABLE_LOGGING: bool
    BCRYPT_ROUNDS: int
    MAX_BODY_BYTES: int

    def __init__(self, environ: Optional[Mapping[str, str]] = None):
        env = os.environ if environ is None else environ
        self._errors = []
        self.NODE_ENV = self._choice(env, "NODE_ENV", _ENVIRONMENTS)
        self.PORT = self._int(env, "PORT", 8080, 1, 65535)
        self.DATABASE_URL = self._required(env, "DATABASE_URL")
        # no default on purpose: a missing secret must stop the process
        self.JWT_SECRET = self._required(env, "JWT_SECRET")
        self.JWT_EXPIRES_IN = self._duration(env, "JWT_EXPIRES_IN")
        self.CORS_ORIGIN = env.get("CORS_ORIGIN", "http://localhost:3000").strip()
        self.LOG_LEVEL = self._choice(env, "LOG_LEVEL", _LOG_LEVELS, default="info")
        self.ENABLE_LOGGING = self._bool(env, "ENABLE_LOGGING", True)
        self.BCRYPT_ROUNDS = self._int(env, "BCRYPT_ROUNDS", 12, 4, 31)
        self.MAX_BODY_BYTES = self._int(env, "MAX_BODY_BYTES", 10 * 1024 * 1024, 1024, 1024 ** 3)  # 10 MB default
        self._validate()

    @property
    def is_production(self) -> bool:
        return self.NODE_ENV == "production"

    def _validate(self):
        if not re.match(r"^https?://", self.CORS_ORIGIN):
            self._errors.append(f"CORS_ORIGIN must be an http(s) URL, got {self.CORS_ORIGIN!r}")
        if self._errors:
            raise ConfigError("invalid configuration: " + "; ".join(self._errors))

    def _required(self, env, name):
        value = env.get(name, "").strip()
        if not value:
            self._errors.append(f"{name} is required")
        return value

    def _choice(self, env, name, choices, default=None):
        value = env.get(name, "").strip().lower()
        if not value:
            if default is None:
                self._errors.append(f"{name} is required (one of {', '.join(choices)})")
                return ""
            return default
        if value not in choices:
            self._errors.append(f"{name} must be one of {', '.join(choices)}, got {value!r}")
        return value

    def _int(self, env, name, default, low, high):
        raw = env.get(name, "").strip()
        if not raw:
            return default
        try:
            value = int(raw)
        except ValueError:
            self._errors.append(f"{name} must be an integer, got {raw!r}")
            return default
        if not low <= value <= high:
            self._errors.append(f"{name} must be between {low} and {high}, got {value}")
        return value

    def _bool(self, env, name, default):
        raw = env.get(name, "").strip().lower()
        if not raw:
            return default
        if raw in _TRUE:
            return True
        if raw in _FALSE:
            return False
        self._errors.append(f"{name} must be a boolean, got {raw!r}")
        return default

    def _duration(self, env, name):
        raw = env.get(name, "").strip()
        if not raw:
            return None
        try:
            return parse_duration(raw)
        except ValueError as exc:
            self._errors.append(f"{name}: {exc}")
            return None
