import os
from dataclasses import dataclass
from typing import Mapping, Optional


class ConfigError(ValueError):
    pass


def _int_env(env: Mapping[str, str], name: str, default: int) -> int:
    raw = (env.get(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from None


def _float_env(env: Mapping[str, str], name: str, default: float) -> float:
    raw = (env.get(name) or "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from None


@dataclass(frozen=True)
class Settings:
    host: str = "0.0.0.0"
    port: int = 3000
    max_body_bytes: int = 1024 * 1024
    body_read_timeout: float = 30.0
    shutdown_timeout: int = 10
    service_name: str = "Webhook Receiver"
    log_level: str = "INFO"

    def __post_init__(self):
        if not 1 <= self.port <= 65535:
            raise ConfigError(f"PORT out of range: {self.port}")
        if self.max_body_bytes <= 0:
            raise ConfigError("MAX_BODY_BYTES must be positive")
        if self.body_read_timeout <= 0:
            raise ConfigError("BODY_READ_TIMEOUT must be positive")
        if self.shutdown_timeout < 0:
            raise ConfigError("SHUTDOWN_TIMEOUT must not be negative")

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from environment variables (HOST, PORT, ...)."""
        env = os.environ if env is None else env
        return cls(
            host=(env.get("HOST") or "").strip() or cls.host,
            port=_int_env(env, "PORT", cls.port),
            max_body_bytes=_int_env(env, "MAX_BODY_BYTES", cls.max_body_bytes),
            body_read_timeout=_float_env(env, "BODY_READ_TIMEOUT", cls.body_read_timeout),
            shutdown_timeout=_int_env(env, "SHUTDOWN_TIMEOUT", cls.shutdown_timeout),
            service_name=(env.get("SERVICE_NAME") or "").strip() or cls.service_name,
            log_level=(env.get("LOG_LEVEL") or "").strip().upper() or cls.log_level,
        )
