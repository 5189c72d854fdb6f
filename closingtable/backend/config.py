"""Configuration helpers for backend runtime."""

from __future__ import annotations

import os
from dataclasses import dataclass

from closingtable.backend.mechanism import MechanismConfig

ENV_PREFIX = "CLOSINGTABLE_"


class ConfigurationError(ValueError):
    """Raised when an environment setting cannot be used."""


@dataclass(frozen=True)
class BackendSettings:
    total_min: float
    total_max: float
    bridge_zone_pct: float
    rounding_granularity: int
    offer_ttl_seconds: float
    result_ttl_seconds: float
    sweep_interval_seconds: float
    server_salt: str
    database_url: str | None
    host: str
    port: int
    log_level: str
    log_format: str
    cors_origins: tuple[str, ...]

    def mechanism_config(self) -> MechanismConfig:
        return MechanismConfig(
            total_min=self.total_min,
            total_max=self.total_max,
            bridge_zone_pct=self.bridge_zone_pct,
            rounding_granularity=self.rounding_granularity,
        )


def _env(name: str, default: str | None = None) -> str | None:
    return os.getenv(f"{ENV_PREFIX}{name}", default)


def _number(name: str, default: str, cast: type = float) -> float:
    raw = _env(name, default)
    try:
        return cast(raw)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"{ENV_PREFIX}{name} must be a number, got {raw!r}") from exc


def _origins(raw: str) -> tuple[str, ...]:
    return tuple(origin.strip().rstrip("/") for origin in raw.split(",") if origin.strip())


def load_settings() -> BackendSettings:
    settings = BackendSettings(
        total_min=_number("TOTAL_MIN", "50000"),
        total_max=_number("TOTAL_MAX", "500000"),
        bridge_zone_pct=_number("BRIDGE_ZONE_PCT", "0.10"),
        rounding_granularity=int(_number("ROUNDING_GRANULARITY", "1000", int)),
        offer_ttl_seconds=_number("OFFER_TTL_SECONDS", str(24 * 60 * 60)),
        result_ttl_seconds=_number("RESULT_TTL_SECONDS", str(7 * 24 * 60 * 60)),
        sweep_interval_seconds=_number("SWEEP_INTERVAL_SECONDS", str(15 * 60)),
        server_salt=_env("SERVER_SALT", "dev-salt") or "dev-salt",
        database_url=_env("DATABASE_URL"),
        host=_env("HOST", "127.0.0.1") or "127.0.0.1",
        port=int(_number("PORT", "8000", int)),
        log_level=_env("LOG_LEVEL", "INFO") or "INFO",
        log_format=_env("LOG_FORMAT", "text") or "text",
        cors_origins=_origins(_env("CORS_ORIGINS", "http://localhost:5173") or ""),
    )
    _check(settings)
    return settings


def _check(settings: BackendSettings) -> None:
    if settings.total_min <= 0 or settings.total_min > settings.total_max:
        raise ConfigurationError("TOTAL_MIN must be positive and not exceed TOTAL_MAX")
    if not 0 <= settings.bridge_zone_pct <= 1:
        raise ConfigurationError("BRIDGE_ZONE_PCT must lie between 0 and 1")
    if settings.rounding_granularity <= 0:
        raise ConfigurationError("ROUNDING_GRANULARITY must be positive")
    if settings.offer_ttl_seconds <= 0 or settings.result_ttl_seconds <= 0:
        raise ConfigurationError("OFFER_TTL_SECONDS and RESULT_TTL_SECONDS must be positive")
    if settings.sweep_interval_seconds < 0:
        raise ConfigurationError("SWEEP_INTERVAL_SECONDS must not be negative")
