"""Configuration helpers for servicekit."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

DEFAULT_MAX_WORKERS = 4


@dataclass(slots=True)
class ServiceConfig:
    """Typed configuration for `Service`."""

    base_url: str | None = None
    verify_ssl: bool | str = True
    timeout: float = 30.0
    default_headers: Mapping[str, str] | None = None
    max_workers: int = DEFAULT_MAX_WORKERS

    def resolved_headers(self) -> dict[str, str]:
        return dict(self.default_headers or {})
