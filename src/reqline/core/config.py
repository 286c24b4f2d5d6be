"""Single config object for a client: passed to ClientBuilder.config(...) or loaded from env."""
from __future__ import annotations

import dataclasses
import os
from dataclasses import dataclass
from typing import Any

from reqline.core.request import Options

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


def _coerce(name: str, raw: str, default: Any) -> Any:
    if isinstance(default, bool):
        lowered = raw.strip().lower()
        if lowered in _TRUE:
            return True
        if lowered in _FALSE:
            return False
        raise ValueError(f"{name}: expected a boolean, got {raw!r}")
    if isinstance(default, int):
        return int(raw)
    if isinstance(default, float):
        return float(raw)
    return raw.strip()


@dataclass(frozen=True)
class ClientConfig:
    """
    Build-time settings shared by every method handler of a client.
    log_level: none | basic | headers | full. propagation_policy: none | unwrap.
    """

    connect_timeout: float = 10.0
    read_timeout: float = 60.0
    follow_redirects: bool = True
    retry_period: float = 0.1
    retry_max_period: float = 1.0
    retry_max_attempts: int = 5
    decode404: bool = False
    close_after_decode: bool = True
    error_status_threshold: int = 400
    log_level: str = "none"
    propagation_policy: str = "none"

    @property
    def options(self) -> Options:
        return Options(
            connect_timeout=self.connect_timeout,
            read_timeout=self.read_timeout,
            follow_redirects=self.follow_redirects,
        )

    @classmethod
    def load_from_env(cls, prefix: str = "REQLINE_", **defaults: Any) -> dict[str, Any]:
        """Load from os.environ with prefix and defaults. Returns dict for ClientConfig(**...)."""
        result = dict(defaults)
        fields = {f.name: f for f in dataclasses.fields(cls)}
        for key, value in os.environ.items():
            if not key.startswith(prefix):
                continue
            name = key[len(prefix):].lower()
            if name not in fields:
                continue
            result[name] = _coerce(key, value, fields[name].default)
        return result

    @classmethod
    def from_env(cls, prefix: str = "REQLINE_", **defaults: Any) -> ClientConfig:
        """REQLINE_READ_TIMEOUT=5 -> ClientConfig(read_timeout=5.0). Unknown variables are ignored."""
        return cls(**cls.load_from_env(prefix, **defaults))
