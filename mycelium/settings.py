from __future__ import annotations

import os
from dataclasses import dataclass


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    # Control plane
    endpoint: str = os.getenv("MYCELIUM_ENDPOINT", "localhost:8181")
    namespace: str = os.getenv("K8S_NAMESPACE", "default")
    name: str = os.getenv("K8S_NAME", "proxy")
    # Older deployments identify the proxy by env/tag instead of name.
    env: str = os.getenv("MYCELIUM_ENV", "development")
    tag: str = os.getenv("MYCELIUM_PROXY", "global")
    identity_template: str = os.getenv("MYCELIUM_IDENTITY_TEMPLATE", "{name}")
    sync_interval_s: int = _env_int("MYCELIUM_SYNC_INTERVAL_S", 300)

    # Event journal
    db_path: str = os.getenv("MYCELIUM_DB_PATH", "mycelium.db")
    enable_journal: bool = _env_bool("MYCELIUM_ENABLE_JOURNAL", True)

    # Debug HTTP surface
    http_host: str = os.getenv("MYCELIUM_HTTP_HOST", "0.0.0.0")
    http_port: int = _env_int("MYCELIUM_HTTP_PORT", 8080)
    log_level: str = os.getenv("MYCELIUM_LOG_LEVEL", "INFO")

    def identity(self) -> str:
        """Return ``namespace/<identity path>`` as the control plane expects it."""
        path = self.identity_template.format(name=self.name, env=self.env, tag=self.tag)
        return f"{self.namespace}/{path.strip('/')}"


settings = Settings()
