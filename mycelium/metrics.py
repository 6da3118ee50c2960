from __future__ import annotations

from prometheus_client import REGISTRY, Gauge, generate_latest

CHURN = Gauge(
    "mycelium_proxy_churn",
    "Servers added plus servers removed by the most recent completed sync",
)
PLAYER_COUNT = Gauge("mycelium_proxy_player_count", "Players currently connected to the proxy")


def set_churn(churn: int) -> None:
    CHURN.set(churn)


def set_player_count(count: int) -> None:
    PLAYER_COUNT.set(max(0, int(count)))


def scrape() -> bytes:
    """Prometheus text exposition of the default registry (includes process/GC collectors)."""
    return generate_latest(REGISTRY)
