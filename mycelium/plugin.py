from __future__ import annotations

from collections.abc import Callable

from . import db, metrics
from .models import DesiredServer
from .reconciler import ReconciliationScheduler
from .routing import RoutingTable
from .settings import Settings, settings as default_settings


class ProxyPlugin:
    """Glue between a proxy's lifecycle events and the sync loop.

    The host calls ``on_start``/``on_stop`` around its own lifetime and
    ``on_player_join``/``on_player_leave`` from its event handlers.
    ``player_count`` asks the proxy how many players are online.
    """

    def __init__(
        self,
        table: RoutingTable,
        player_count: Callable[[], int] = lambda: 0,
        config: Settings | None = None,
        fetcher: Callable[[], list[DesiredServer]] | None = None,
    ):
        self.table = table
        self.config = config or default_settings
        self.player_count = player_count
        self.scheduler = ReconciliationScheduler(table, config=self.config, fetcher=fetcher)

    def on_start(self) -> None:
        db.init_db()
        metrics.set_player_count(self.player_count())
        self.scheduler.start()
        db.log_event("INFO", f"Mycelium started for {self.config.identity()}")

    def on_stop(self) -> None:
        self.scheduler.stop()
        db.log_event("INFO", "Mycelium stopped")

    def on_player_join(self) -> None:
        metrics.set_player_count(self.player_count())

    def on_player_leave(self) -> None:
        metrics.set_player_count(self.player_count())

    def sync_now(self) -> int:
        return self.scheduler.sync_now()
