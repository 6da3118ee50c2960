from __future__ import annotations

from collections.abc import Callable, Iterable
from threading import Event, Lock, Thread

from . import db, metrics
from .fetcher import FetchFailed, fetch
from .models import DesiredServer
from .routing import MINECRAFT_PORT, RoutingTable
from .settings import Settings, settings as default_settings


def attempt_order_key(server: DesiredServer) -> tuple[bool, int]:
    # Servers without a priority go last; sorted() keeps encounter order for ties.
    return (server.priority is None, server.priority if server.priority is not None else 0)


def reconcile(desired: Iterable[DesiredServer], table: RoutingTable) -> int:
    """Make ``table`` route to exactly the ``desired`` servers.

    Passes run in a fixed order: removals, forced-host rebuild, additions,
    attempt-order rebuild, forced-host apply. Existing registrations are
    never updated in place, so an address change only takes effect once the
    name disappears for a cycle and comes back.

    Returns the churn (servers added plus servers removed), which is also
    published on the churn gauge once the whole cycle is done.
    """
    churn = 0

    wanted: dict[str, DesiredServer] = {}
    for server in desired:
        wanted[server.name] = server

    for reg in table.registrations():
        if reg.name not in wanted:
            table.remove_from_attempt_order(reg.name)
            table.unregister(reg.name)
            churn += 1
            db.log_event("INFO", f"removed server {reg.name}", server=reg.name)

    forced_hosts: dict[str, list[str]] = {}
    for server in wanted.values():
        if server.forced_host:
            forced_hosts.setdefault(server.forced_host, []).append(server.name)

    for server in wanted.values():
        if not table.is_registered(server.name):
            table.register(server.name, server.address, MINECRAFT_PORT)
            churn += 1
            db.log_event("INFO", f"added server {server.name} ({server.address}:{MINECRAFT_PORT})", server=server.name)

    table.set_attempt_order([s.name for s in sorted(wanted.values(), key=attempt_order_key)])
    table.set_forced_hosts(forced_hosts)

    metrics.set_churn(churn)
    return churn


class ReconciliationScheduler:
    """Syncs the routing table with the control plane on a fixed period."""

    def __init__(
        self,
        table: RoutingTable,
        config: Settings | None = None,
        fetcher: Callable[[], list[DesiredServer]] | None = None,
    ):
        self.table = table
        self.config = config or default_settings
        self.fetcher = fetcher or self._fetch_from_control_plane
        self.interval_s = max(1, int(self.config.sync_interval_s))
        # Manual syncs and the periodic loop share this, so cycles queue instead of interleaving.
        self._cycle_lock = Lock()
        self._stop = Event()
        self._thr: Thread | None = None

    def _fetch_from_control_plane(self) -> list[DesiredServer]:
        return fetch(self.config.endpoint, self.config.identity())

    def start(self) -> None:
        if self._thr and self._thr.is_alive():
            if not self._stop.is_set():
                return
            # A stopped loop may still be finishing its cycle; let it exit before replacing it.
            self._thr.join()
        self._stop.clear()
        self._thr = Thread(target=self._loop, name="mycelium-sync", daemon=True)
        self._thr.start()

    def stop(self, timeout_s: float | None = None) -> None:
        self._stop.set()
        if self._thr and timeout_s is not None:
            self._thr.join(timeout_s)

    def is_running(self) -> bool:
        return bool(self._thr and self._thr.is_alive())

    def _loop(self) -> None:
        db.log_event("INFO", f"Sync started (every {self.interval_s}s)")
        while not self._stop.is_set():
            try:
                self.run_cycle()
            except Exception as e:
                db.log_event("ERROR", f"Sync cycle failed: {type(e).__name__}: {e}")
            self._stop.wait(self.interval_s)

    def run_cycle(self) -> int | None:
        """Fetch and reconcile once.

        Returns the churn, or None when the fetch failed and the routing
        table was left untouched.
        """
        try:
            return self.sync_now()
        except FetchFailed:
            return None

    def sync_now(self) -> int:
        """Like :meth:`run_cycle`, but a failed fetch is re-raised to the caller."""
        with self._cycle_lock:
            try:
                desired = self.fetcher()
            except FetchFailed as e:
                db.log_event("ERROR", f"failed to fetch server list - routing left unchanged! (url = {e.url}, {e.reason})")
                raise
            return reconcile(desired, self.table)
