"""Standalone Mycelium host.

Runs the sync loop against an in-memory routing table and serves the
health/debug/metrics endpoints. Proxies embed ``ProxyPlugin`` with their own
``RoutingTable`` instead.
"""
from __future__ import annotations

import logging

import uvicorn

from mycelium.api import create_app
from mycelium.plugin import ProxyPlugin
from mycelium.routing import InMemoryRoutingTable
from mycelium.settings import settings

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)

table = InMemoryRoutingTable()
plugin = ProxyPlugin(table)
app = create_app(plugin)


def main() -> None:
    uvicorn.run(app, host=settings.http_host, port=settings.http_port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
