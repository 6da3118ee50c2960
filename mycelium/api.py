from __future__ import annotations

from dataclasses import asdict
from typing import Any

from fastapi import FastAPI, HTTPException, Query
from fastapi.responses import PlainTextResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST

from . import db, metrics
from .fetcher import FetchFailed, servers_url
from .plugin import ProxyPlugin


def create_app(plugin: ProxyPlugin) -> FastAPI:
    """Health, debug and metrics endpoints for a running proxy."""
    app = FastAPI(title="Mycelium proxy sync")

    @app.on_event("startup")
    def startup() -> None:
        plugin.on_start()

    @app.on_event("shutdown")
    def shutdown() -> None:
        plugin.on_stop()

    @app.get("/", response_class=PlainTextResponse)
    def health() -> str:
        return "ok"

    @app.get("/debug/servers")
    def debug_servers() -> list[dict[str, Any]]:
        return [asdict(r) for r in sorted(plugin.table.registrations(), key=lambda r: r.name)]

    @app.get("/debug/config")
    def debug_config() -> dict[str, Any]:
        cfg = plugin.config
        return {
            "attempt_connection_order": plugin.table.attempt_order(),
            "forced_hosts": plugin.table.forced_hosts(),
            "sync": {
                "url": servers_url(cfg.endpoint, cfg.identity()),
                "interval_s": plugin.scheduler.interval_s,
                "running": plugin.scheduler.is_running(),
            },
        }

    @app.post("/debug/sync")
    def debug_sync() -> dict[str, Any]:
        try:
            churn = plugin.sync_now()
        except FetchFailed as e:
            raise HTTPException(status_code=502, detail=str(e))
        return {"status": "ok", "churn": churn}

    @app.get("/debug/events")
    def debug_events(limit: int = Query(100, ge=1, le=1000)) -> list[dict[str, Any]]:
        return db.latest_events(limit)

    @app.get("/metrics")
    def scrape_metrics() -> Response:
        return Response(content=metrics.scrape(), media_type=CONTENT_TYPE_LATEST)

    return app
