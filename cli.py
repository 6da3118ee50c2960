from __future__ import annotations

import argparse
import json
import sys

import requests


def _print(obj) -> None:
    print(json.dumps(obj, indent=2, ensure_ascii=False))


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(description="Mycelium proxy sync CLI")
    p.add_argument("--api", default="http://localhost:8080", help="Proxy debug API base URL")
    sub = p.add_subparsers(dest="cmd", required=True)

    sub.add_parser("servers", help="List registered backend servers")
    sub.add_parser("config", help="Show attempt order, forced hosts and sync settings")
    sub.add_parser("sync", help="Sync with the control plane now")

    s_ev = sub.add_parser("events", help="Show journal events")
    s_ev.add_argument("--limit", type=int, default=20)

    args = p.parse_args(argv)

    base = args.api.rstrip("/")

    if args.cmd == "servers":
        _print(requests.get(f"{base}/debug/servers", timeout=10).json())
        return 0

    if args.cmd == "config":
        _print(requests.get(f"{base}/debug/config", timeout=10).json())
        return 0

    if args.cmd == "events":
        _print(requests.get(f"{base}/debug/events", params={"limit": args.limit}, timeout=10).json())
        return 0

    if args.cmd == "sync":
        r = requests.post(f"{base}/debug/sync", timeout=30)
        _print(r.json())
        return 0 if r.ok else 1

    return 2


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
