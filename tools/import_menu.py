#!/usr/bin/env python3
import argparse
import json
import sys
from pathlib import Path

import requests


def load_payload(path: Path) -> dict:
    data = json.loads(path.read_text(encoding="utf-8"))
    items = data.get("menu") if isinstance(data, dict) else data
    if not isinstance(items, list) or not items:
        raise ValueError(f"{path}: expected a non-empty menu list")
    return {"menu": items}


def main(argv=None):
    parser = argparse.ArgumentParser(description="Upload a kiosk menu catalog to a running backend")
    parser.add_argument("path", type=Path, help="Catalog JSON (object with a 'menu' list, or a bare list)")
    parser.add_argument("--backend", default="http://localhost:8000", help="Backend base URL")
    parser.add_argument("--dry-run", action="store_true", help="Print the payload instead of posting it")
    args = parser.parse_args(argv)

    try:
        payload = load_payload(args.path)
    except (OSError, ValueError) as exc:
        print(f"Cannot read catalog: {exc}", file=sys.stderr)
        return 2

    if args.dry_run:
        print(json.dumps(payload, ensure_ascii=False, indent=2))
        return 0

    url = args.backend.rstrip("/") + "/api/menu/import"
    try:
        r = requests.post(url, json=payload, timeout=10)
    except requests.RequestException as exc:
        print(f"POST {url} failed: {exc}", file=sys.stderr)
        return 1
    print("POST", url, r.status_code, r.text[:200])
    return 0 if r.ok else 1


if __name__ == "__main__":
    raise SystemExit(main())
