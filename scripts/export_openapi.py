from __future__ import annotations

import argparse
import json
from pathlib import Path

from coaching_api.api.app import create_app


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Write the booking API OpenAPI document.")
    parser.add_argument(
        "--output",
        type=Path,
        default=Path("docs/openapi.json"),
        help="Destination file for the OpenAPI JSON.",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Fail when the file on disk differs from the current schema instead of writing it.",
    )
    return parser.parse_args()


def render_schema() -> str:
    document = create_app().openapi()
    return json.dumps(document, indent=2, ensure_ascii=False, sort_keys=True) + "\n"


def main() -> int:
    args = parse_args()
    rendered = render_schema()

    if args.check:
        current = args.output.read_text(encoding="utf-8") if args.output.exists() else ""
        if current != rendered:
            print(f"{args.output} is stale; run scripts/export_openapi.py")
            return 1
        print(f"{args.output} is up to date")
        return 0

    args.output.parent.mkdir(parents=True, exist_ok=True)
    args.output.write_text(rendered, encoding="utf-8")
    print(f"OpenAPI exported to {args.output}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
