"""Command line entrypoint for the Vogue AI stylist."""

from __future__ import annotations

import argparse
import asyncio
import json
import mimetypes
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from models.taxonomy import CHOICES
from stylist_app.app import VogueStylistApp


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Vogue AI stylist")
    commands = parser.add_subparsers(dest="command", required=True)

    style = commands.add_parser("style", help="Generate one outfit recommendation")
    for field_name, choices in CHOICES.items():
        style.add_argument(f"--{field_name.replace('_', '-')}", dest=field_name, choices=choices)
    style.add_argument("--country-style", dest="country_style", help="Regional style, e.g. Korean")
    style.add_argument("--weather", help="Current weather, e.g. 'Sunny 25°C'")
    style.add_argument("--photo", type=Path, help="Photo to analyse for body type, complexion and style")
    style.add_argument("--out", type=Path, help="Where to write the generated outfit image")

    serve = commands.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default="0.0.0.0")
    serve.add_argument("--port", type=int, default=8080)
    return parser


def _profile_changes(args: argparse.Namespace) -> Dict[str, Any]:
    names = [*CHOICES, "country_style", "weather"]
    return {name: getattr(args, name) for name in names if getattr(args, name) is not None}


def _read_photo(path: Path) -> tuple[bytes, str]:
    mime_type, _ = mimetypes.guess_type(path.name)
    return path.read_bytes(), mime_type or "image/jpeg"


def run_style(args: argparse.Namespace) -> int:
    app = VogueStylistApp()
    photo = _read_photo(args.photo) if args.photo else None
    outcome = asyncio.run(app.style_once(_profile_changes(args), photo=photo))

    image = outcome.pop("image")
    if image is not None and args.out:
        args.out.write_bytes(image.data)
        outcome["image_path"] = str(args.out)
    print(json.dumps(outcome, indent=2, ensure_ascii=False))
    return 0 if outcome["status"] == "ok" else 1


def run_serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run("server.api:get_app", factory=True, host=args.host, port=args.port, reload=False)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    if args.command == "serve":
        return run_serve(args)
    return run_style(args)


if __name__ == "__main__":
    sys.exit(main())
