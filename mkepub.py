#!/usr/bin/env python3
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from quire.config import load_config
from quire.context import build_context
from quire.errors import HookError, ValidationError
from quire.producer import collect_contents, produce


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Package rendered XHTML content and book metadata into an EPUB 3 file."
    )
    parser.add_argument("config", help="Book config JSON file")
    parser.add_argument("-d", "--contentdir", help="Directory holding the content files (default: config dir)")
    parser.add_argument("-o", "--output", help="Output EPUB file path")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug output")
    return parser.parse_args(argv)


def main(argv: list[str]) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    config_path = Path(args.config)
    if not config_path.exists():
        print(f"Config file not found: {config_path}", file=sys.stderr)
        return 1

    try:
        config = load_config(config_path)
        basedir = Path(args.contentdir) if args.contentdir else config_path.parent
        output_path = Path(args.output) if args.output else config_path.with_name(f"{config.bookname}.epub")
        contents = collect_contents(config, basedir, exclude=[config_path.name])
        ctx = build_context(config, contents)
        produce(ctx, basedir, output_path)
    except ValidationError as exc:
        print(f"Invalid book config: {exc}", file=sys.stderr)
        return 1
    except HookError as exc:
        print(f"Pre-pack hook failed: {exc}", file=sys.stderr)
        return 1
    except OSError as exc:
        print(f"EPUB build failed: {exc}", file=sys.stderr)
        return 1

    print(f"EPUB saved to: {output_path}")
    return 0


def run() -> None:
    raise SystemExit(main(sys.argv[1:]))


if __name__ == "__main__":
    run()
