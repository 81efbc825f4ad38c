"""Command-line access to the memory store: write, search, get, delete, stats."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="agentmemory", description=__doc__)
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("write", help="Store a file (or stdin) under a source path, replacing its old content.")
    p.add_argument("file", nargs="?", help="File to read; stdin when omitted or '-'.")
    p.add_argument("--source", help="Source path (default: today's daily log).")
    p.add_argument("--title")

    p = sub.add_parser("search", help="Hybrid vector + keyword search.")
    p.add_argument("query")
    p.add_argument("-n", "--max-results", type=int, default=6)

    p = sub.add_parser("get", help="Print the stored content of a source.")
    p.add_argument("source")

    p = sub.add_parser("delete", help="Remove every chunk of a source.")
    p.add_argument("source")

    sub.add_parser("stats", help="Chunk and source counts.")
    return parser


def _read_content(file: str | None) -> str:
    if not file or file == "-":
        return sys.stdin.read()
    return Path(file).read_text(encoding="utf-8")


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    logging.basicConfig(
        level=os.environ.get("AGENTMEMORY_LOG_LEVEL", "WARNING").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    args = _build_parser().parse_args(argv)

    from agentmemory.memory.service import MemoryService

    try:
        service = MemoryService()
        if args.command == "write":
            result = service.write(_read_content(args.file), source=args.source, title=args.title)
            print(f"Wrote {result.chunks_written} chunk(s) to memory at '{result.source}'.")
        elif args.command == "search":
            hits = service.search(args.query, max_results=args.max_results)
            if not hits:
                print("No relevant information found in memory.")
            for i, hit in enumerate(hits, start=1):
                print(f"[{i}] {hit.score:.4f} {hit.source_path}#{hit.chunk_index}")
                print(hit.content)
                print()
        elif args.command == "get":
            text = service.get(args.source)
            if text is None:
                print(f"No memory found at source '{args.source}'.", file=sys.stderr)
                return 1
            print(text)
        elif args.command == "delete":
            print(f"Deleted {service.delete(args.source)} chunk(s).")
        elif args.command == "stats":
            stats = service.stats()
            print(f"{stats.total_chunks} chunks across {stats.unique_sources} sources")
    except Exception as e:
        print("Error:", e, file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
