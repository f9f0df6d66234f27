"""
Command line entry point for raven-rag.

Usage:
    raven-rag serve [--host HOST] [--port PORT]
    raven-rag ingest FILE
    raven-rag list
"""

import argparse
import asyncio
import logging
import re
import sys
from pathlib import Path
from typing import List, Optional

from raven_rag.config import Settings, get_settings
from raven_rag.embeddings import build_embedding
from raven_rag.errors import RavenError
from raven_rag.knowledge_service import KnowledgeService
from raven_rag.storage import JsonKnowledgeStore

logger = logging.getLogger(__name__)


def split_paragraphs(text: str) -> List[str]:
    """Split text into blank-line separated paragraphs."""
    return [p.strip() for p in re.split(r"\n\s*\n", text) if p.strip()]


async def _ingest(settings: Settings, path: Path) -> int:
    store = JsonKnowledgeStore(settings.knowledge_path)
    await store.load()
    service = KnowledgeService(store, build_embedding(settings), timeout=settings.gateway_timeout)

    paragraphs = split_paragraphs(path.read_text(encoding="utf-8"))
    ids = await service.ingest_many(paragraphs)
    print(f"Ingested {len(ids)} entries into {settings.knowledge_path} (total: {await store.count()})")
    return 0


async def _list(settings: Settings) -> int:
    store = JsonKnowledgeStore(settings.knowledge_path)
    await store.load()
    for entry in await store.snapshot_all():
        preview = entry.text.replace("\n", " ")[:70]
        print(f"{entry.id}  {entry.created_at:%Y-%m-%d %H:%M}  {preview}")
    return 0


def _serve(settings: Settings, host: Optional[str], port: Optional[int]) -> int:
    import uvicorn

    from raven_rag.api import create_app

    uvicorn.run(
        create_app(settings),
        host=host or settings.host,
        port=port or settings.port,
        log_level=settings.log_level.lower(),
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="raven-rag", description=__doc__.split("\n\n")[0].strip())
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the HTTP service")
    serve.add_argument("--host", default=None)
    serve.add_argument("--port", type=int, default=None)

    ingest = subparsers.add_parser("ingest", help="Embed paragraphs of a text file into the knowledge base")
    ingest.add_argument("file", type=Path)

    subparsers.add_parser("list", help="List knowledge entries")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    try:
        if args.command == "serve":
            return _serve(settings, args.host, args.port)
        if args.command == "ingest":
            return asyncio.run(_ingest(settings, args.file))
        return asyncio.run(_list(settings))
    except RavenError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
