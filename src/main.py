# src/main.py — v3
"""CLI entry point — serve, extract, ingest, cache commands.

Usage:
    paperchat serve [--host H] [--port P]
    paperchat extract <file> [--format yaml|json|text]
    paperchat ingest <paper_id> [--source arxiv|medrxiv|biorxiv]
    paperchat cache stats|clear|sweep [--max-age-days N]
"""

from __future__ import annotations

import argparse
import asyncio
import inspect
import logging
import sys
from datetime import timedelta
from pathlib import Path

from paperchat.config.settings import ConfigurationError, Settings, load_settings
from paperchat.core.errors import PaperChatError
from paperchat.logging.logger import setup_logging
from paperchat.version import __version__

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        settings = load_settings()
    except (ConfigurationError, ValueError) as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2

    setup_logging(
        level="DEBUG" if args.verbose else settings.log_level,
        log_format=settings.log_format if args.command == "serve" else "text",
        log_file=str(settings.log_file) if settings.log_file else None,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
    )

    try:
        if inspect.iscoroutinefunction(args.func):
            return asyncio.run(args.func(args, settings))
        return args.func(args, settings)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except (PaperChatError, ConfigurationError) as exc:
        logger.error("%s", exc)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="paperchat",
        description=f"PaperChat v{__version__} — chat with preprint papers",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- serve ---
    p_serve = subparsers.add_parser("serve", help="Run the HTTP API")
    p_serve.add_argument("--host", default=None, help="Bind host (default: API_HOST)")
    p_serve.add_argument("--port", type=int, default=None, help="Bind port (default: API_PORT)")
    p_serve.set_defaults(func=_cmd_serve)

    # --- extract ---
    p_extract = subparsers.add_parser(
        "extract", help="Condense a YAML/JSON reference document (cached)",
    )
    p_extract.add_argument("file", type=Path, help="Path to document")
    p_extract.add_argument(
        "--format", dest="source_format", choices=["yaml", "json", "text"], default=None,
        help="Declared format (default: from file extension)",
    )
    p_extract.set_defaults(func=_cmd_extract)

    # --- ingest ---
    p_ingest = subparsers.add_parser(
        "ingest", help="Ensure a paper is present in the blob store",
    )
    p_ingest.add_argument("paper_id", help="Paper identifier, e.g. 2301.12345")
    p_ingest.add_argument(
        "--source", choices=["arxiv", "medrxiv", "biorxiv"], default=None,
        help="Paper source (auto-detected if omitted)",
    )
    p_ingest.set_defaults(func=_cmd_ingest)

    # --- cache ---
    p_cache = subparsers.add_parser("cache", help="Inspect or maintain the extraction cache")
    cache_sub = p_cache.add_subparsers(dest="cache_command", required=True)
    cache_sub.add_parser("stats", help="Show entry count and size").set_defaults(
        func=_cmd_cache_stats,
    )
    cache_sub.add_parser("clear", help="Delete every entry").set_defaults(
        func=_cmd_cache_clear,
    )
    p_sweep = cache_sub.add_parser("sweep", help="Evict entries older than a max age")
    p_sweep.add_argument(
        "--max-age-days", type=int, default=None,
        help="Maximum entry age (default: CACHE_MAX_AGE_DAYS)",
    )
    p_sweep.set_defaults(func=_cmd_cache_sweep)

    return parser


def _cmd_serve(args: argparse.Namespace, settings: Settings) -> int:
    """Run the FastAPI app under uvicorn."""
    import uvicorn

    from paperchat.api.app import create_app

    app = create_app(settings)
    uvicorn.run(
        app,
        host=args.host or settings.api_host,
        port=args.port or settings.api_port,
        log_config=None,
    )
    return 0


async def _cmd_extract(args: argparse.Namespace, settings: Settings) -> int:
    """Extract (or look up) the condensed guide for a file."""
    from paperchat.cache.cache_factory import create_cache_store
    from paperchat.config.components import SPEC_EXTRACTOR
    from paperchat.extraction.spec_extractor import SpecExtractor
    from paperchat.llm.client_factory import create_component_client

    file_path: Path = args.file
    if not file_path.is_file():
        logger.error("File not found: %s", file_path)
        return 1

    extractor = SpecExtractor(
        create_cache_store(settings),
        create_component_client(SPEC_EXTRACTOR, settings),
        max_input_chars=settings.spec_extract_max_input_chars,
        max_output_tokens=settings.spec_extract_max_output_tokens,
    )
    guide = await extractor.extract(
        file_path.read_bytes(), file_path.name, source_format=args.source_format,
    )
    print(guide)
    return 0


async def _cmd_ingest(args: argparse.Namespace, settings: Settings) -> int:
    """Run get-or-create for one paper and report the outcome."""
    import httpx

    from paperchat.ingestion.controller import DocumentIngestionController
    from paperchat.ingestion.downloader import SourceDocumentFetcher
    from paperchat.papers.identifiers import require_valid_reference
    from paperchat.storage.store_factory import create_blob_store

    reference = require_valid_reference(args.paper_id, args.source)
    async with httpx.AsyncClient(
        timeout=httpx.Timeout(settings.download_timeout_s)
    ) as http_client:
        fetcher = SourceDocumentFetcher(
            http_client,
            max_size_bytes=settings.max_document_size_bytes,
            user_agent=settings.download_user_agent,
            cache_dir=settings.pdf_cache_dir if settings.pdf_cache_enabled else None,
        )
        controller = DocumentIngestionController(create_blob_store(settings), fetcher)
        result = await controller.ensure_document(reference)

    if not result.ok:
        logger.error("Ingestion failed: %s", result.error)
        return 1

    print("\nIngestion complete:")
    print(f"  Paper:    {reference.canonical_key}")
    print(f"  Outcome:  {result.outcome}")
    print(f"  Blob:     {result.blob_name}")
    if result.handle is not None:
        print(f"  URI:      {result.handle.uri}")
    return 0


async def _cmd_cache_stats(args: argparse.Namespace, settings: Settings) -> int:
    from paperchat.cache.cache_factory import create_cache_store

    stats = await create_cache_store(settings).stats()
    print(f"\nCache ({stats.backend}) at {stats.location}:")
    print(f"  Entries:  {stats.entry_count}")
    print(f"  Size:     {stats.approx_size_bytes / 1024:.1f} KB")
    return 0


async def _cmd_cache_clear(args: argparse.Namespace, settings: Settings) -> int:
    from paperchat.cache.cache_factory import create_cache_store

    await create_cache_store(settings).clear()
    print("Cache cleared")
    return 0


async def _cmd_cache_sweep(args: argparse.Namespace, settings: Settings) -> int:
    from paperchat.cache.cache_factory import create_cache_store

    max_age_days = (
        args.max_age_days if args.max_age_days is not None else settings.cache_max_age_days
    )
    if max_age_days < 1:
        logger.error("--max-age-days must be >= 1")
        return 1
    evicted = await create_cache_store(settings).evict_older_than(
        timedelta(days=max_age_days)
    )
    print(f"Evicted {evicted} entries older than {max_age_days} days")
    return 0


if __name__ == "__main__":
    sys.exit(main())
