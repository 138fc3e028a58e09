"""
Command-line entry point.

Usage:
    cookbook server [--host 0.0.0.0] [--port 8000]
    cookbook migrate
    cookbook ingest-data -i ingredients.json -p preparations.json \\
        -u units.json -r recipes.json

The database comes from DATABASE_URL (see cookbook.settings).
"""

import argparse
import logging
import sys
from typing import Optional, Sequence

from .errors import CookbookError
from .settings import settings

logger = logging.getLogger("cookbook.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="cookbook", description="Cookbook recipe service")
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    server = sub.add_parser("server", help="Run the HTTP API")
    server.add_argument("--host", default="0.0.0.0")
    server.add_argument("--port", type=int, default=8000)

    sub.add_parser("migrate", help="Upgrade the database schema")

    ingest = sub.add_parser("ingest-data", help="Bulk-load reference data and recipes")
    ingest.add_argument("-i", "--ingredients", required=True, help="Ingredients JSON file")
    ingest.add_argument("-p", "--preparations", required=True, help="Preparations JSON file")
    ingest.add_argument("-u", "--units", required=True, help="Units JSON file")
    ingest.add_argument("-r", "--recipes", required=True, help="Recipes JSON file")
    return parser


def run_server(host: str, port: int) -> None:
    import uvicorn

    uvicorn.run("cookbook.main:app", host=host, port=port)


def run_ingest_data(args: argparse.Namespace) -> int:
    from .db import SessionLocal, init_engine, run_migrations
    from .services.ingestion import ingest_files

    run_migrations(settings.database_url)
    init_engine(settings.database_url)
    db = SessionLocal()()
    try:
        summary = ingest_files(db, args.ingredients, args.preparations, args.units, args.recipes)
    except CookbookError as e:
        logger.error(f"Ingest failed: {e}")
        cause = e.__cause__
        while cause is not None:
            logger.error(f"  caused by: {cause}")
            cause = cause.__cause__
        return 1
    finally:
        db.close()

    print(summary.model_dump_json(indent=2))
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if args.command == "server":
        run_server(args.host, args.port)
        return 0
    if args.command == "migrate":
        from .db import run_migrations

        run_migrations(settings.database_url)
        return 0
    return run_ingest_data(args)


if __name__ == "__main__":
    sys.exit(main())
