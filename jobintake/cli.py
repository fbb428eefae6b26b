"""Command line entry point for crawl batches.

Examples:
    jobintake crawl --limit 50 --delay-ms 1500
    jobintake crawl --urls-file urls.txt --checkpoint data/batch.json
    jobintake ingest-checkpoint data/viecoi-jobs-raw.json

``crawl`` discovers job URLs from the sitemap (or reads them from a file),
fetches them politely, writes a checkpoint, then normalizes, dedupes and
stores the batch as pending jobs.
"""
import argparse
import json
import logging
from pathlib import Path
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError

from jobintake.core.config import (
    CRAWL_CHECKPOINT_PATH,
    CRAWL_DELAY_MS,
    CRAWL_MAX_RETRIES,
    LOG_LEVEL,
    SITEMAP_URL,
)
from jobintake.core.errors import FetchError
from jobintake.core.logging_config import setup_logging
from jobintake.crawler.fetcher import CrawlOptions, Fetcher
from jobintake.crawler.sitemap import discover_job_urls
from jobintake.db.init_db import init_db
from jobintake.db.session import SessionLocal
from jobintake.services.categorizer import get_default_categorizer
from jobintake.services.ingest import ingest_checkpoint, run_crawl_batch
from jobintake.services.normalizer import Normalizer

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--verbose", action="store_true", help="Enable debug logging")

    parser = argparse.ArgumentParser(prog="jobintake", description="Crawl and ingest job listings.")
    sub = parser.add_subparsers(dest="command", required=True)

    crawl = sub.add_parser("crawl", parents=[common], help="Fetch job pages and store them as pending jobs")
    crawl.add_argument("--limit", type=int, default=None, help="Maximum number of listings to collect")
    crawl.add_argument("--delay-ms", type=int, default=CRAWL_DELAY_MS, help="Politeness delay between requests")
    crawl.add_argument("--max-retries", type=int, default=CRAWL_MAX_RETRIES, help="Retries per URL for transient errors")
    source = crawl.add_mutually_exclusive_group()
    source.add_argument("--sitemap", type=str, default=SITEMAP_URL, help="Sitemap index URL to discover jobs from")
    source.add_argument("--urls-file", type=Path, default=None, help="Newline separated list of job URLs")
    crawl.add_argument("--checkpoint", type=Path, default=Path(CRAWL_CHECKPOINT_PATH),
                       help="Where to write the raw crawled batch")

    resume = sub.add_parser("ingest-checkpoint", parents=[common], help="Ingest a previously saved crawl checkpoint")
    resume.add_argument("path", type=Path, help="Checkpoint JSON file")

    return parser.parse_args(argv)


def read_urls_file(path: Path) -> List[str]:
    lines = path.read_text(encoding="utf-8").splitlines()
    return [line.strip() for line in lines if line.strip() and not line.startswith("#")]


def _crawl(args, db, normalizer: Normalizer):
    options = CrawlOptions(delay_ms=args.delay_ms, max_retries=args.max_retries, limit=args.limit)
    with Fetcher(options) as fetcher:
        if args.urls_file is not None:
            urls = read_urls_file(args.urls_file)
        else:
            urls = [job_url.url for job_url in discover_job_urls(fetcher, args.sitemap)]
        return run_crawl_batch(db, urls, fetcher, normalizer, checkpoint_path=args.checkpoint)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging("DEBUG" if args.verbose else LOG_LEVEL)

    init_db()
    normalizer = Normalizer(categorizer=get_default_categorizer())
    db = SessionLocal()
    try:
        if args.command == "crawl":
            report = _crawl(args, db, normalizer)
        else:
            report = ingest_checkpoint(db, args.path, normalizer)
    except FetchError as e:
        logger.error(f"Job URL discovery failed: {e}")
        return 1
    except SQLAlchemyError as e:
        logger.error(f"Job store unavailable, batch aborted: {e}", exc_info=True)
        return 1
    finally:
        db.close()

    print(json.dumps(report.as_dict(), indent=2))
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())
