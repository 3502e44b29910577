"""CLI job that scrapes one Maps query and prints the enriched result as JSON."""

import argparse
import json
import logging
import sys
from typing import List, Optional

from maps_leads import service
from maps_leads.core.errors import ClientInputError, CollaboratorError, ConfigError
from maps_leads.etl.aggregate import FilterConfig

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Scrape Google Maps listings and score web presence opportunities")
    parser.add_argument("query", help="Search query, e.g. 'dentist downtown'")
    parser.add_argument("--limit", dest="limit", type=int, default=service.DEFAULT_LIMIT, help="Number of listings to collect")
    parser.add_argument(
        "--needs-website",
        dest="needs_website",
        action="store_true",
        default=None,
        help="Keep only businesses without a real website",
    )
    parser.add_argument("--min-rating", dest="min_rating", type=float, help="Minimum rating to keep")
    parser.add_argument("--min-reviews", dest="min_reviews", type=int, help="Minimum review count to keep")
    parser.add_argument(
        "--category",
        dest="categories",
        action="append",
        default=[],
        help="Keep categories containing this text (repeatable)",
    )
    return parser


def filters_from_args(args: argparse.Namespace) -> FilterConfig:
    return FilterConfig(
        needs_website=args.needs_website,
        min_rating=args.min_rating,
        min_reviews=args.min_reviews,
        categories=tuple(args.categories),
    )


def main(argv: Optional[List[str]] = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s - %(message)s")
    args = build_parser().parse_args(argv)

    try:
        result = service.scrape(args.query, args.limit, filters_from_args(args))
    except (ClientInputError, ConfigError) as exc:
        logger.error("Invalid input: %s", exc)
        return 2
    except CollaboratorError as exc:
        logger.error("Scrape failed: %s", exc, exc_info=True)
        return 1

    json.dump(result, sys.stdout, ensure_ascii=False, indent=2)
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
