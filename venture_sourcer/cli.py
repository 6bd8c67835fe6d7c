"""Command-line entry point for Venture Sourcer.

Usage:
    venture-sourcer search "B2B SaaS Series A developer tools"
    venture-sourcer people "Stripe" --limit 25 --title "engineering"
    venture-sourcer usage
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import List, Optional

from . import apollo_client, config, pipeline
from .errors import SourcerError
from .models import PeopleFilters

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> logging.Logger:
    """
    Configure logging for the command-line run.

    Args:
        verbose: If True, set level to DEBUG. Otherwise INFO.

    Returns:
        Configured logger instance.
    """
    level = logging.DEBUG if verbose else logging.INFO

    # Clear any existing handlers
    root_logger = logging.getLogger()
    root_logger.handlers = []

    logging.basicConfig(
        level=level,
        format='%(asctime)s [%(levelname)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
        handlers=[logging.StreamHandler(sys.stderr)],
    )

    # Keep HTTP client chatter out of INFO output
    for noisy in ('httpx', 'openai', 'urllib3'):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    return logging.getLogger(__name__)


def parse_args(args: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command line arguments.

    Args:
        args: List of arguments (for testing). None uses sys.argv.

    Returns:
        Parsed arguments namespace.
    """
    parser = argparse.ArgumentParser(
        description='Find companies and people, and check directory usage',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Companies matching a free-text prompt
  venture-sourcer search "seed stage fintech in new york"

  # Senior people at a company
  venture-sourcer people "Stripe" --limit 25

  # Check the Apollo key and remaining rate limits
  venture-sourcer usage
        """
    )
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable debug logging'
    )
    subparsers = parser.add_subparsers(dest='command', required=True)

    search = subparsers.add_parser('search', help='Search companies from a prompt')
    search.add_argument('prompt', type=str, help='Free-text description of target companies')

    people = subparsers.add_parser('people', help='List people at a company')
    people.add_argument('company', type=str, help='Company name')
    people.add_argument(
        '--limit',
        type=int,
        default=config.DEFAULT_PEOPLE_LIMIT,
        help=f'Maximum people to return, one of {list(config.VALID_PEOPLE_LIMITS)}'
    )
    people.add_argument(
        '--seniority',
        action='append',
        choices=config.SENIORITIES,
        help='Seniority filter (repeatable)'
    )
    people.add_argument('--title', type=str, help='Job title filter')

    subparsers.add_parser('usage', help='Check Apollo key validity and rate limits')

    return parser.parse_args(args)


async def run(args: argparse.Namespace) -> dict:
    """Execute one subcommand and return a JSON-serializable result."""
    if args.command == 'search':
        result = await pipeline.search_companies(args.prompt)
        return result.model_dump(mode='json')

    if args.command == 'people':
        filters = PeopleFilters(seniorities=args.seniority or [], title=args.title)
        result = await pipeline.lookup_people(args.company, limit=args.limit, filters=filters)
        return result.model_dump(mode='json')

    return apollo_client.check_api_usage()


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    setup_logging(verbose=args.verbose)

    try:
        output = asyncio.run(run(args))
    except SourcerError as e:
        logger.error(str(e))
        return 1

    print(json.dumps(output, indent=2))
    return 0


if __name__ == '__main__':
    sys.exit(main())
