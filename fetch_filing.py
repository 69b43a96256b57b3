#!/usr/bin/env python3
"""
SEC Filing Resolver CLI

Command-line interface for resolving a company to its latest 10-K or 13F-HR
filing and printing the extracted sections or holdings as JSON.

Usage Examples:
    # Narrative sections of Apple's latest 10-K
    python fetch_filing.py --ticker AAPL

    # Only the risk factors from a specific fiscal year
    python fetch_filing.py --cik 320193 --year 2023 --section risk_factors

    # Top 10 positions of an institutional manager
    python fetch_filing.py --company-name "Berkshire Hathaway" --form 13F-HR --limit-holdings 10

    # Batch run with on-disk caching
    python fetch_filing.py --input-file companies.txt --persist --output results.json
"""

import argparse
import asyncio
import json
import logging
import re
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, List

# Add src directory to path for imports
sys.path.insert(0, str(Path(__file__).parent / 'src'))

from tqdm import tqdm

from sec_filings import FilingContext, FilingRequest, SecFilingError, SecFilingsConfig, fetch_filing_summary
from sec_filings.models import SECTION_KEYS, SUPPORTED_FORM_TYPES, DEFAULT_LIMIT_HOLDINGS


_TICKER_LIKE = re.compile(r"^[A-Za-z][A-Za-z.\-]{0,9}$")


def setup_logging(verbose: bool, quiet: bool = False) -> None:
    """Configure logging based on verbosity setting."""
    level = logging.DEBUG if verbose else logging.WARNING if quiet else logging.INFO

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler()]
    )

    # Suppress verbose output from external libraries
    if not verbose:
        logging.getLogger('aiohttp').setLevel(logging.WARNING)
        logging.getLogger('asyncio').setLevel(logging.WARNING)


def parse_date(date_string: str) -> str:
    """Validate a YYYY-MM-DD date and return it unchanged."""
    if not re.fullmatch(r"\d{4}-\d{2}-\d{2}", date_string):
        raise argparse.ArgumentTypeError(f"Invalid date format: {date_string}. Use YYYY-MM-DD")
    return date_string


def request_for_identifier(identifier: str, args) -> FilingRequest:
    """
    Build a request from a batch-file line.

    All-digit lines are CIKs, short single tokens are tickers, anything else
    is a company name.
    """
    identifier = identifier.strip()
    kwargs: Dict[str, Any] = {}
    if identifier.isdigit():
        kwargs['cik'] = identifier
    elif _TICKER_LIKE.match(identifier):
        kwargs['ticker'] = identifier.upper()
    else:
        kwargs['company_name'] = identifier

    return FilingRequest(
        form_type=args.form,
        filing_date=args.filing_date,
        filing_year=args.year,
        include_sections=args.section,
        limit_holdings=args.limit_holdings,
        **kwargs,
    )


def read_identifier_file(file_path: Path) -> List[str]:
    """Read identifiers from file (one per line, '#' starts a comment)."""
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            lines = [line.strip() for line in f]
    except OSError as e:
        raise argparse.ArgumentTypeError(f"Error reading input file {file_path}: {e}")
    return [line for line in lines if line and not line.startswith('#')]


def create_argument_parser() -> argparse.ArgumentParser:
    """Create and configure argument parser."""
    parser = argparse.ArgumentParser(
        description="Resolve a company to its latest SEC filing and extract its contents",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Examples:
  %(prog)s --ticker AAPL
  %(prog)s --cik 320193 --year 2023 --section risk_factors
  %(prog)s --company-name "Berkshire Hathaway" --form 13F-HR --limit-holdings 10
  %(prog)s --input-file companies.txt --persist --output results.json

Form Types:
  10-K      Annual report (sections: {', '.join(SECTION_KEYS)})
  13F-HR    Institutional holdings report

Set SEC_API_USER_AGENT to identify yourself to EDGAR.
        """
    )

    # Input source (mutually exclusive)
    input_group = parser.add_mutually_exclusive_group(required=True)
    input_group.add_argument(
        '--ticker',
        help='Company ticker symbol (e.g., AAPL, MSFT)'
    )
    input_group.add_argument(
        '--cik',
        help='Company Central Index Key (CIK)'
    )
    input_group.add_argument(
        '--company-name',
        help='Free-form company or fund manager name'
    )
    input_group.add_argument(
        '--input-file',
        type=Path,
        help='File containing tickers, CIKs or names (one per line)'
    )

    # Filing selection
    parser.add_argument(
        '--form',
        default='10-K',
        type=str.upper,
        choices=SUPPORTED_FORM_TYPES,
        help='Form type to fetch (default: 10-K)'
    )
    parser.add_argument(
        '--filing-date',
        type=parse_date,
        help='Exact filing date (YYYY-MM-DD)'
    )
    parser.add_argument(
        '--year',
        type=int,
        help='Filing or report year'
    )
    parser.add_argument(
        '--section',
        action='append',
        choices=SECTION_KEYS,
        help='10-K section to include (repeatable, default: all)'
    )
    parser.add_argument(
        '--limit-holdings',
        type=int,
        default=DEFAULT_LIMIT_HOLDINGS,
        help=f'Maximum holdings to return for 13F-HR, 0 for all (default: {DEFAULT_LIMIT_HOLDINGS})'
    )

    # Persistence and output
    parser.add_argument(
        '--persist',
        action='store_true',
        help='Cache filings and the ticker directory on disk'
    )
    parser.add_argument(
        '--cache-dir',
        type=Path,
        help='Cache directory (default: $SEC_FILINGS_CACHE_DIR or .local-data/sec-filings)'
    )
    parser.add_argument(
        '--output',
        type=Path,
        help='Write JSON results to this file instead of stdout'
    )

    # Logging and output
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable verbose logging'
    )
    parser.add_argument(
        '--quiet',
        action='store_true',
        help='Suppress progress bars and non-essential output'
    )

    return parser


def validate_arguments(args) -> None:
    """Validate command-line arguments."""
    if args.input_file and not args.input_file.exists():
        raise ValueError(f"Input file not found: {args.input_file}")

    if args.limit_holdings < 0 or args.limit_holdings > 500:
        raise ValueError("Holdings limit must be between 0 and 500")

    if args.section and args.form != '10-K':
        raise ValueError("--section only applies to 10-K filings")

    if args.output and not args.output.parent.exists():
        raise ValueError(f"Parent directory does not exist: {args.output.parent}")


def build_config(args) -> SecFilingsConfig:
    config = SecFilingsConfig.from_env()
    if args.cache_dir:
        config = replace(config, cache_dir=args.cache_dir)
    return config


async def run_single(request: FilingRequest, context: FilingContext) -> Dict[str, Any]:
    summary = await fetch_filing_summary(request, context)
    return summary.to_dict()


async def run_batch(
    identifiers: List[str],
    args,
    context: FilingContext,
    show_progress: bool = True,
) -> List[Dict[str, Any]]:
    """
    Fetch every identifier concurrently on one context.

    Failures are reported per identifier instead of aborting the batch.
    """
    logger = logging.getLogger(__name__)
    progress_bar = None
    if show_progress:
        progress_bar = tqdm(
            total=len(identifiers),
            desc="Fetching filings",
            unit="filing"
        )

    async def fetch_one(identifier: str) -> Dict[str, Any]:
        try:
            request = request_for_identifier(identifier, args)
            summary = await fetch_filing_summary(request, context)
            return {"query": identifier, "result": summary.to_dict()}
        except (SecFilingError, ValueError) as e:
            logger.error(f"Error fetching filing for {identifier}: {e}")
            return {"query": identifier, "error": str(e)}
        finally:
            if progress_bar is not None:
                progress_bar.update(1)

    try:
        return list(await asyncio.gather(*(fetch_one(identifier) for identifier in identifiers)))
    finally:
        if progress_bar is not None:
            progress_bar.close()


async def run(args) -> int:
    config = build_config(args)

    async with FilingContext.create(config=config, self_hosted=args.persist) as context:
        if args.input_file:
            identifiers = read_identifier_file(args.input_file)
            if not identifiers:
                print("❌ No valid identifiers found")
                return 1
            if not args.quiet:
                print(f"📊 Processing {len(identifiers)} identifier(s)")
            payload: Any = await run_batch(identifiers, args, context, show_progress=not args.quiet)
            failed = sum(1 for item in payload if "error" in item)
        else:
            request = FilingRequest(
                ticker=args.ticker,
                cik=args.cik,
                company_name=args.company_name,
                form_type=args.form,
                filing_date=args.filing_date,
                filing_year=args.year,
                include_sections=args.section,
                limit_holdings=args.limit_holdings,
            )
            payload = await run_single(request, context)
            failed = 0

    text = json.dumps(payload, indent=2, ensure_ascii=False)
    if args.output:
        args.output.write_text(text, encoding='utf-8')
        if not args.quiet:
            print(f"📁 Results saved to: {args.output.absolute()}")
    else:
        print(text)

    return 0 if failed == 0 else 1


def main(argv=None):
    """Main CLI entry point."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    # Setup logging
    setup_logging(args.verbose, args.quiet)
    logger = logging.getLogger(__name__)

    try:
        validate_arguments(args)
        return asyncio.run(run(args))

    except KeyboardInterrupt:
        print("\n⏹️  Cancelled by user")
        return 130
    except (SecFilingError, ValueError) as e:
        logger.error(f"Request failed: {e}")
        print(f"❌ Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
