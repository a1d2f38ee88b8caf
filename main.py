#!/usr/bin/env python3
"""
Companies House Distress Monitor - Main Entry Point

Usage:
    python main.py                          # Scan all configured SIC codes
    python main.py --codes 56101 56302      # Scan specific SIC codes
    python main.py --company 00002515       # Classify one company
    python main.py --no-profiles --no-email # Quick run on search summaries only
"""

import argparse
import logging
import sys

from dotenv import load_dotenv

from distress_engine import ConfigurationError, RegistryClient, Settings, classify, run_daily
from distress_engine.reporting import format_report_plain


def setup_logging(verbose: bool = False):
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler("distress_engine.log"),
        ]
    )


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Companies House Distress Monitor",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py                          # Full daily scan
  python main.py --codes 56101 --size 50  # One SIC code, 50 companies
  python main.py --company 00002515       # Classify a single company
        """
    )

    parser.add_argument(
        "--codes",
        nargs="+",
        help="SIC codes to scan (default: SIC_CODES or the built-in target list)"
    )
    parser.add_argument(
        "--watchlist",
        nargs="+",
        help="Company numbers to check in addition to the SIC scan"
    )
    parser.add_argument(
        "--company",
        type=str,
        help="Fetch and classify a single company, then exit"
    )
    parser.add_argument(
        "--size",
        type=int,
        help="Companies requested per SIC code (default: PAGE_SIZE or 20)"
    )
    parser.add_argument(
        "--no-profiles",
        action="store_true",
        help="Classify search summaries without fetching full profiles"
    )
    parser.add_argument(
        "--no-email",
        action="store_true",
        help="Don't send the new-findings email alert"
    )
    parser.add_argument(
        "--no-export",
        action="store_true",
        help="Don't write the daily JSON file"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging"
    )

    return parser.parse_args(argv)


def apply_args(settings: Settings, args) -> Settings:
    """Overlay command line options on settings loaded from the environment."""
    if args.codes:
        settings.sic_codes = tuple(args.codes)
    if args.watchlist:
        settings.watchlist = tuple(args.watchlist)
    if args.size:
        settings.page_size = args.size
    if args.no_profiles:
        settings.fetch_profiles = False
    return settings


def check_company(settings: Settings, company_number: str) -> int:
    client = RegistryClient.from_settings(settings)
    profile = client.get_company_profile(company_number)
    if profile is None:
        print(f"Company {company_number} could not be fetched")
        return 1

    signals = classify(profile)
    print(f"{profile.company_name} ({profile.company_number}) - {profile.company_status}")
    print(f"SIC codes: {', '.join(sorted(profile.sic_codes)) or 'none'}")
    if signals:
        for signal in signals:
            print(f"  - {signal.value}")
    else:
        print("  No distress signals")
    return 0


def main(argv=None) -> int:
    """Main entry point."""
    load_dotenv()
    args = parse_args(argv)
    setup_logging(args.verbose)

    logger = logging.getLogger(__name__)
    logger.info("Starting Companies House Distress Monitor")

    settings = apply_args(Settings.from_env(), args)

    try:
        settings.validate()
        if args.company:
            return check_company(settings, args.company)

        result = run_daily(
            settings,
            send_alert=not args.no_email,
            save_results=not args.no_export,
        )
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return 2
    except Exception as e:
        logger.error(f"Distress scan failed: {e}", exc_info=True)
        return 1

    print(format_report_plain(result["results"], result["watchlist_findings"]))
    print(f"New findings: {len(result['new_findings'])}")
    print(f"Email sent: {'Yes' if result['email_sent'] else 'No'}")
    if result["results_path"]:
        print(f"Saved to: {result['results_path']}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
