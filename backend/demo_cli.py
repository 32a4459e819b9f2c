#!/usr/bin/env python3
"""
RVU Analytics Engine - Demo CLI

Prints the statistics views for a snapshot of billed cases, or the MPPR
breakdown for a set of codes billed together.

Usage:
    python demo_cli.py --sample                       # Built-in sample history
    python demo_cli.py --file cases.json              # Snapshot from a JSON file
    python demo_cli.py --file cases.json --view analytics
    python demo_cli.py --adjust 27447:20.72 27370:2.9 # MPPR for one session
"""

import argparse
import json
import logging
import sys
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any

from rvu_engine.core.config import settings
from rvu_engine.core.exceptions import ContractViolationError
from rvu_engine.core.logging_config import configure_logging
from rvu_engine.services.rvu_adjustment import calculate_adjusted_rvus, calculate_adjusted_value
from rvu_engine.services.statistics import StatisticsConfig, StatisticsService
from rvu_engine.services.trends import Trend

logger = logging.getLogger(__name__)

VIEWS = ("dashboard", "analytics", "procedures", "common")

# ============================================================================
# Sample Snapshot
# ============================================================================


def build_sample_snapshot(now: datetime) -> list[dict[str, Any]]:
    """A short orthopaedic case history relative to ``now``."""
    def case(case_id: str, days_ago: int, codes: list[tuple[str, str, float, str]]) -> dict[str, Any]:
        created = now - timedelta(days=days_ago)
        adjusted = calculate_adjusted_rvus({"code": c, "rvu": r} for c, _, r, _ in codes)
        return {
            "id": case_id,
            "totalRvu": adjusted.total_adjusted_rvu,
            "estimatedValue": round(adjusted.total_adjusted_rvu * settings.default_rate_per_rvu, 2),
            "createdAt": created.isoformat(),
            "codes": [
                {
                    "code": c,
                    "description": d,
                    "rvu": r,
                    "category": cat,
                    "createdAt": created.isoformat(),
                }
                for c, d, r, cat in codes
            ],
        }

    tka = ("27447", "Total knee arthroplasty", 20.72, "Knee")
    tha = ("27130", "Total hip arthroplasty", 20.72, "Hip")
    scope = ("29881", "Knee arthroscopy/meniscectomy", 7.03, "Knee")
    injection = ("20610", "Arthrocentesis, major joint", 0.79, "")
    return [
        case("C-001", 2, [tka, injection]),
        case("C-002", 5, [scope]),
        case("C-003", 12, [tha]),
        case("C-004", 20, [scope, injection]),
        case("C-005", 40, [tka]),
        case("C-006", 75, [scope]),
        case("C-007", 400, [tha, injection]),
    ]


# ============================================================================
# Display Functions
# ============================================================================

class Colors:
    """ANSI color codes for terminal output."""
    CYAN = '\033[96m'
    GREEN = '\033[92m'
    YELLOW = '\033[93m'
    RED = '\033[91m'
    BOLD = '\033[1m'
    END = '\033[0m'
    GRAY = '\033[90m'


TREND_MARKS = {
    Trend.UP: f"{Colors.GREEN}▲ up{Colors.END}",
    Trend.DOWN: f"{Colors.RED}▼ down{Colors.END}",
    Trend.STABLE: f"{Colors.GRAY}■ stable{Colors.END}",
}


def print_header(text: str, char: str = "="):
    """Print a formatted header."""
    width = 80
    print()
    print(f"{Colors.BOLD}{Colors.CYAN}{char * width}{Colors.END}")
    print(f"{Colors.BOLD}{Colors.CYAN}{text.center(width)}{Colors.END}")
    print(f"{Colors.BOLD}{Colors.CYAN}{char * width}{Colors.END}")


def print_subheader(text: str):
    """Print a formatted subheader."""
    print()
    print(f"{Colors.BOLD}{Colors.YELLOW}{'─' * 80}{Colors.END}")
    print(f"{Colors.BOLD}{Colors.YELLOW}  {text}{Colors.END}")
    print(f"{Colors.BOLD}{Colors.YELLOW}{'─' * 80}{Colors.END}")


def print_item(label: str, value: Any, indent: int = 2):
    """Print a labeled item."""
    spaces = " " * indent
    print(f"{spaces}{Colors.GRAY}{label}:{Colors.END} {value}")


def print_error(text: str):
    """Print error message."""
    print(f"  {Colors.RED}✗{Colors.END} {text}")


def display_dashboard(service: StatisticsService, cases: list, now: datetime):
    summary = service.dashboard_summary(cases, now=now)
    print_subheader("DASHBOARD")
    print_item("Total codes", summary.total_codes)
    print_item(f"Last {service.config.recent_code_days} days", summary.recent_codes_count)
    print_item("This month", summary.this_month_codes)
    print_item("Total RVU", f"{summary.total_rvu:.2f}")
    print_item("Unique codes", summary.unique_codes)
    for code in summary.recent_codes:
        print(f"    {code.billed_on}  {code.code:<8} {code.rvu:>6.2f}  {code.description}")


def display_analytics(service: StatisticsService, cases: list, now: datetime):
    trends = service.analytics_trends(cases, now=now)
    print_subheader("ANALYTICS")
    print_item("Total RVU", f"{trends.total_rvu:.2f}")
    print_item("Total revenue", f"${trends.total_revenue:,.2f}")
    print_item("Cases", trends.case_count)
    print_item("RVU trend", TREND_MARKS[trends.rvu_trend])
    print_item("Revenue trend", TREND_MARKS[trends.revenue_trend])
    for series in (trends.weekly, trends.monthly, trends.yearly):
        print()
        print(f"  {Colors.BOLD}{series.granularity.value.title()}{Colors.END}"
              f"  rvu {TREND_MARKS[series.rvu_trend]}  revenue {TREND_MARKS[series.revenue_trend]}")
        for bucket in series.buckets:
            bar = "█" * min(int(bucket.rvu_sum), 60)
            print(f"    {bucket.label:>9} {bucket.rvu_sum:>8.2f} {Colors.CYAN}{bar}{Colors.END}")


def display_procedures(service: StatisticsService, cases: list, now: datetime):
    report = service.procedure_rankings(cases)
    print_subheader("PROCEDURE RANKINGS")
    print_item("Procedures billed", report.total_procedure_count)
    sections = (
        ("Most frequent", report.most_frequent),
        ("Most profitable", report.most_profitable),
        ("Least profitable (billed more than once)", report.least_profitable),
    )
    for title, entries in sections:
        print(f"\n  {Colors.BOLD}{title}{Colors.END}")
        for entry in entries:
            print(f"    {entry.code:<8} x{entry.count:<3} avg {entry.average_rvu:>6.2f} RVU"
                  f"  ${entry.total_revenue:>10,.2f}  {entry.description}")
    print(f"\n  {Colors.BOLD}By category{Colors.END}")
    for total in report.by_category:
        print(f"    {total.category:<12} {total.count:>4}  {total.total_rvu:>8.2f} RVU")


def display_common(service: StatisticsService, cases: list, now: datetime):
    common = service.common_codes(cases, now=now)
    print_subheader("COMMON CODES")
    print_item("Unique codes", common.total_unique_codes)
    for entry in common.most_used:
        print(f"    {entry.code:<8} x{entry.count:<3} {entry.description}")


DISPLAYS = {
    "dashboard": display_dashboard,
    "analytics": display_analytics,
    "procedures": display_procedures,
    "common": display_common,
}


def display_adjustment(pairs: list[str], rate: float):
    """Print the MPPR breakdown for CODE:RVU pairs."""
    codes = []
    for pair in pairs:
        code, _, rvu = pair.partition(":")
        codes.append({"code": code, "rvu": float(rvu or 0)})

    result = calculate_adjusted_rvus(codes)
    print_header("MULTIPLE PROCEDURE PAYMENT REDUCTION")
    for entry in result.breakdown:
        print(f"  #{entry.position} {entry.code:<8} {entry.original_rvu:>7.2f} x {entry.adjustment_factor:.1f}"
              f" = {entry.adjusted_rvu:>7.2f}  {Colors.GRAY}{entry.adjustment_description}{Colors.END}")
    print()
    print_item("Unadjusted total", f"{result.unadjusted_total:.2f}")
    print_item("Adjusted total", f"{result.total_adjusted_rvu:.2f}")
    print_item("Reduction", f"{result.reduction_amount:.2f}")
    print_item(f"Estimated value @ ${rate:.2f}", f"${calculate_adjusted_value(codes, rate):,.2f}")


# ============================================================================
# Main Entry Point
# ============================================================================

def main():
    parser = argparse.ArgumentParser(
        description="RVU Analytics Engine - Demo CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python demo_cli.py --sample                        # Sample history, all views
  python demo_cli.py --file cases.json --view common # One view of a snapshot
  python demo_cli.py --adjust 27447:20.72 20610:0.79 # MPPR for one session
"""
    )
    parser.add_argument('--file', '-f', help='Path to a JSON list of cases')
    parser.add_argument('--sample', '-s', action='store_true', help='Use the sample case history')
    parser.add_argument('--view', '-v', choices=VIEWS + ("all",), default="all", help='View to print')
    parser.add_argument('--rate', '-r', type=float, default=settings.default_rate_per_rvu,
                        help='Currency per RVU')
    parser.add_argument('--adjust', '-a', nargs='+', metavar='CODE:RVU',
                        help='Apply MPPR to codes billed together')

    args = parser.parse_args()
    configure_logging(settings.log_level.upper(), structured=settings.structured_logging)

    try:
        if args.adjust:
            display_adjustment(args.adjust, args.rate)
            return

        now = datetime.now().astimezone()
        if args.sample:
            cases = build_sample_snapshot(now)
            print_header("SAMPLE CASE HISTORY")
        elif args.file:
            path = Path(args.file)
            if not path.exists():
                print(f"Error: File not found: {args.file}")
                sys.exit(1)
            cases = json.loads(path.read_text())
            print_header(f"SNAPSHOT: {path.name}")
        else:
            parser.print_help()
            return

        service = StatisticsService(rate_per_rvu=args.rate, config=StatisticsConfig.from_settings(settings))
        views = VIEWS if args.view == "all" else (args.view,)
        for view in views:
            DISPLAYS[view](service, cases, now)
        print()
    except ContractViolationError as e:
        print_error(str(e))
        sys.exit(2)

if __name__ == "__main__":
    main()
