#!/usr/bin/env python3
"""
run_lifeclock.py - Life Clock Snapshot Runner

Computes one life clock snapshot for a profile and prints it:
1. Resolve life expectancy (income data for USA, otherwise country data)
2. Break down time lived and time remaining
3. Build the life grid at the requested granularity
4. Count remaining milestones
5. Optionally export the grid to CSV

Usage:
    python run_lifeclock.py --birthday 1990-06-15 --gender female --country USA

    python run_lifeclock.py \\
        --birthday 1985-02-28 \\
        --gender male \\
        --country USA \\
        --income 85000 \\
        --granularity weeks \\
        --export grid.csv

Author: LifeClock Project
Version: 1.0.0
"""

import argparse
import sys
import logging
from datetime import datetime
from typing import Optional, Dict, Any

# Set up logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def parse_instant(value: str) -> datetime:
    """Parse YYYY-MM-DD or YYYY-MM-DDTHH:MM:SS."""
    if 'T' in value:
        return datetime.strptime(value, '%Y-%m-%dT%H:%M:%S')
    return datetime.strptime(value, '%Y-%m-%d')


def run_snapshot(
    config: Dict[str, Any],
    now: datetime,
    granularity: str = 'years',
    export_path: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Compute and print one snapshot.

    Args:
        config: create_life_clock config dict
        now: Reference instant
        granularity: 'years', 'months' or 'weeks'
        export_path: Optional CSV path for the grid

    Returns:
        Dict with the clock and snapshot
    """
    from lifeclock import create_life_clock, format_clock, format_time_lived, format_income
    from lifeclock.income_mapper import IncomePercentileMapper
    from lifeclock.timeline import granularity_label, unit_name

    print("=" * 70)
    print("LIFE CLOCK")
    print("=" * 70)
    print(f"Birthday:    {config['birthday']}")
    print(f"Gender:      {config['gender']}")
    print(f"Country:     {config['country']}")
    print(f"Now:         {now:%Y-%m-%d %H:%M:%S}")
    print()

    clock = create_life_clock(config)
    snapshot = clock.tick(now, granularity)

    # =========================================================================
    # LIFE EXPECTANCY
    # =========================================================================
    source = snapshot.life_expectancy.source
    print("Life expectancy:")
    print(f"  Estimate:     {snapshot.life_expectancy.years:.1f} years")
    print(f"  Source:       {source.dataset_name} - {source.description}")
    print(f"  Expected end: {snapshot.expected_end:%B %d, %Y}")

    percentile = clock.profile.income_percentile
    if percentile is not None:
        band = IncomePercentileMapper(clock.store).income_range(percentile, clock.profile.gender)
        if band is not None:
            print(f"  Income band:  {format_income(band[0])} - {format_income(band[1])}")
    print()

    # =========================================================================
    # TIME
    # =========================================================================
    lived = snapshot.time_lived
    remaining = snapshot.time_remaining
    print("Time:")
    print(f"  Lived:     {format_time_lived(lived) or '0 days'} "
          f"{format_clock(lived.hours, lived.minutes, lived.seconds)}")
    if snapshot.is_over_life_expectancy:
        print("  Remaining: past the expected end - every day is a bonus")
    else:
        print(f"  Remaining: {format_time_lived(remaining) or '0 days'} "
              f"{format_clock(remaining.hours, remaining.minutes, remaining.seconds)}")
    print()

    # =========================================================================
    # TIMELINE
    # =========================================================================
    timeline = snapshot.timeline
    if timeline is not None:
        layout = timeline.layout
        print(f"Timeline ({granularity_label(timeline.granularity)}):")
        print(f"  Grid:      {layout.rows} x {layout.columns}")
        print(f"  Lived:     {layout.lived_units:,} {unit_name(timeline.granularity, layout.lived_units)}")
        print(f"  Remaining: {layout.remaining_units:,} "
              f"{unit_name(timeline.granularity, layout.remaining_units)}")
        print(f"  Complete:  {layout.percent_complete:.1f}%")
        print()

        if export_path:
            timeline.to_frame().to_csv(export_path, index=False)
            print(f"  Grid exported to: {export_path}")
            print()

    # =========================================================================
    # MILESTONES
    # =========================================================================
    if snapshot.milestones:
        print("Milestones remaining:")
        for milestone in snapshot.milestones:
            print(f"  {milestone.icon} {milestone.label:<20} {milestone.count:>6,}  {milestone.description}")
        print()

    return {'clock': clock, 'snapshot': snapshot}


def main():
    parser = argparse.ArgumentParser(
        description='Compute a life clock snapshot',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python run_lifeclock.py --birthday 1990-06-15 --gender female --country JPN

  python run_lifeclock.py \\
      --birthday 1985-02-28 \\
      --gender male \\
      --country USA \\
      --percentile 75 \\
      --granularity months \\
      --milestones birthdays summers weekends \\
      --holidays christmas easter
"""
    )

    parser.add_argument('--birthday', type=str, help='Date of birth (YYYY-MM-DD)')
    parser.add_argument('--gender', type=str, help='male, female or other')
    parser.add_argument('--country', type=str, help='ISO alpha-3 country code (e.g., USA)')
    parser.add_argument('--percentile', type=int, help='US household income percentile (1-100)')
    parser.add_argument('--income', type=float, help='US household income in dollars')
    parser.add_argument('--granularity', type=str, default='years',
                        choices=['years', 'months', 'weeks'], help='Timeline cell size')
    parser.add_argument('--now', type=str, help='Reference instant (default: current time)')
    parser.add_argument('--milestones', nargs='*', help='Milestone types to count')
    parser.add_argument('--holidays', nargs='*', help='Holiday ids to count')
    parser.add_argument('--data-dir', type=str, help='Directory with the data files')
    parser.add_argument('--export', type=str, help='Export the timeline grid to CSV')

    args = parser.parse_args()

    # Check required arguments
    required = ['birthday', 'gender', 'country']
    missing = [arg for arg in required if getattr(args, arg) is None]

    if missing:
        print(f"ERROR: Missing required arguments: {', '.join(missing)}")
        print("Use --help for usage.")
        sys.exit(1)

    config = {
        'birthday': args.birthday,
        'gender': args.gender,
        'country': args.country,
        'income_percentile': args.percentile,
        'income': args.income,
        'data_dir': args.data_dir,
        'milestones': args.milestones,
        'holidays': args.holidays,
    }

    now = parse_instant(args.now) if args.now else datetime.now()

    run_snapshot(config, now, granularity=args.granularity, export_path=args.export)


if __name__ == '__main__':
    main()
