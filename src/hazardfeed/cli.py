"""
Command-line interface for HazardFeed.
"""

import argparse
import asyncio
import json
import logging
import sys
import time
from typing import List, Optional

from rich.console import Console
from rich.table import Table

from .core.config import AdapterSet, AppConfig
from .core.models import AlertRecord, AlertSeverity
from .notifications.dispatch import create_dispatch_hook
from .processing.aggregator import AlertAggregator, build_sources
from .processing.filters import AlertQuery, filter_alerts, normalize_severity_name, normalize_type_name
from .utils.logging import get_logger, setup_logging

console = Console()
logger = logging.getLogger(__name__)

SEVERITY_STYLES = {
    AlertSeverity.MINOR: "green",
    AlertSeverity.MODERATE: "yellow",
    AlertSeverity.SEVERE: "red",
    AlertSeverity.EXTREME: "bold red",
}


def load_config(config_path: Optional[str], adapter: Optional[str]) -> AppConfig:
    """Load configuration and apply a command-line adapter override."""
    config = AppConfig.from_yaml(config_path)
    if adapter:
        config.alerts_adapter = AdapterSet.parse(adapter)
    return config


def build_query(args: argparse.Namespace) -> AlertQuery:
    """Build an AlertQuery from parsed arguments."""
    return AlertQuery(
        alert_type=normalize_type_name(args.type) if args.type else None,
        severity=normalize_severity_name(args.severity) if args.severity else None,
        lat=args.lat,
        lng=args.lng,
        radius_m=args.radius,
        limit=args.limit or None,
    )


def render_alerts(alerts: List[AlertRecord]) -> None:
    """Print alerts as a table."""
    table = Table(title=f"{len(alerts)} alerts")
    table.add_column("Severity")
    table.add_column("Type")
    table.add_column("Headline")
    table.add_column("Source")
    table.add_column("Starts")
    table.add_column("Geometry")

    for alert in alerts:
        style = SEVERITY_STYLES.get(alert.severity, "")
        table.add_row(
            f"[{style}]{alert.severity.value}[/{style}]",
            alert.type.value,
            alert.headline,
            alert.source,
            alert.starts_at.isoformat() if alert.starts_at else "-",
            alert.geometry.type,
        )
    console.print(table)


async def fetch_command(args: argparse.Namespace) -> int:
    """Run one aggregation cycle and print the result."""
    config = load_config(args.config, args.adapter)
    _, performance_logger = setup_logging(config.logging)

    async with AlertAggregator.from_config(
        config,
        dispatch_hook=create_dispatch_hook(config.dispatch),
        performance_logger=performance_logger,
    ) as aggregator:
        alerts = await aggregator.fetch_all_alerts()

    alerts = filter_alerts(alerts, build_query(args))
    if args.json:
        print(json.dumps([alert.model_dump(mode="json") for alert in alerts], indent=2))
    else:
        render_alerts(alerts)
    return 0


async def poll_command(args: argparse.Namespace) -> int:
    """Run aggregation cycles every poll interval."""
    config = load_config(args.config, args.adapter)
    _, performance_logger = setup_logging(config.logging)
    log = get_logger("poll")

    async with AlertAggregator.from_config(
        config,
        dispatch_hook=create_dispatch_hook(config.dispatch),
        performance_logger=performance_logger,
    ) as aggregator:
        cycle = 0
        while args.cycles is None or cycle < args.cycles:
            cycle += 1
            alerts = await aggregator.fetch_all_alerts()
            log.info("poll_cycle_complete", cycle=cycle, alerts=len(alerts))
            console.print(f"[bold]Cycle {cycle}:[/bold] {len(alerts)} alerts")
            if args.cycles is not None and cycle >= args.cycles:
                break
            await asyncio.sleep(config.poll_interval)
    return 0


async def test_sources_command(args: argparse.Namespace) -> int:
    """Fetch each selected source alone and report counts."""
    config = load_config(args.config, args.adapter)
    setup_logging(config.logging)

    console.print("[bold blue]Testing alert sources[/bold blue]")
    failures = 0
    for source in build_sources(config):
        started = time.perf_counter()
        try:
            alerts = await asyncio.wait_for(source.fetch_alerts(), timeout=config.aggregator.source_timeout)
        except asyncio.TimeoutError:
            console.print(f"  [red]✗ {source.name}: timed out[/red]")
            failures += 1
            continue
        finally:
            await source.close()
        elapsed = time.perf_counter() - started
        if alerts:
            console.print(f"  [green]✓ {source.name}: {len(alerts)} alerts in {elapsed:.2f}s[/green]")
        else:
            console.print(f"  [yellow]⚠ {source.name}: no alerts in {elapsed:.2f}s[/yellow]")
    return 1 if failures else 0


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        description="HazardFeed natural hazard alert aggregator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s fetch --adapter all                     Aggregate every source once
  %(prog)s fetch --type fire --severity severe     Only severe wildfires
  %(prog)s fetch --lat 37.8 --lng -122.4 --json    Alerts within 50km as JSON
  %(prog)s poll --cycles 3                         Poll three times
  %(prog)s test-sources --adapter all              Check each feed
        """
    )
    adapters = [member.value for member in AdapterSet]

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument('--config', '-c',
                        help='Configuration file path (default: config/default.yaml)',
                        default='config/default.yaml')
    common.add_argument('--adapter', '-a', choices=adapters,
                        help='Adapter set override (default: from configuration)')

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    fetch_parser = subparsers.add_parser('fetch', parents=[common], help='Run one aggregation cycle')
    fetch_parser.add_argument('--type', help='Only this alert type (e.g. earthquake, fire)')
    fetch_parser.add_argument('--severity', help='Only this severity (minor, moderate, severe, extreme)')
    fetch_parser.add_argument('--lat', type=float, help='Latitude of the point of interest')
    fetch_parser.add_argument('--lng', type=float, help='Longitude of the point of interest')
    fetch_parser.add_argument('--radius', type=float, default=50_000.0,
                              help='Radius in metres around --lat/--lng (default: 50000)')
    fetch_parser.add_argument('--limit', type=int, default=50,
                              help='Maximum number of alerts to show, 0 for no limit (default: 50)')
    fetch_parser.add_argument('--json', action='store_true', help='Print alerts as JSON')

    poll_parser = subparsers.add_parser('poll', parents=[common], help='Aggregate repeatedly')
    poll_parser.add_argument('--cycles', type=int, help='Stop after this many cycles')

    subparsers.add_parser('test-sources', parents=[common], help='Fetch each source alone')

    return parser


COMMANDS = {
    'fetch': fetch_command,
    'poll': poll_command,
    'test-sources': test_sources_command,
}


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    try:
        sys.exit(asyncio.run(COMMANDS[args.command](args)))
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        sys.exit(0)
    except ValueError as e:
        console.print(f"[red]Configuration error: {e}[/red]")
        sys.exit(2)


if __name__ == "__main__":
    main()
