"""Loadsheet command line tool.

Computes a preliminary loadsheet offline, or checks that the loadsheet
backend is reachable.

Typical usage:
    python -m loadsheet.main estimate --pax 150 --cargo 2000 --fuel 6000
    python -m loadsheet.main --config config/loadsheet.yaml status
"""

import argparse
import asyncio
import sys
from datetime import datetime
from pathlib import Path

from loadsheet.core.config import ConfigError, ConfigLoader, LoadsheetSettings
from loadsheet.core.errors import LoadsheetError
from loadsheet.core.logging_system import (
    LoggingError,
    get_logger,
    initialize_logging,
    shutdown_logging,
)
from loadsheet.formatting import CrewFillerGenerator, FlightMeta, LoadsheetFormatter
from loadsheet.generation import LoadsheetGenerationCoordinator
from loadsheet.telemetry import DictTelemetryProvider
from loadsheet.weight_balance import CargoCapacities, FlightPlan, WeightDistributionEngine

logger = get_logger(__name__)

DEFAULT_CONFIG = Path(__file__).parent.parent.parent / "config" / "loadsheet.yaml"


def load_settings(config_path: str | None) -> LoadsheetSettings:
    """Load settings from a file, the bundled default file, or defaults.

    Raises:
        ConfigError: If an explicitly given file cannot be loaded.
    """
    if config_path:
        return LoadsheetSettings.from_config(ConfigLoader.load(config_path))
    if DEFAULT_CONFIG.exists():
        return LoadsheetSettings.from_config(ConfigLoader.load(DEFAULT_CONFIG))
    return LoadsheetSettings()


def _zone_capacities(value: str) -> list[int]:
    try:
        zones = [int(v) for v in value.split(",")]
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"invalid zone capacities: {value}") from e
    if len(zones) != 4:
        raise argparse.ArgumentTypeError("exactly 4 zone capacities are required")
    return zones


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments.

    Returns:
        Parsed arguments
    """
    parser = argparse.ArgumentParser(description="Loadsheet weight & balance tool")

    parser.add_argument(
        "--config",
        type=str,
        help="Path to loadsheet configuration YAML (default: config/loadsheet.yaml)",
    )

    parser.add_argument(
        "--log-config",
        type=str,
        help="Path to logging configuration YAML",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    estimate = subparsers.add_parser("estimate", help="Compute a preliminary loadsheet")
    estimate.add_argument("--pax", type=int, required=True, help="Planned passengers")
    estimate.add_argument("--cargo", type=float, default=0.0, help="Planned cargo (kg)")
    estimate.add_argument("--fuel", type=float, required=True, help="Planned block fuel (kg)")
    estimate.add_argument(
        "--zones",
        type=_zone_capacities,
        default=[36, 36, 30, 30],
        help="Seat capacity of zones 1-4, comma separated (default: 36,36,30,30)",
    )
    estimate.add_argument(
        "--fwd-hold", type=float, default=3402.0, help="Forward hold capacity (kg)"
    )
    estimate.add_argument("--aft-hold", type=float, default=5062.0, help="Aft hold capacity (kg)")
    estimate.add_argument("--empty-weight", type=float, default=42500.0, help="Empty weight (kg)")
    estimate.add_argument("--seed", type=int, help="Seed for the estimation jitter")
    estimate.add_argument("--flight", type=str, default="XX123", help="Flight number")
    estimate.add_argument("--origin", type=str, default="ZZZZ", help="Origin ICAO code")
    estimate.add_argument("--destination", type=str, default="ZZZZ", help="Destination ICAO code")
    estimate.add_argument("--tail", type=str, default="N/A", help="Aircraft registration")

    status = subparsers.add_parser("status", help="Check that the loadsheet backend is reachable")
    status.add_argument("--url", type=str, help="Backend URL (overrides configuration)")

    return parser.parse_args(argv)


def run_estimate(args: argparse.Namespace, settings: LoadsheetSettings) -> int:
    """Print a preliminary loadsheet computed from command line figures."""
    seed = args.seed if args.seed is not None else settings.estimation.seed
    engine = WeightDistributionEngine(settings.aircraft, seed=seed)
    plan = FlightPlan(passengers=args.pax, cargo_total=args.cargo, fuel=args.fuel)

    data = engine.compute_preliminary(
        plan,
        args.zones,
        CargoCapacities(forward=args.fwd_hold, aft=args.aft_hold),
        args.empty_weight,
    )

    now = datetime.now()
    meta = FlightMeta(
        time=now.strftime("%H%M"),
        flight_number=args.flight,
        day=now.strftime("%d"),
        date=now.strftime("%d%b%y").upper(),
        origin=args.origin,
        destination=args.destination,
        tail_number=args.tail,
    )
    formatter = LoadsheetFormatter(crew=CrewFillerGenerator(seed=seed))

    print(formatter.format_preliminary(data, settings.limits, meta))
    for warning in data.warnings:
        print(f"WARNING: {warning}", file=sys.stderr)
    return 0


def run_status(args: argparse.Namespace, settings: LoadsheetSettings) -> int:
    """Check backend health. Exit code 0 when reachable."""
    if args.url:
        settings.backend.base_url = args.url

    coordinator = LoadsheetGenerationCoordinator.from_settings(settings, DictTelemetryProvider())
    reachable = asyncio.run(coordinator.check_server_status())

    url = settings.backend.base_url or "(not configured)"
    print(f"Backend {url}: {'reachable' if reachable else 'NOT reachable'}")
    return 0 if reachable else 1


def main(argv: list[str] | None = None) -> int:
    """Main entry point.

    Returns:
        Exit code (0 for success).
    """
    args = parse_args(argv)

    try:
        initialize_logging(args.log_config)
        settings = load_settings(args.config)

        if args.command == "estimate":
            return run_estimate(args, settings)
        return run_status(args, settings)
    except (ConfigError, LoggingError, LoadsheetError, ValueError) as e:
        logger.error("%s", e)
        print(f"Error: {e}", file=sys.stderr)
        return 2
    finally:
        shutdown_logging()


if __name__ == "__main__":
    sys.exit(main())
