"""Command-line entrypoint for geolab."""

from __future__ import annotations

import argparse
import json
import logging
import os
from collections.abc import Sequence
from typing import Any

from geolab.astro.solar import (
    AXIAL_TILT_DEFAULT,
    arctic_circle_latitude,
    daylight_hours,
    describe_axial_tilt,
    doy_to_date,
    solar_declination,
    solar_noon_altitude,
    subsolar_point,
    tropic_latitude,
)
from geolab.circulation.atmospheric import (
    get_cell_boundaries,
    month_to_day_of_year,
    surface_wind_direction,
    wind_zone_at,
)
from geolab.climate.koppen import evaluate_koppen
from geolab.contracts import ClimateDataError, InvalidInputError

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _parse_series(value: str) -> list[float]:
    """Parse a comma-separated list of twelve numbers."""
    try:
        series = [float(item) for item in value.split(",")]
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid number list: {value}") from exc
    if len(series) != 12:
        raise argparse.ArgumentTypeError(f"expected 12 values, got {len(series)}")
    return series


def _parse_day(value: str) -> int:
    day = int(value)
    if not 1 <= day <= 366:
        raise argparse.ArgumentTypeError("day of year must be within 1..366")
    return day


def _parse_log_level(value: str) -> str:
    """Normalize a logging level name, rejecting unknown levels."""
    level = value.strip().upper()
    if level not in _LOG_LEVELS:
        raise argparse.ArgumentTypeError(
            f"invalid log level: {value} (choose from {', '.join(_LOG_LEVELS)})"
        )
    return level


def build_parser() -> argparse.ArgumentParser:
    """Create and return the top-level CLI parser."""
    parser = argparse.ArgumentParser(
        prog="geolab",
        description="Geography lab: solar geometry, circulation and Köppen climates.",
    )
    parser.add_argument("--version", action="version", version="%(prog)s 0.1.0")
    parser.add_argument(
        "--log-level",
        type=_parse_log_level,
        default=os.getenv("GEOLAB_LOG_LEVEL", "WARNING"),
        help="Logging level (default from GEOLAB_LOG_LEVEL, else WARNING).",
    )

    subparsers = parser.add_subparsers(dest="command")

    solar = subparsers.add_parser("solar", help="Solar geometry for a latitude and day of year.")
    solar.add_argument("--lat", type=float, required=True)
    solar.add_argument("--day", type=_parse_day, required=True)
    solar.add_argument("--hour-utc", type=float, default=12.0)
    solar.add_argument("--tilt", type=float, default=AXIAL_TILT_DEFAULT)

    circulation = subparsers.add_parser("circulation", help="Cell boundaries for a date.")
    when = circulation.add_mutually_exclusive_group(required=True)
    when.add_argument("--day", type=_parse_day)
    when.add_argument("--month", type=int, choices=range(1, 13))
    circulation.add_argument("--lat", type=float, default=None)

    koppen = subparsers.add_parser("koppen", help="Classify monthly normals (comma-separated).")
    koppen.add_argument("--lat", type=float, required=True)
    source = koppen.add_mutually_exclusive_group(required=True)
    source.add_argument("--temperature", type=_parse_series)
    source.add_argument("--lon", type=float, help="Fetch normals for lat/lon instead.")
    koppen.add_argument("--precipitation", type=_parse_series)
    koppen.add_argument("--provider", choices=["mock", "open_meteo"], default=None)

    return parser


def _solar(args: argparse.Namespace) -> dict[str, Any]:
    month, day = doy_to_date(args.day)
    lon, lat = subsolar_point(args.day, args.hour_utc, args.tilt)
    return {
        "day_of_year": args.day,
        "month": month,
        "day": day,
        "declination": solar_declination(args.day, args.tilt),
        "daylight_hours": daylight_hours(args.lat, args.day, args.tilt),
        "noon_altitude": solar_noon_altitude(args.lat, args.day, args.tilt),
        "subsolar_point": {"lon": lon, "lat": lat},
        "tropic_latitude": tropic_latitude(args.tilt),
        "arctic_circle_latitude": arctic_circle_latitude(args.tilt),
        "tilt_description": describe_axial_tilt(args.tilt),
    }


def _circulation(args: argparse.Namespace) -> dict[str, Any]:
    doy = args.day if args.day is not None else month_to_day_of_year(args.month)
    out: dict[str, Any] = {"day_of_year": doy, "boundaries": get_cell_boundaries(doy).to_dict()}
    if args.lat is not None:
        out["wind_zone"] = wind_zone_at(args.lat, doy).id
        out["wind_direction"] = surface_wind_direction(args.lat, doy)
    return out


def _koppen(args: argparse.Namespace, parser: argparse.ArgumentParser) -> dict[str, Any]:
    if args.temperature is not None:
        if args.precipitation is None:
            parser.error("--precipitation is required with --temperature")
        temperature, precipitation = args.temperature, args.precipitation
    else:
        from geolab.ingest.factory import create_climate_provider

        provider = create_climate_provider(args.provider)
        try:
            normals = provider.get_monthly_normals(args.lat, args.lon)
        finally:
            provider.close()
        temperature, precipitation = list(normals.temperature), list(normals.precipitation)

    result, trace = evaluate_koppen(temperature, precipitation, args.lat)
    return {"result": result.to_dict(), "trace": trace.to_dict()}


def main(argv: Sequence[str] | None = None) -> int:
    """Run the CLI application."""
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=args.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        return 0

    try:
        if args.command == "solar":
            output = _solar(args)
        elif args.command == "circulation":
            output = _circulation(args)
        else:
            output = _koppen(args, parser)
    except InvalidInputError as exc:
        parser.error(str(exc))
    except ClimateDataError as exc:
        logging.getLogger(__name__).error("climate data unavailable: %s", exc)
        return 1

    print(json.dumps(output, ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
