#!/usr/bin/env python3
"""Query an asset CSV by bounding box or radius.

Loads the asset source once through the library cache and prints the
matching assets along with parse diagnostics.

Usage
-----
::

    python scripts/query_assets.py --path hydrants.csv radius 40.7128 -74.0060 --km 1
    python scripts/query_assets.py --url https://example.org/hydrants.csv \\
        bounds --north 40.72 --south 40.70 --east -73.99 --west -74.01

Options::

    --path FILE          Read the CSV from FILE (default: $HYDRANTGATE_SOURCE_PATH)
    --url URL            Fetch the CSV from URL (default: $HYDRANTGATE_SOURCE_URL)
    --region S,N,W,E     Admissible region (default: New York City)
    --limit N            Maximum number of results
    --json               Output as machine-readable JSON
    -v, --verbose        Enable debug logging
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from hydrantgate import (  # noqa: E402
    AdmissibleRegion,
    AssetSourceError,
    BoundingBox,
    GateConfig,
    GeoPoint,
    HydrantGateClient,
    HydrantGateConfigError,
    calculate_distance,
)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Query a geocoded asset CSV.")
    parser.add_argument("--path", help="Local CSV path")
    parser.add_argument("--url", help="CSV URL")
    parser.add_argument("--region", help="Admissible region as south,north,west,east")
    parser.add_argument("--limit", type=int, default=None, help="Maximum number of results")
    parser.add_argument("--json", action="store_true", help="Output JSON")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    sub = parser.add_subparsers(dest="query", required=True)

    radius = sub.add_parser("radius", help="Assets within a radius of a point")
    radius.add_argument("latitude", type=float)
    radius.add_argument("longitude", type=float)
    radius.add_argument("--km", type=float, default=None, help="Radius in kilometres")

    bounds = sub.add_parser("bounds", help="Assets inside a bounding box")
    bounds.add_argument("--north", type=float, required=True)
    bounds.add_argument("--south", type=float, required=True)
    bounds.add_argument("--east", type=float, required=True)
    bounds.add_argument("--west", type=float, required=True)
    return parser


def _config_from_args(args: argparse.Namespace) -> GateConfig:
    overrides: dict[str, Any] = {}
    if args.url:
        overrides["source_url"] = args.url
    if args.path:
        overrides["source_path"] = args.path
        overrides.setdefault("source_url", None)
    if args.region:
        overrides["region"] = AdmissibleRegion.parse(args.region)
    return GateConfig.from_env(**overrides)


async def _run(args: argparse.Namespace) -> int:
    config = _config_from_args(args)
    async with HydrantGateClient(config) as client:
        center: GeoPoint | None = None
        if args.query == "radius":
            center = GeoPoint(latitude=args.latitude, longitude=args.longitude)
            records = await client.get_by_radius(center, args.km, args.limit)
        else:
            box = BoundingBox(north=args.north, south=args.south, east=args.east, west=args.west)
            records = await client.get_by_bounds(box, args.limit)

        rows: list[dict[str, Any]] = []
        for record in records:
            row = record.model_dump()
            if center is not None:
                row["distance_km"] = round(
                    calculate_distance(center.latitude, center.longitude, record.latitude, record.longitude),
                    4,
                )
            rows.append(row)

        report = client.cache.last_report
        if args.json:
            payload = {
                "count": len(rows),
                "assets": rows,
                "parse": None
                if report is None
                else {
                    "rows_total": report.rows_total,
                    "records": report.records,
                    "rows_dropped": report.rows_dropped,
                },
            }
            print(json.dumps(payload, indent=2))
        else:
            for row in rows:
                extra = f"  ({row['distance_km']} km)" if "distance_km" in row else ""
                print(f"{row['latitude']:.6f}, {row['longitude']:.6f}{extra}")
            print(f"\n{len(rows)} assets")
            if report is not None:
                print(f"parsed {report.records} of {report.rows_total} rows ({report.rows_dropped} dropped)")
    return 0


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        return asyncio.run(_run(args))
    except (AssetSourceError, HydrantGateConfigError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
