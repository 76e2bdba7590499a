# -*- coding: utf-8 -*-
"""
Command Line - Elbow sweep and final regionalization over NumPy arrays.

Reads a band stack from a ``.npz`` archive (one 2D array per band, band
order = archive order) or a 3D ``.npy`` array, and either prints the elbow
series or writes the canonical region labels.

Usage:
  georegion elbow stack.npz --config regions.yaml --json elbow.json
  georegion elbow stack.npz --max-clusters 12 --auto-k
  georegion classify stack.npz -k 5 -o regions.npy
  georegion classify stack.npz --auto-k --reference-band rate -o regions.npy

``classify`` writes the ``(rows, cols)`` int32 label array and a JSON
sidecar (``regions.npy.json``) with centers, dispersion, label LUT and band
names.

License
-------
MIT License
Copyright (c) 2024 geoint.org
See LICENSE file for full text.

Created
-------
2026-10-18

Modified
--------
2026-10-18
"""

# Standard library
import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

# Third-party
import numpy as np

# GeoRegion internal
from georegion.clustering.elbow import (
    ElbowSeries,
    max_distance_knee,
    second_difference_knee,
)
from georegion.config import RegionalizationConfig, load_config
from georegion.exceptions import GeoRegionError, InvalidInputError
from georegion.grid import Grid
from georegion.pipeline import Regionalizer

logger = logging.getLogger(__name__)

_KNEE_FINDERS = {
    'chord': max_distance_knee,
    'second-difference': second_difference_knee,
}


# ── Input ────────────────────────────────────────────────────────────


def load_stack(
    path: Path,
    nodata: Optional[float] = None,
    band_names: Optional[Sequence[str]] = None,
) -> Grid:
    """Load a band stack from ``.npz`` or ``.npy``.

    Raises
    ------
    InvalidInputError
        If the suffix is not supported.
    """
    suffix = path.suffix.lower()
    if suffix == '.npz':
        with np.load(path) as archive:
            bands = {name: archive[name] for name in archive.files}
        if band_names:
            if len(band_names) != len(bands):
                raise InvalidInputError(
                    f"{len(band_names)} band names given for "
                    f"{len(bands)} arrays in {path}"
                )
            bands = dict(zip(band_names, bands.values()))
        return Grid.from_bands(bands, nodata=nodata)
    if suffix == '.npy':
        return Grid(np.load(path), band_names=band_names, nodata=nodata)
    raise InvalidInputError(
        f"unsupported input {path}; expected a .npz or .npy file"
    )


def _band_ref(value: str) -> Union[str, int]:
    return int(value) if value.isdigit() else value


# ── CLI ──────────────────────────────────────────────────────────────


def build_parser() -> argparse.ArgumentParser:
    """Argument parser with ``elbow`` and ``classify`` subcommands."""
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "stack", type=Path,
        help="Band stack: .npz (one 2D array per band) or 3D .npy.",
    )
    common.add_argument(
        "--config", type=Path, default=None,
        help="YAML configuration file.",
    )
    common.add_argument(
        "--nodata", type=float, default=None,
        help="No-data sentinel value of the input bands.",
    )
    common.add_argument(
        "--bands", nargs="+", default=None,
        help="Band names, in stack order (default: archive names).",
    )
    common.add_argument(
        "--normalize", choices=("center-and-scale", "center-only"),
        default=None, help="Standardization convention.",
    )
    common.add_argument("--max-clusters", type=int, default=None,
                        help="Largest k of the elbow sweep.")
    common.add_argument("--sample-size", type=int, default=None,
                        help="Cells drawn to fit the centers.")
    common.add_argument("--restarts", type=int, default=None,
                        help="Independent k-means starts.")
    common.add_argument("--seed", type=int, default=None,
                        help="Random seed.")
    common.add_argument("--workers", type=int, default=None,
                        help="Worker threads.")
    common.add_argument(
        "--knee", choices=sorted(_KNEE_FINDERS), default="chord",
        help="Knee finder used by --auto-k (default: chord).",
    )
    common.add_argument("-v", "--verbose", action="count", default=0,
                        help="-v for INFO, -vv for DEBUG logging.")

    parser = argparse.ArgumentParser(
        prog="georegion",
        description="Partition co-registered raster layers into regions "
                    "by seeded k-means clustering.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    elbow = sub.add_parser(
        "elbow", parents=[common],
        help="Print total within-cluster SS for k = 1..max-clusters.",
    )
    elbow.add_argument("--json", type=Path, default=None,
                       help="Write the elbow series to this JSON file.")
    elbow.add_argument("--auto-k", action="store_true",
                       help="Also print a suggested k.")

    classify = sub.add_parser(
        "classify", parents=[common],
        help="Cluster with the chosen k and write canonical labels.",
    )
    classify.add_argument("-o", "--output", type=Path, required=True,
                          help="Output .npy label array.")
    group = classify.add_mutually_exclusive_group()
    group.add_argument("-k", "--clusters", type=int, default=None,
                       help="Chosen number of regions.")
    group.add_argument("--auto-k", action="store_true",
                       help="Pick k with the knee finder on the elbow series.")
    classify.add_argument("--reference-band", type=_band_ref, default=None,
                          help="Band name or index for canonical ordering.")
    return parser


def _resolve_config(args: argparse.Namespace) -> RegionalizationConfig:
    config = load_config(args.config) if args.config else RegionalizationConfig()
    return config.replace(
        normalize=args.normalize,
        max_clusters=args.max_clusters,
        sample_size=args.sample_size,
        restarts=args.restarts,
        seed=args.seed,
        n_workers=args.workers,
        chosen_clusters=getattr(args, 'clusters', None),
        reference_band=getattr(args, 'reference_band', None),
    )


def _print_series(series: ElbowSeries) -> None:
    print(f"{'k':>4}  {'total_within_ss':>18}")
    for k, wss in series:
        print(f"{k:>4}  {wss:>18.6f}")


def _write_json(path: Path, payload: Dict[str, Any]) -> None:
    with open(path, 'w') as f:
        json.dump(payload, f, indent=2, default=str)


def run_elbow(args: argparse.Namespace) -> int:
    config = _resolve_config(args)
    grid = load_stack(args.stack, nodata=args.nodata, band_names=args.bands)
    series = Regionalizer(config).elbow(grid)
    _print_series(series)
    payload: Dict[str, Any] = series.to_dict()
    payload['band_names'] = list(grid.band_names)
    if args.auto_k:
        knee = series.knee(_KNEE_FINDERS[args.knee])
        payload['suggested_k'] = knee
        print(f"suggested k: {knee}")
    if args.json:
        _write_json(args.json, payload)
    return 0


def run_classify(args: argparse.Namespace) -> int:
    config = _resolve_config(args)
    grid = load_stack(args.stack, nodata=args.nodata, band_names=args.bands)
    regionalizer = Regionalizer(config)

    k = config.chosen_clusters
    series = None
    if args.auto_k:
        series = regionalizer.elbow(grid)
        k = series.knee(_KNEE_FINDERS[args.knee])
        logger.info("Knee finder '%s' chose k=%d", args.knee, k)

    result = regionalizer.run(grid, n_clusters=k)
    # np.save appends .npy to any other name; the sidecar follows it
    output = args.output
    if output.suffix != '.npy':
        output = output.with_name(output.name + '.npy')
    np.save(output, result.regions.labels)

    sidecar = result.to_dict()
    sidecar['shape'] = list(result.regions.shape)
    sidecar['nodata_label'] = result.regions.nodata_label
    if series is not None:
        sidecar['elbow'] = series.to_dict()
    _write_json(output.with_name(output.name + '.json'), sidecar)
    print(f"wrote {output} ({result.regions.k} regions, "
          f"{int(result.regions.valid_mask.sum())} valid cells)")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point; returns the process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)

    level = {0: logging.WARNING, 1: logging.INFO}.get(args.verbose,
                                                      logging.DEBUG)
    logging.basicConfig(level=level,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    handlers = {'elbow': run_elbow, 'classify': run_classify}
    try:
        return handlers[args.command](args)
    except GeoRegionError as e:
        print(f"georegion: error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
