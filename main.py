#!/usr/bin/env python3
"""
Main entry point for room model extraction from 3D room scans.

Usage:
    python main.py <path_to_scan_file_or_directory>
    python main.py scans/living_room.glb
    python main.py scans/

Options can be configured through the command line flags below.
"""

import sys
import argparse
import logging
from pathlib import Path
from typing import List

from room_extraction import (
    RoomExtractionConfig,
    RoomExtractionError,
    RoomModel,
    RoomScanWarning,
    analyze_room_scan,
    process_room_scan,
)


def parse_args():
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Extract room models from 3D room scans",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py scans/living_room.glb
  python main.py scans/
  python main.py --y-up --analyze scans/living_room.gltf
  python main.py --timeout 60 --no-repair scans/office.obj
        """
    )

    parser.add_argument(
        "input_path",
        type=str,
        help="Path to a scan file or directory containing scan files"
    )

    parser.add_argument(
        "--analyze",
        action="store_true",
        help="Run detailed analysis (coordinate system, surfaces, recommendations)"
    )

    parser.add_argument(
        "--y-up",
        action="store_true",
        help="Treat the scan as Y-up (glTF convention) and convert to Z-up"
    )

    parser.add_argument(
        "--transform",
        action="store_true",
        help="Normalize detected units and orientation to meters"
    )

    parser.add_argument(
        "--no-repair",
        action="store_true",
        help="Fail instead of repairing low-quality models"
    )

    parser.add_argument(
        "--no-quality",
        action="store_true",
        help="Skip scan quality assessment"
    )

    parser.add_argument(
        "--timeout",
        type=float,
        default=30.0,
        help="Processing timeout in seconds (default: 30.0)"
    )

    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output"
    )

    return parser.parse_args()


def print_room_summary(room: RoomModel, warnings: List[RoomScanWarning]) -> None:
    size = room.bounds.size
    print(f"\nRoom '{room.name}': {size.x:.2f} x {size.y:.2f} x {size.z:.2f} m")
    print(f"  Walls: {len(room.walls)}")
    for wall in room.walls:
        print(f"    {wall.material.value}: {wall.length:.2f} m long, {wall.height:.2f} m high")

    print(f"  Furniture: {len(room.furniture)}")
    for item in room.furniture:
        print(f"    {item.type.value} (confidence {item.confidence:.1f}), "
              f"{len(item.surfaces)} surface(s)")
        for surface in item.surfaces:
            print(f"      z={surface.center.z:.2f} m, {surface.area:.2f} m², "
                  f"{surface.accessibility.value}")

    print(f"  Openings: {len(room.openings)}")
    for opening in room.openings:
        passable = "passable" if opening.is_passable else "not passable"
        print(f"    {opening.type.value} ({passable})")

    print(f"  Floor area: {room.floor.area:.2f} m²")

    if warnings:
        print("  Warnings:")
        for warning in warnings:
            print(f"    - {warning.message}")


def process_scan_file(
    scan_path: Path,
    config: RoomExtractionConfig,
    analyze: bool = False,
    verbose: bool = True
) -> bool:
    """Process a single scan file. Returns True on success."""
    print(f"\nProcessing: {scan_path}")
    print("-" * 60)

    try:
        if analyze:
            analysis = analyze_room_scan(str(scan_path), config, verbose=verbose)
            print_room_summary(analysis.room_model, list(analysis.warnings))

            assessment = analysis.quality_assessment
            print(f"\n  Quality: {assessment.overall_quality:.2f} ({assessment.quality_level.value})")
            for issue in assessment.issues:
                print(f"    issue: {issue.value}")

            info = analysis.coordinate_system_info
            print(f"  Coordinates: units={info.detected_units.value}, "
                  f"consistency={info.consistency.value}")

            surfaces = analysis.surface_analysis
            print(f"  Surfaces: {surfaces.total_surfaces} total, "
                  f"{surfaces.viable_surface_count} viable ({surfaces.surface_quality.value})")

            for recommendation in analysis.recommendations:
                print(f"    recommendation: {recommendation.value}")

            metadata = analysis.processing_metadata
            print(f"  Processed in {metadata.parsing_time:.2f}s, "
                  f"~{metadata.memory_usage} bytes (v{metadata.algorithm_version})")
        else:
            result = process_room_scan(str(scan_path), config, verbose=verbose)
            print_room_summary(result.room_model, list(result.warnings))
            if result.quality_metrics is not None:
                print(f"\n  Quality: {result.quality_metrics.overall_quality:.2f}")
            print(f"  Processed in {result.processing_time:.2f}s")

    except RoomExtractionError as e:
        print(f"Error processing {scan_path}: {e}")
        return False

    return True


def main():
    """Main entry point."""
    args = parse_args()

    logging.basicConfig(
        level=logging.WARNING if args.quiet else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s"
    )

    input_path = Path(args.input_path)

    if not input_path.exists():
        print(f"Error: Path '{input_path}' does not exist.")
        sys.exit(1)

    try:
        config = RoomExtractionConfig(
            processing_timeout_s=args.timeout,
            y_up=args.y_up,
            enable_quality_assessment=not args.no_quality,
            enable_coordinate_transformation=args.transform,
            enable_model_repair=not args.no_repair,
        )
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(1)

    verbose = not args.quiet

    # Collect scan files
    scan_files = []
    if input_path.is_file():
        scan_files.append(input_path)
    elif input_path.is_dir():
        scan_files = sorted(
            p for p in input_path.iterdir()
            if p.is_file() and p.suffix.lower() in config.supported_extensions
        )
        if not scan_files:
            print(f"Warning: No scan files found in '{input_path}'.")
            sys.exit(1)

    failures = 0
    for scan_file in scan_files:
        if not process_scan_file(scan_file, config, analyze=args.analyze, verbose=verbose):
            failures += 1

    if failures:
        sys.exit(1)


if __name__ == "__main__":
    main()
