# Copyright (c) 2026 pse_compliance contributors
# SPDX-License-Identifier: MIT

"""Command-line interface for photosensitivity compliance analysis."""

import argparse
import json
import logging
import sys
from pathlib import Path

from pse_compliance.configuration import Configuration
from pse_compliance.exceptions import AnalysisError, VideoSourceError
from pse_compliance.result import ComplianceReport
from pse_compliance.video_analyser import ComplianceAnalyser


def print_summary(report: ComplianceReport) -> None:
    """Print a human-readable report summary."""
    print("\n" + "=" * 50)
    print("ANALYSIS SUMMARY")
    print("=" * 50)
    print(f"Overall Result: {'PASS' if report.is_safe else 'FAIL'}")
    print(f"Compliance: {report.compliance}")
    print(f"Duration: {report.duration:.2f}s")
    print(f"Luminance: avg {report.avg_luminance:.1f}, "
          f"min {report.min_luminance:.1f}, max {report.max_luminance:.1f}")
    print(f"\nFlashes: {report.flash_count} "
          f"(general {report.general_flash_count}, red {report.red_flash_count})")
    print(f"Max flashes per second: {report.max_flashes_per_second} "
          f"(general {report.max_general_flashes_per_second}, "
          f"red {report.max_red_flashes_per_second})")

    if report.dangerous_seconds:
        print("\nDangerous intervals:")
        for interval in report.dangerous_seconds:
            print(f"  {interval.start:.1f}s - {interval.end:.1f}s: "
                  f"{interval.general_count} general, {interval.red_count} red")

    if report.persistent_patterns:
        print("\nPersistent patterns:")
        for pattern in report.persistent_patterns:
            print(f"  {pattern.start_time:.2f}s - {pattern.end_time:.2f}s: {pattern.description}")


def main():
    """Main entry point for the compliance CLI."""
    parser = argparse.ArgumentParser(
        prog="pse-compliance",
        description="Photosensitivity flash and pattern compliance analysis",
        epilog="This output report is for informational purposes only "
               "and should not be used as certification or validation of "
               "compliance with any legal, regulatory or other requirements.",
    )

    parser.add_argument(
        "video",
        help="Path to video file to analyze",
    )

    parser.add_argument(
        "-c", "--config",
        help="Path to directory containing appsettings.json",
        default=".",
    )

    parser.add_argument(
        "-j", "--json",
        help="Write the report as JSON to this file",
        default=None,
    )

    parser.add_argument(
        "--csv",
        help="Write per-frame metrics as CSV to this file",
        default=None,
    )

    parser.add_argument(
        "--fps",
        type=float,
        help="Frame sampling rate (default: 10)",
        default=None,
    )

    parser.add_argument(
        "--workers",
        type=int,
        help="Number of metric extraction threads",
        default=None,
    )

    parser.add_argument(
        "--include-final-window",
        action="store_true",
        help="Also scan the rate window starting exactly at the clip end",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log analysis progress",
    )

    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")

    video_path = Path(args.video)
    if not video_path.exists():
        print(f"Error: Video file not found: {args.video}")
        sys.exit(3)

    config = Configuration.from_json(args.config)

    # Override config with CLI arguments
    if args.fps is not None:
        config.sample_fps = args.fps
    if args.workers is not None:
        config.extraction_workers = args.workers
    if args.include_final_window:
        config.include_final_window = True

    analyser = ComplianceAnalyser(config)

    try:
        report = analyser.analyse_video(str(video_path))
    except (AnalysisError, VideoSourceError) as e:
        print(f"Error during analysis: {e}")
        sys.exit(3)

    print_summary(report)

    if args.json:
        json_path = Path(args.json)
        json_path.parent.mkdir(parents=True, exist_ok=True)
        with open(json_path, "w") as f:
            json.dump(report.to_dict(), f, indent=2)
        print(f"\nReport JSON written to {json_path}")

    if args.csv:
        analyser.write_frame_data(args.csv)
        print(f"Frame data CSV written to {args.csv}")

    sys.exit(0 if report.is_safe else 1)


if __name__ == "__main__":
    main()
