#!/usr/bin/env python3
"""Basic usage example for PSE-Compliance."""

import sys

from pse_compliance import ComplianceAnalyser, Configuration


def progress_callback(frames_done: int) -> None:
    sys.stdout.write(f"\rExtracted {frames_done} frames")
    sys.stdout.flush()


def main():
    # Create configuration (uses defaults)
    config = Configuration()

    # Or customize configuration
    # config.sample_fps = 25.0
    # config.extraction_workers = 4
    # config.include_final_window = True

    analyser = ComplianceAnalyser(config)

    # Decode and analyze video
    report = analyser.analyse_video("your_video.mp4", progress_callback=progress_callback)
    print()

    if report.is_safe:
        print("Video passed photosensitivity check")
    else:
        print("Video FAILED photosensitivity check")
    print(report.compliance)

    print(f"\nDuration: {report.duration:.2f}s")
    print(f"General flashes: {report.general_flash_count} "
          f"(peak {report.max_general_flashes_per_second}/s)")
    print(f"Red flashes: {report.red_flash_count} "
          f"(peak {report.max_red_flashes_per_second}/s)")

    for interval in report.dangerous_seconds:
        print(f"  {interval.start:.1f}s - {interval.end:.1f}s: {interval.count} flashes")

    for pattern in report.persistent_patterns:
        print(f"  {pattern.description}")

    # Per-frame metrics of the run
    analyser.write_frame_data("results/framedata.csv")


if __name__ == "__main__":
    main()
