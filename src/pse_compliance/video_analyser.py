# Copyright (c) 2026 pse_compliance contributors
# SPDX-License-Identifier: MIT

"""Compliance analysis pipeline for decoded frame sequences."""

import logging
import time
from collections import deque
from concurrent.futures import Future, ThreadPoolExecutor
from enum import Enum
from pathlib import Path
from typing import Callable, Deque, Iterable, List, Optional, Sequence, Tuple

import numpy as np

from pse_compliance.configuration import Configuration
from pse_compliance.exceptions import EmptyFrameSequence, InvalidFrameGeometry, NonMonotonicTimestamp
from pse_compliance.flash import pair_transitions
from pse_compliance.flash_rate import FlashRateAnalysis, RateAnalysis
from pse_compliance.frame_data import Frame, FrameMetrics
from pse_compliance.frame_metrics import FrameMetricsExtractor
from pse_compliance.pattern_detection import find_persistent_patterns
from pse_compliance.result import (
    ComplianceReport,
    Flash,
    FlashType,
    PersistentPattern,
    evaluate_safety,
)
from pse_compliance.transition_detection import TransitionDetection, split_by_type
from pse_compliance.video_source import read_frames


logger = logging.getLogger(__name__)


class AnalysisStage(Enum):
    """Stages of an analysis run, in order."""
    Idle = 0
    ExtractingMetrics = 1
    DetectingTransitions = 2
    PairingFlashes = 3
    AnalyzingRates = 4
    Aggregated = 5


class ComplianceAnalyser:
    """
    Main analyser for photosensitivity compliance.

    Turns a timestamp-ordered sequence of decoded frames into a
    ComplianceReport. Per-frame metric extraction may run on worker threads;
    every later stage runs sequentially over the complete metrics sequence.
    """

    def __init__(self, config: Optional[Configuration] = None):
        """
        Initialize the analyser.

        Args:
            config: Configuration parameters (uses defaults if None)
        """
        self.config = config or Configuration()
        self._stage = AnalysisStage.Idle
        self._metrics: List[FrameMetrics] = []

    @property
    def stage(self) -> AnalysisStage:
        """Stage reached by the current or last run."""
        return self._stage

    @property
    def frame_metrics(self) -> List[FrameMetrics]:
        """Per-frame metrics of the last run."""
        return self._metrics

    def analyse_frames(
        self,
        frames: Iterable[Frame],
        progress_callback: Optional[Callable[[int], None]] = None,
    ) -> ComplianceReport:
        """
        Analyse a sequence of frames.

        Args:
            frames: Frames with non-decreasing timestamps and constant size
            progress_callback: Optional callback(frames_extracted)

        Returns:
            ComplianceReport for the sequence

        Raises:
            EmptyFrameSequence: If no frames are supplied
            InvalidFrameGeometry: If a frame size is invalid or changes
            NonMonotonicTimestamp: If a timestamp goes backwards
        """
        self._stage = AnalysisStage.Idle
        self._metrics = []
        start_time = time.time()

        self._stage = AnalysisStage.ExtractingMetrics
        metrics = self.extract_metrics(frames, progress_callback)
        self._metrics = metrics
        duration = metrics[-1].timestamp
        logger.info("Extracted metrics of %d frames (%.2fs)", len(metrics), duration)

        self._stage = AnalysisStage.DetectingTransitions
        detection = TransitionDetection(self.config.get_transition_params())
        streams = split_by_type(detection.detect_all(metrics))
        logger.debug(
            "Transitions: %d general, %d red",
            len(streams[FlashType.General]), len(streams[FlashType.Red]),
        )

        self._stage = AnalysisStage.PairingFlashes
        rate_params = self.config.get_flash_rate_params()
        general_flashes = pair_transitions(
            streams[FlashType.General], FlashType.General, rate_params.pairing_window
        )
        red_flashes = pair_transitions(
            streams[FlashType.Red], FlashType.Red, rate_params.pairing_window
        )

        self._stage = AnalysisStage.AnalyzingRates
        rates = FlashRateAnalysis(rate_params).analyse(general_flashes, red_flashes, duration)
        persistent = find_persistent_patterns(
            metrics, self.config.get_pattern_detection_params()
        )

        report = self._build_report(metrics, general_flashes, red_flashes, rates, persistent)
        self._stage = AnalysisStage.Aggregated

        elapsed_ms = int((time.time() - start_time) * 1000)
        logger.info(
            "Analysis finished in %d ms: %s (%d flashes, peak %d/s)",
            elapsed_ms, "PASS" if report.is_safe else "FAIL",
            report.flash_count, report.max_flashes_per_second,
        )
        return report

    def analyse_video(
        self,
        source_video: str,
        progress_callback: Optional[Callable[[int], None]] = None,
    ) -> ComplianceReport:
        """
        Decode a video file at the configured sample rate and analyse it.

        Args:
            source_video: Path to video file
            progress_callback: Optional callback(frames_extracted)

        Returns:
            ComplianceReport for the video
        """
        return self.analyse_frames(
            read_frames(source_video, fps=self.config.sample_fps),
            progress_callback=progress_callback,
        )

    def extract_metrics(
        self,
        frames: Iterable[Frame],
        progress_callback: Optional[Callable[[int], None]] = None,
    ) -> List[FrameMetrics]:
        """
        Validate frames and derive their metrics.

        Frames are consumed one at a time; no pixel buffer is kept once its
        metrics exist. With more than one extraction worker, at most twice
        as many frames as workers are in flight.

        Returns:
            FrameMetrics sorted by timestamp
        """
        workers = max(1, self.config.extraction_workers)
        metrics: List[FrameMetrics] = []
        pending: Deque[Future] = deque()

        extractor: Optional[FrameMetricsExtractor] = None
        frame_size: Tuple[int, int] = (0, 0)
        last_timestamp = 0.0

        def collect(result: FrameMetrics) -> None:
            metrics.append(result)
            if progress_callback:
                progress_callback(len(metrics))

        executor = ThreadPoolExecutor(max_workers=workers) if workers > 1 else None
        try:
            for index, frame in enumerate(frames):
                if extractor is None:
                    frame_size = self._validate_geometry(frame)
                    extractor = FrameMetricsExtractor(frame_size, self.config)
                    logger.info("Frame size: %dx%d, zone grid %dx%d",
                                frame.width, frame.height,
                                extractor.grid.cols, extractor.grid.rows)
                else:
                    if (frame.height, frame.width) != frame_size:
                        raise InvalidFrameGeometry(
                            f"Frame {index} is {frame.width}x{frame.height}, "
                            f"expected {frame_size[1]}x{frame_size[0]}"
                        )
                    if frame.timestamp < last_timestamp:
                        raise NonMonotonicTimestamp(index, last_timestamp, frame.timestamp)
                last_timestamp = frame.timestamp

                if executor is None:
                    collect(extractor.extract(frame, index))
                    continue

                pending.append(executor.submit(extractor.extract, frame, index))
                if len(pending) >= workers * 2:
                    collect(pending.popleft().result())

            while pending:
                collect(pending.popleft().result())
        finally:
            if executor is not None:
                executor.shutdown(wait=True, cancel_futures=True)

        if not metrics:
            raise EmptyFrameSequence()

        metrics.sort(key=lambda m: (m.timestamp, m.index))
        return metrics

    def write_frame_data(self, path: str) -> None:
        """Write the last run's per-frame metrics as CSV."""
        csv_path = Path(path)
        csv_path.parent.mkdir(parents=True, exist_ok=True)

        with open(csv_path, "w") as csv_file:
            csv_file.write(FrameMetrics.csv_columns() + "\n")
            for metrics in self._metrics:
                csv_file.write(metrics.to_csv() + "\n")

        logger.info("Frame data written to %s", csv_path)

    def _validate_geometry(self, frame: Frame) -> Tuple[int, int]:
        """Check the first frame's size and return (height, width)."""
        if frame.width <= 0 or frame.height <= 0:
            raise InvalidFrameGeometry(
                f"Frame size must be positive, got {frame.width}x{frame.height}"
            )
        return frame.height, frame.width

    def _build_report(
        self,
        metrics: Sequence[FrameMetrics],
        general_flashes: List[Flash],
        red_flashes: List[Flash],
        rates: RateAnalysis,
        persistent: List[PersistentPattern],
    ) -> ComplianceReport:
        """Combine every stage's output into the final report."""
        luminances = np.array([m.luminance for m in metrics], dtype=np.float64)

        is_safe = evaluate_safety(
            rates.max_general,
            rates.max_red,
            persistent,
            self.config.max_flashes_per_second,
        )

        frame_patterns = [p for m in metrics for p in m.patterns]
        flashes = sorted(general_flashes + red_flashes, key=lambda f: (f.time, f.type.value))

        return ComplianceReport(
            luminance_data=tuple((m.timestamp, m.luminance) for m in metrics),
            duration=metrics[-1].timestamp,
            avg_luminance=float(np.mean(luminances)),
            max_luminance=float(np.max(luminances)),
            min_luminance=float(np.min(luminances)),
            general_flash_count=len(general_flashes),
            red_flash_count=len(red_flashes),
            max_general_flashes_per_second=rates.max_general,
            max_red_flashes_per_second=rates.max_red,
            dangerous_seconds=tuple(rates.dangerous_intervals),
            patterns=tuple(frame_patterns) + tuple(persistent),
            flashes=tuple(flashes),
            is_safe=is_safe,
        )
