# Copyright (c) 2026 pse_compliance contributors
# SPDX-License-Identifier: MIT

"""End-to-end tests for ComplianceAnalyser."""

import numpy as np
import pytest

from pse_compliance import (
    AnalysisStage,
    ComplianceAnalyser,
    Configuration,
    EmptyFrameSequence,
    Frame,
    InvalidFrameGeometry,
    NonMonotonicTimestamp,
)
from pse_compliance.result import COMPLIANT, NON_COMPLIANT


BLACK = (0, 0, 0)
WHITE = (255, 255, 255)
RED = (255, 0, 0)
GRAY = (128, 128, 128)


@pytest.fixture
def alternating_clip(make_frame):
    """Eleven frames at 10 fps switching between two colors."""
    def _clip(first, second, count=11):
        return [make_frame(i / 10, second if i % 2 else first) for i in range(count)]
    return _clip


def checkerboard_frame(timestamp, size=32, cell=4):
    y, x = np.mgrid[0:size, 0:size]
    board = (((y // cell) + (x // cell)) % 2 * 255).astype(np.uint8)
    pixels = np.full((size, size, 4), 255, dtype=np.uint8)
    for channel in range(3):
        pixels[:, :, channel] = board
    return Frame(timestamp=timestamp, width=size, height=size, pixels=pixels)


class TestInputValidation:
    """Test errors raised for malformed frame sequences."""

    @pytest.fixture
    def analyser(self, small_zone_config):
        return ComplianceAnalyser(small_zone_config)

    def test_empty_list(self, analyser):
        with pytest.raises(EmptyFrameSequence):
            analyser.analyse_frames([])
        assert analyser.stage == AnalysisStage.ExtractingMetrics

    def test_empty_iterator(self, analyser):
        with pytest.raises(EmptyFrameSequence):
            analyser.analyse_frames(iter(()))

    def test_zero_size(self, analyser):
        with pytest.raises(InvalidFrameGeometry):
            analyser.analyse_frames([Frame(timestamp=0.0, width=0, height=8, pixels=b"")])

    def test_size_change(self, analyser, make_frame):
        frames = [make_frame(0.0), make_frame(0.1, width=4, height=4)]

        with pytest.raises(InvalidFrameGeometry):
            analyser.analyse_frames(frames)
        assert analyser.stage == AnalysisStage.ExtractingMetrics

    def test_buffer_size_mismatch(self, analyser):
        frame = Frame(timestamp=0.0, width=8, height=8, pixels=bytes(10))

        with pytest.raises(InvalidFrameGeometry):
            analyser.analyse_frames([frame])

    def test_timestamp_goes_backwards(self, analyser, make_frame):
        frames = [make_frame(0.0), make_frame(0.2), make_frame(0.1)]

        with pytest.raises(NonMonotonicTimestamp) as excinfo:
            analyser.analyse_frames(frames)

        assert excinfo.value.index == 2
        assert isinstance(excinfo.value, ValueError)

    def test_equal_timestamps_allowed(self, analyser, make_frame):
        report = analyser.analyse_frames([make_frame(0.0), make_frame(0.0)])

        assert report.duration == 0.0

    def test_errors_from_worker_threads(self, make_frame):
        config = Configuration(zone_width=4, zone_height=4, extraction_workers=2)
        frames = [make_frame(0.0), Frame(timestamp=0.1, width=8, height=8, pixels=bytes(3))]

        with pytest.raises(InvalidFrameGeometry):
            ComplianceAnalyser(config).analyse_frames(frames)


class TestComplianceAnalyser:
    """Test full analysis runs over synthetic clips."""

    @pytest.fixture
    def analyser(self, small_zone_config):
        return ComplianceAnalyser(small_zone_config)

    def test_static_clip_is_safe(self, analyser, make_frame):
        frames = [make_frame(i / 10, GRAY) for i in range(20)]

        report = analyser.analyse_frames(frames)

        assert report.is_safe
        assert report.compliance == COMPLIANT
        assert report.flash_count == 0
        assert report.max_flashes_per_second == 0
        assert report.dangerous_seconds == ()
        assert report.duration == pytest.approx(1.9)
        assert len(report.luminance_data) == 20
        assert analyser.stage == AnalysisStage.Aggregated

    def test_black_white_flashing_is_unsafe(self, analyser, alternating_clip):
        report = analyser.analyse_frames(alternating_clip(BLACK, WHITE))

        assert not report.is_safe
        assert report.compliance == NON_COMPLIANT
        assert report.general_flash_count == 5
        assert report.red_flash_count == 0
        assert report.max_general_flashes_per_second == 5
        assert [f.time for f in report.flashes] == [0.1, 0.3, 0.5, 0.7, 0.9]
        assert len(report.dangerous_seconds) == 1
        assert report.dangerous_seconds[0].start == 0.0

    def test_red_flashing_is_unsafe(self, analyser, alternating_clip):
        report = analyser.analyse_frames(alternating_clip(BLACK, RED))

        assert not report.is_safe
        assert report.red_flash_count == 5
        assert report.general_flash_count == 5
        assert report.max_red_flashes_per_second == 5
        # Flashes are ordered by time, then type
        assert [f.type.value for f in report.flashes[:2]] == ["general", "red"]

    def test_slow_flashing_is_safe(self, analyser, make_frame):
        # One flash every second
        frames = [make_frame(i / 10, WHITE if i % 10 in (1, 2) else BLACK) for i in range(50)]

        report = analyser.analyse_frames(frames)

        assert report.is_safe
        assert report.general_flash_count == 5
        assert report.max_general_flashes_per_second == 1

    def test_single_frame(self, analyser, make_frame):
        report = analyser.analyse_frames([make_frame(0.0, WHITE)])

        assert report.is_safe
        assert report.duration == 0.0
        assert report.flash_count == 0
        assert report.avg_luminance == pytest.approx(255.0, abs=1e-3)

    def test_luminance_statistics(self, analyser, make_frame):
        frames = [make_frame(0.0, BLACK), make_frame(0.1, (100, 100, 100)),
                  make_frame(0.2, (200, 200, 200))]

        report = analyser.analyse_frames(frames)

        assert report.min_luminance == pytest.approx(0.0, abs=1e-3)
        assert report.max_luminance == pytest.approx(200.0, abs=1e-3)
        assert report.avg_luminance == pytest.approx(100.0, abs=1e-3)
        assert [t for t, _ in report.luminance_data] == [0.0, 0.1, 0.2]

    @pytest.mark.parametrize("seed", [0, 7, 42, 2024])
    def test_random_frames_statistics(self, analyser, seed):
        rng = np.random.default_rng(seed)
        frames = [
            Frame(timestamp=i / 10, width=8, height=8,
                  pixels=rng.integers(0, 256, (8, 8, 4), dtype=np.uint8))
            for i in range(15)
        ]

        report = analyser.analyse_frames(frames)

        luminances = [m.luminance for m in analyser.frame_metrics]
        assert len(luminances) == 15
        assert report.avg_luminance == pytest.approx(np.mean(luminances))
        assert report.min_luminance == min(luminances)
        assert report.max_luminance == max(luminances)
        assert [lum for _, lum in report.luminance_data] == luminances
        assert report.flash_count == report.general_flash_count + report.red_flash_count
        assert report.max_flashes_per_second == max(
            report.max_general_flashes_per_second, report.max_red_flashes_per_second
        )

    def test_persistent_pattern_is_unsafe(self):
        analyser = ComplianceAnalyser(Configuration())
        frames = [checkerboard_frame(i / 10) for i in range(6)]

        report = analyser.analyse_frames(frames)

        assert not report.is_safe
        assert report.flash_count == 0
        assert len(report.persistent_patterns) == 1
        assert report.persistent_patterns[0].frame_count == 6
        types = [p.to_dict()["type"] for p in report.patterns]
        assert types.count("pattern") == 6
        assert types.count("persistent_pattern") == 1

    def test_brief_pattern_is_safe(self):
        analyser = ComplianceAnalyser(Configuration())
        frames = [checkerboard_frame(i / 10) for i in range(3)]

        report = analyser.analyse_frames(frames)

        assert report.is_safe
        assert report.persistent_patterns == []
        assert len(report.patterns) == 3

    def test_generator_input(self, analyser, make_frame):
        frames = (make_frame(i / 10, WHITE if i % 2 else BLACK) for i in range(11))

        report = analyser.analyse_frames(frames)

        assert report.general_flash_count == 5

    def test_idempotent(self, analyser, alternating_clip):
        frames = alternating_clip(BLACK, RED)

        first = analyser.analyse_frames(frames).to_dict()
        second = analyser.analyse_frames(frames).to_dict()

        assert first == second

    def test_parallel_matches_sequential(self, alternating_clip):
        frames = alternating_clip(BLACK, WHITE, count=31)
        sequential = ComplianceAnalyser(Configuration(zone_width=4, zone_height=4))
        parallel = ComplianceAnalyser(
            Configuration(zone_width=4, zone_height=4, extraction_workers=3)
        )

        assert parallel.analyse_frames(frames).to_dict() == sequential.analyse_frames(frames).to_dict()
        assert [m.index for m in parallel.frame_metrics] == list(range(31))

    def test_progress_callback(self, analyser, make_frame):
        calls = []
        frames = [make_frame(i / 10) for i in range(5)]

        analyser.analyse_frames(frames, progress_callback=calls.append)

        assert calls == [1, 2, 3, 4, 5]

    def test_write_frame_data(self, analyser, alternating_clip, tmp_path):
        analyser.analyse_frames(alternating_clip(BLACK, WHITE, count=3))
        csv_path = tmp_path / "out" / "framedata.csv"

        analyser.write_frame_data(str(csv_path))

        lines = csv_path.read_text().splitlines()
        assert lines[0] == (
            "Frame,TimeStamp,AverageLuminance,RedSaturation,Zones,PatternRatio,PatternSeverity"
        )
        assert len(lines) == 4
        assert lines[1].startswith("0,00:00:00.000000,")
