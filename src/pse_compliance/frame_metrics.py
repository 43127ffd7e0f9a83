# Copyright (c) 2026 pse_compliance contributors
# SPDX-License-Identifier: MIT

"""Per-frame luminance, red saturation and zone metrics."""

from typing import List, Tuple

import numpy as np

from pse_compliance.configuration import Configuration, ZoneParams
from pse_compliance.frame_data import Frame, FrameMetrics, ZoneMetrics
from pse_compliance.frame_rgb_converter import FrameRgbConverter
from pse_compliance.pattern_detection import PatternDetection


def saturation(rgb_frame: np.ndarray) -> np.ndarray:
    """
    HSV-style saturation of every pixel.

    saturation = (max(R, G, B) - min(R, G, B)) / max(R, G, B), 0 where max is 0.

    Args:
        rgb_frame: RGB frame (H, W, 3) float32

    Returns:
        Saturation plane (H, W) float32 in [0, 1]
    """
    highest = rgb_frame.max(axis=2)
    lowest = rgb_frame.min(axis=2)
    result = np.zeros_like(highest, dtype=np.float32)
    np.divide(highest - lowest, highest, out=result, where=highest > 0)
    return result


def red_dominant_mask(
    rgb_frame: np.ndarray,
    saturation_frame: np.ndarray,
    saturation_threshold: float = 0.5,
) -> np.ndarray:
    """Pixels where R > G, R > B and saturation is above the threshold."""
    r = rgb_frame[:, :, 0]
    g = rgb_frame[:, :, 1]
    b = rgb_frame[:, :, 2]
    return (r > g) & (r > b) & (saturation_frame > saturation_threshold)


class ZoneGrid:
    """
    Fixed grid of zones over a frame.

    Cells are at most zone_width x zone_height pixels; cells on the right
    and bottom edges shrink to fit the frame. The grid only depends on the
    frame size, so (row, col) addresses the same rectangle in every frame
    of a run.
    """

    def __init__(self, frame_size: Tuple[int, int], params: ZoneParams):
        """
        Initialize the grid.

        Args:
            frame_size: (height, width) of frames
            params: Zone parameters
        """
        height, width = frame_size
        self.frame_size = frame_size
        self.params = params

        self.row_starts = np.arange(0, height, params.zone_height)
        self.col_starts = np.arange(0, width, params.zone_width)
        self.row_heights = np.diff(np.append(self.row_starts, height))
        self.col_widths = np.diff(np.append(self.col_starts, width))
        self.areas = np.outer(self.row_heights, self.col_widths)

    @property
    def rows(self) -> int:
        return len(self.row_starts)

    @property
    def cols(self) -> int:
        return len(self.col_starts)

    def cell_means(self, plane: np.ndarray) -> np.ndarray:
        """
        Mean of a per-pixel plane over every cell.

        Args:
            plane: Values (H, W) matching the grid's frame size

        Returns:
            Means (rows, cols) float64
        """
        sums = np.add.reduceat(plane.astype(np.float64), self.row_starts, axis=0)
        sums = np.add.reduceat(sums, self.col_starts, axis=1)
        return sums / self.areas

    def zones(self, luminance: np.ndarray, red_mask: np.ndarray) -> Tuple[ZoneMetrics, ...]:
        """Build ZoneMetrics in row-major order."""
        zone_luminance = self.cell_means(luminance)
        zone_red = self.cell_means(red_mask)

        zones: List[ZoneMetrics] = []
        for row in range(self.rows):
            for col in range(self.cols):
                zones.append(ZoneMetrics(
                    row=row,
                    col=col,
                    x=int(self.col_starts[col]),
                    y=int(self.row_starts[row]),
                    width=int(self.col_widths[col]),
                    height=int(self.row_heights[row]),
                    luminance=float(zone_luminance[row, col]),
                    red_area_proportion=float(zone_red[row, col]),
                ))
        return tuple(zones)


class FrameMetricsExtractor:
    """
    Derives FrameMetrics from a single frame.

    Extraction has no cross-frame state, so one extractor can be shared by
    several worker threads.
    """

    def __init__(self, frame_size: Tuple[int, int], config: Configuration):
        """
        Initialize the extractor.

        Args:
            frame_size: (height, width) of frames
            config: Configuration parameters
        """
        self.frame_size = frame_size
        self.params = config.get_zone_params()

        self.frame_converter = FrameRgbConverter()
        self.grid = ZoneGrid(frame_size, self.params)
        self.pattern_detection = PatternDetection(config.get_pattern_detection_params())

    def extract(self, frame: Frame, index: int = 0) -> FrameMetrics:
        """
        Compute all metrics of a frame.

        Args:
            frame: Decoded frame
            index: Position of the frame in the run

        Returns:
            FrameMetrics for the frame
        """
        rgb = self.frame_converter.convert(frame.rgba())
        luminance = self.frame_converter.luminance(rgb)

        saturation_frame = saturation(rgb)
        red_mask = red_dominant_mask(rgb, saturation_frame, self.params.red_saturation_threshold)

        if red_mask.any():
            red_saturation = float(np.mean(saturation_frame[red_mask], dtype=np.float64))
        else:
            red_saturation = 0.0

        pattern = self.pattern_detection.check_frame(luminance, frame.timestamp)

        return FrameMetrics(
            index=index,
            timestamp=frame.timestamp,
            luminance=float(np.mean(luminance, dtype=np.float64)),
            red_saturation=red_saturation,
            zones=self.grid.zones(luminance, red_mask),
            patterns=(pattern,) if pattern is not None else (),
        )
