# Copyright (c) 2026 pse_compliance contributors
# SPDX-License-Identifier: MIT

"""Frame RGB conversion for compliance analysis."""

from typing import Sequence

import cv2
import numpy as np

from pse_compliance.configuration import LUMINANCE_WEIGHTS


class FrameRgbConverter:
    """Converts RGBA pixel buffers to RGB and luminance planes."""

    def __init__(self, weights: Sequence[float] = LUMINANCE_WEIGHTS):
        """
        Initialize the converter with luminance weights.

        Args:
            weights: (R, G, B) weights for the luminance sum
        """
        # Shape (1, 3) for cv2.transform
        self.weights = np.array([weights], dtype=np.float32)

    def convert(self, rgba_frame: np.ndarray) -> np.ndarray:
        """
        Drop the alpha channel of an RGBA frame.

        Args:
            rgba_frame: Input frame (H, W, 4) uint8

        Returns:
            RGB frame (H, W, 3) float32 on the 0-255 scale
        """
        rgb = cv2.cvtColor(rgba_frame, cv2.COLOR_RGBA2RGB)
        return rgb.astype(np.float32)

    def luminance(self, rgb_frame: np.ndarray) -> np.ndarray:
        """
        Weighted luminance of every pixel.

        Args:
            rgb_frame: RGB frame (H, W, 3) float32

        Returns:
            Luminance plane (H, W) float32 on the 0-255 scale
        """
        luminance_frame = cv2.transform(rgb_frame, self.weights)
        # Result may be (H, W) or (H, W, 1) depending on OpenCV version
        if luminance_frame.ndim == 3:
            luminance_frame = luminance_frame[:, :, 0]
        return luminance_frame
