# Copyright (c) 2026 pse_compliance contributors
# SPDX-License-Identifier: MIT

"""Fixed-rate frame sampling from video files."""

import logging
from dataclasses import dataclass
from typing import Iterator, Optional, Tuple

import cv2
import numpy as np

from pse_compliance.configuration import TIME_EPSILON
from pse_compliance.exceptions import VideoSourceError
from pse_compliance.frame_data import Frame


logger = logging.getLogger(__name__)


@dataclass
class VideoInfo:
    """Video metadata."""
    fps: float = 0.0
    frame_count: int = 0
    duration: float = 0.0
    frame_size: Tuple[int, int] = (0, 0)  # (width, height)


def probe_video(video: cv2.VideoCapture) -> VideoInfo:
    """Read metadata of an opened video."""
    info = VideoInfo()
    info.fps = float(video.get(cv2.CAP_PROP_FPS))
    info.frame_count = int(video.get(cv2.CAP_PROP_FRAME_COUNT))
    info.frame_size = (
        int(video.get(cv2.CAP_PROP_FRAME_WIDTH)),
        int(video.get(cv2.CAP_PROP_FRAME_HEIGHT)),
    )
    info.duration = info.frame_count / info.fps if info.fps > 0 else 0.0
    return info


def decoded_frames(video: cv2.VideoCapture, info: VideoInfo) -> Iterator[Tuple[float, np.ndarray]]:
    """Yield (presentation time, BGR frame) for every decoded frame."""
    position = 0
    ret, frame = video.read()
    while ret and frame is not None:
        if info.fps > 0:
            frame_time = position / info.fps
        else:
            frame_time = video.get(cv2.CAP_PROP_POS_MSEC) / 1000.0

        yield frame_time, frame

        position += 1
        ret, frame = video.read()


def read_frames(source_video: str, fps: float = 10.0) -> Iterator[Frame]:
    """
    Sample a video at a fixed rate.

    Sample i has timestamp i / fps and shows the decoded frame on screen at
    that time: a frame is repeated for every sample slot it covers, and
    frames that cover no slot are skipped. Sampling stops at the end of
    the last frame, so the sampled timeline keeps the clip's length
    whatever its native frame rate. Frames are converted to RGBA.

    Args:
        source_video: Path to video file
        fps: Samples per second

    Yields:
        Frames in timestamp order

    Raises:
        VideoSourceError: If the video cannot be opened or has no frames
    """
    if fps <= 0:
        raise ValueError(f"Sample rate must be positive, got {fps}")

    video = cv2.VideoCapture(source_video)
    if not video.isOpened():
        raise VideoSourceError(f"Could not open video: {source_video}")

    try:
        info = probe_video(video)
        logger.info(
            "Video %s: %.2f fps, %d frames, %dx%d, %.2fs",
            source_video, info.fps, info.frame_count,
            info.frame_size[0], info.frame_size[1], info.duration,
        )

        sample = 0
        current: Optional[np.ndarray] = None
        current_time = 0.0
        rgba: Optional[np.ndarray] = None

        for frame_time, frame in decoded_frames(video, info):
            # The previous frame stays on screen until this one starts
            while current is not None and sample / fps < frame_time - TIME_EPSILON:
                if rgba is None:
                    rgba = cv2.cvtColor(current, cv2.COLOR_BGR2RGBA)
                yield _sample_frame(rgba, sample, fps)
                sample += 1

            current = frame
            current_time = frame_time
            rgba = None

        if current is None:
            raise VideoSourceError(f"Could not read first frame of {source_video}")

        frame_duration = 1.0 / info.fps if info.fps > 0 else 1.0 / fps
        clip_end = current_time + frame_duration
        while sample / fps < clip_end - TIME_EPSILON:
            if rgba is None:
                rgba = cv2.cvtColor(current, cv2.COLOR_BGR2RGBA)
            yield _sample_frame(rgba, sample, fps)
            sample += 1

        logger.info("Sampled %d frames at %s fps (%.2fs)", sample, fps, clip_end)
    finally:
        video.release()


def _sample_frame(rgba: np.ndarray, sample: int, fps: float) -> Frame:
    height, width = rgba.shape[:2]
    return Frame(
        timestamp=round(sample / fps, 6),
        width=width,
        height=height,
        pixels=rgba,
    )
