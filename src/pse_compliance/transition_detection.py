# Copyright (c) 2026 pse_compliance contributors
# SPDX-License-Identifier: MIT

"""Zone and frame transition detection."""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from pse_compliance.configuration import TIME_EPSILON, TransitionParams
from pse_compliance.frame_data import FrameMetrics, ZoneMetrics
from pse_compliance.result import Direction, FlashType


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ZoneTransition:
    """A flagged change of one zone between two adjacent frames."""
    row: int
    col: int
    type: FlashType
    direction: Direction
    area: int


@dataclass(frozen=True)
class FrameTransition:
    """Same-type, same-direction zone transitions covering enough area."""
    time: float
    type: FlashType
    direction: Direction
    area: int


class TransitionDetection:
    """
    Compares zone metrics of consecutive frames.

    General transitions use relative luminance (luminance / 255): a zone is
    flagged when the change is at least the flash threshold and the darker
    of the two frames is below the dark threshold. Red transitions are
    flagged when either frame has enough red-dominant area and the red area
    proportion changes by at least the change threshold.
    """

    def __init__(self, params: TransitionParams):
        self.params = params

    def general_transition(self, prev: ZoneMetrics, cur: ZoneMetrics) -> Optional[Direction]:
        """Direction of a general transition in a zone, None if not flagged."""
        cur_rel = cur.luminance / 255.0
        prev_rel = prev.luminance / 255.0
        darker = min(cur_rel, prev_rel)
        diff = abs(cur_rel - prev_rel)

        if diff >= self.params.luminance_flash_threshold and darker < self.params.luminance_dark_threshold:
            return Direction.Increase if cur.luminance > prev.luminance else Direction.Decrease
        return None

    def red_transition(self, prev: ZoneMetrics, cur: ZoneMetrics) -> Optional[Direction]:
        """Direction of a red transition in a zone, None if not flagged."""
        red_area = max(prev.red_area_proportion, cur.red_area_proportion)
        change = cur.red_area_proportion - prev.red_area_proportion

        if red_area >= self.params.red_area_threshold and abs(change) >= self.params.red_change_threshold:
            return Direction.Increase if change > 0 else Direction.Decrease
        return None

    def zone_transitions(self, prev: FrameMetrics, cur: FrameMetrics) -> List[ZoneTransition]:
        """
        Flag every zone that changed between two frames.

        Zones are compared by position in the row-major zone sequence, which
        addresses the same (row, col) in both frames.
        """
        transitions: List[ZoneTransition] = []

        for prev_zone, cur_zone in zip(prev.zones, cur.zones):
            general = self.general_transition(prev_zone, cur_zone)
            if general is not None:
                transitions.append(ZoneTransition(
                    cur_zone.row, cur_zone.col, FlashType.General, general, cur_zone.area
                ))

            red = self.red_transition(prev_zone, cur_zone)
            if red is not None:
                transitions.append(ZoneTransition(
                    cur_zone.row, cur_zone.col, FlashType.Red, red, cur_zone.area
                ))

        return transitions

    def detect(self, prev: FrameMetrics, cur: FrameMetrics) -> List[FrameTransition]:
        """
        Frame-level transitions between two frames.

        Args:
            prev: Metrics of the earlier frame
            cur: Metrics of the later frame

        Returns:
            One FrameTransition per (type, direction) whose summed zone area
            reaches the minimum transition area, empty if the frames are
            too far apart
        """
        if cur.timestamp - prev.timestamp > self.params.max_frame_gap + TIME_EPSILON:
            return []

        areas: Dict[Tuple[FlashType, Direction], int] = {}
        for zone in self.zone_transitions(prev, cur):
            key = (zone.type, zone.direction)
            areas[key] = areas.get(key, 0) + zone.area

        transitions = []
        for flash_type in FlashType:
            for direction in Direction:
                area = areas.get((flash_type, direction), 0)
                if area > 0 and area >= self.params.min_transition_area:
                    transitions.append(FrameTransition(cur.timestamp, flash_type, direction, area))
        return transitions

    def detect_all(self, metrics: Sequence[FrameMetrics]) -> List[FrameTransition]:
        """Frame transitions over a timestamp-ordered metrics sequence."""
        transitions: List[FrameTransition] = []
        skipped = 0

        for prev, cur in zip(metrics, metrics[1:]):
            if cur.timestamp - prev.timestamp > self.params.max_frame_gap + TIME_EPSILON:
                skipped += 1
                continue
            transitions.extend(self.detect(prev, cur))

        if skipped:
            logger.debug("Skipped %d frame pairs further apart than %ss",
                         skipped, self.params.max_frame_gap)
        return transitions


def split_by_type(transitions: Sequence[FrameTransition]) -> Dict[FlashType, List[FrameTransition]]:
    """Group transitions by hazard type, preserving time order."""
    streams: Dict[FlashType, List[FrameTransition]] = {flash_type: [] for flash_type in FlashType}
    for transition in transitions:
        streams[transition.type].append(transition)
    return streams
