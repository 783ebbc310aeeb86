"""
Compass tracking: bounded per-axis accumulators.

The current value of an axis is clamped on every write, while the logged
delta is kept exactly as authored. Summing an axis history can therefore
exceed what ``current_value`` shows.
"""

from datetime import datetime
from typing import Dict, Iterable, Optional

from mystira.config import settings
from mystira.schemas.scenario import CompassChange
from mystira.schemas.session import CompassTracking
from mystira.utils.clock import utc_now


def clamp(value: float, minimum: float, maximum: float) -> float:
    return max(minimum, min(maximum, value))


class CompassTracker:
    """Applies compass changes to a session's tracker map"""

    def __init__(
        self,
        min_value: Optional[float] = None,
        max_value: Optional[float] = None,
    ):
        self.min_value = settings.compass_min_value if min_value is None else min_value
        self.max_value = settings.compass_max_value if max_value is None else max_value

    def initialize(
        self, axes: Iterable[str], now: Optional[datetime] = None
    ) -> Dict[str, CompassTracking]:
        """One tracker per axis, starting at 0.0"""
        now = now or utc_now()
        return {
            axis: CompassTracking(axis=axis, current_value=0.0, last_updated=now)
            for axis in axes
        }

    def apply(
        self,
        trackers: Dict[str, CompassTracking],
        change: CompassChange,
        now: Optional[datetime] = None,
    ) -> bool:
        """
        Apply a change to the matching tracker.

        Returns:
            False if the session does not track the change's axis
        """
        tracking = trackers.get(change.axis)
        if tracking is None:
            return False

        tracking.current_value = clamp(
            tracking.current_value + change.delta, self.min_value, self.max_value
        )
        tracking.history.append(CompassChange(axis=change.axis, delta=change.delta))
        tracking.last_updated = now or utc_now()
        return True
