"""Rules for spatial and temporal coverage."""

from datetime import date
from typing import Any, Dict, List, Optional

from config.models import CoverageType, FieldError
from .base import BaseRule, RuleContext

MIN_POLYGON_POINTS = 3
MAX_REPORTED_REJECTIONS = 5


def _parse_date(value: Any) -> Optional[date]:
    if not isinstance(value, str):
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


def _normalize_time(value: Any) -> Optional[str]:
    if not isinstance(value, str) or not value:
        return None
    return value if len(value) == 8 else f"{value}:00"


class PolygonRule(BaseRule):
    """Polygon coverages need at least three valid points."""

    name = "polygon"
    field = "spatialTemporalCoverages"

    def evaluate(self, data: Dict[str, Any], context: RuleContext) -> List[FieldError]:
        errors = []
        for index, coverage in enumerate(self._entries(data, "spatialTemporalCoverages")):
            if not isinstance(coverage, dict) or coverage.get("type") != CoverageType.POLYGON.value:
                continue

            points = coverage.get("polygonPoints") or []
            if len(points) >= MIN_POLYGON_POINTS:
                continue

            field = f"spatialTemporalCoverages.{index}.polygonPoints"
            message = (
                f"Polygon requires at least {MIN_POLYGON_POINTS} valid points, "
                f"but only {len(points)} valid point(s) found."
            )
            rejected = [entry.reason for entry in context.dropped_in(field)]
            if rejected:
                message += " Rejected points: " + "; ".join(rejected[:MAX_REPORTED_REJECTIONS])
                if len(rejected) > MAX_REPORTED_REJECTIONS:
                    message += f" and {len(rejected) - MAX_REPORTED_REJECTIONS} more."
            errors.append(self._error(field, message))
        return errors


class TemporalRule(BaseRule):
    """End dates (and times on the same day) may not precede their start."""

    name = "temporal"
    field = "dates"

    def evaluate(self, data: Dict[str, Any], context: RuleContext) -> List[FieldError]:
        errors = []

        for index, entry in enumerate(self._entries(data, "dates")):
            if isinstance(entry, dict) and self._ends_before_start(entry, with_time=False):
                errors.append(self._error(
                    f"dates.{index}.endDate",
                    "The end date must be a date after or equal to the start date.",
                ))

        for index, coverage in enumerate(self._entries(data, "spatialTemporalCoverages")):
            if isinstance(coverage, dict) and self._ends_before_start(coverage, with_time=True):
                errors.append(self._error(
                    f"spatialTemporalCoverages.{index}.endDate",
                    "The end of a temporal coverage must not be before its start.",
                ))

        return errors

    @staticmethod
    def _ends_before_start(entry: Dict[str, Any], with_time: bool) -> bool:
        start = _parse_date(entry.get("startDate"))
        end = _parse_date(entry.get("endDate"))
        if start is None or end is None:
            return False
        if end != start or not with_time:
            return end < start

        start_time = _normalize_time(entry.get("startTime"))
        end_time = _normalize_time(entry.get("endTime"))
        if start_time is None or end_time is None:
            return False
        return end_time < start_time
