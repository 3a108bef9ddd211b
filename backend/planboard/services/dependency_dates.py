"""
Dependency date calculation.

Given one predecessor's dates and one dependency, computes the dates the
successor needs so that the dependency holds exactly:

    FS: successor.start = predecessor.end   + lag + 1
    SS: successor.start = predecessor.start + lag
    FF: successor.end   = predecessor.end   + lag
    SF: successor.end   = predecessor.start + lag

The missing side of the successor's range is derived from its duration.
"""

from dataclasses import dataclass
from datetime import date

from planboard.logging_config import get_logger
from planboard.schemas.task import DependencyType
from planboard.services.dates import DateLike, add_days, parse_date

logger = get_logger(__name__)


@dataclass(frozen=True)
class TaskDateUpdate:
    """A proposed start/end date pair for a task."""
    start_date: date
    end_date: date


def coerce_dependency_type(value: DependencyType | str) -> DependencyType:
    """
    Map a raw dependency type onto the enum.

    Values outside FS/SS/FF/SF fall back to FS. The pydantic models already
    reject them, so only callers passing raw strings can hit the fallback.
    """
    if isinstance(value, DependencyType):
        return value
    try:
        return DependencyType(value)
    except ValueError:
        logger.warning(f"Unknown dependency type {value!r}, treating as FS")
        return DependencyType.FS


def calculate_successor_dates(
    predecessor_start: DateLike,
    predecessor_end: DateLike,
    successor_duration: int,
    dependency_type: DependencyType | str,
    lag: int,
) -> TaskDateUpdate:
    """
    Calculate the successor's dates for a single dependency.

    Args:
        predecessor_start: Predecessor start date (date or ISO string)
        predecessor_end: Predecessor end date (date or ISO string)
        successor_duration: Successor duration in days (>= 1)
        dependency_type: FS, SS, FF or SF
        lag: Signed lag in days (negative allows overlap)

    Returns:
        TaskDateUpdate satisfying the dependency exactly

    Raises:
        InvalidDateError: if either predecessor date is malformed
    """
    pred_start = parse_date(predecessor_start)
    pred_end = parse_date(predecessor_end)
    span = successor_duration - 1
    dep_type = coerce_dependency_type(dependency_type)

    if dep_type is DependencyType.SS:
        start = add_days(pred_start, lag)
        end = add_days(start, span)
    elif dep_type is DependencyType.FF:
        end = add_days(pred_end, lag)
        start = add_days(end, -span)
    elif dep_type is DependencyType.SF:
        end = add_days(pred_start, lag)
        start = add_days(end, -span)
    else:
        # FS
        start = add_days(pred_end, lag + 1)
        end = add_days(start, span)

    return TaskDateUpdate(start_date=start, end_date=end)
