"""Small helpers shared by the planner modules."""
import math
import uuid
from datetime import datetime, timezone


def safe_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4()}"


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values, unlike Python's banker's rounding."""
    return int(math.floor(value + 0.5))


def format_minutes(minutes: int) -> str:
    hours, mins = divmod(minutes, 60)
    if not hours:
        return f"{mins} min"
    unit = "hrs" if hours > 1 else "hr"
    if not mins:
        return f"{hours} {unit}"
    return f"{hours} {unit} {mins} min"


def iso_timestamp(moment: datetime) -> str:
    """UTC ISO-8601 with milliseconds and a Z suffix; naive values are taken as UTC."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")
