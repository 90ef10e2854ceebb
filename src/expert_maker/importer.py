"""Export plans to JSON documents and import them back."""
import logging
import re
from pathlib import Path

from expert_maker.db import save_plan
from expert_maker.models import ExpertPlan
from expert_maker.plan import MALFORMED, DecodeError, PlanDecodeResult, deserialize_plan, serialize_plan

log = logging.getLogger(__name__)


def export_filename(plan: ExpertPlan) -> str:
    return re.sub(r"\s+", "-", plan.title) + ".json"


def export_plan(plan: ExpertPlan, directory) -> Path:
    """Write the plan document into directory and return its path."""
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / export_filename(plan)
    path.write_text(serialize_plan(plan), encoding="utf-8")
    return path


def read_plan_file(file_path) -> PlanDecodeResult:
    try:
        text = Path(file_path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        return PlanDecodeResult(error=DecodeError(MALFORMED, f"Unable to read {file_path}: {e}"))
    return deserialize_plan(text)


def import_plan(db_path: str, file_path) -> PlanDecodeResult:
    """Decode a plan document and make it the current plan; nothing is stored on failure."""
    result = read_plan_file(file_path)
    if not result.ok:
        log.warning("Rejected plan import from %s: %s", file_path, result.error.message)
        return result
    save_plan(db_path, result.plan)
    return result
