"""Tests for plan export and import."""
import json

from expert_maker.db import init_db, load_latest_plan, save_plan
from expert_maker.importer import export_filename, export_plan, import_plan, read_plan_file
from expert_maker.plan import MALFORMED, MISSING_FIELD, PlanRequest, generate_plan


def _plan(now):
    return generate_plan(PlanRequest(("webrtc", "sockets"), 3, 10), now=now)


def test_export_filename(fixed_now):
    assert export_filename(_plan(fixed_now)) == "ExpertMaker-Plan-—-Jan-2,-2024.json"


def test_export_writes_document(tmp_path, fixed_now):
    plan = _plan(fixed_now)
    path = export_plan(plan, tmp_path / "exports")
    assert path.parent == tmp_path / "exports"
    doc = json.loads(path.read_text(encoding="utf-8"))
    assert doc["id"] == plan.id
    assert doc["weeksData"][0]["sessions"][0]["topicId"] == "webrtc"


def test_export_then_import_round_trip(tmp_db, tmp_path, fixed_now):
    init_db(tmp_db)
    plan = _plan(fixed_now)
    path = export_plan(plan, tmp_path)
    result = import_plan(tmp_db, path)
    assert result.ok
    assert result.plan == plan
    assert load_latest_plan(tmp_db) == plan


def test_import_replaces_current_plan(tmp_db, tmp_path, fixed_now):
    init_db(tmp_db)
    save_plan(tmp_db, generate_plan(PlanRequest(("oauth",), 1, 4), now=fixed_now))
    imported = _plan(fixed_now)
    import_plan(tmp_db, export_plan(imported, tmp_path))
    assert load_latest_plan(tmp_db) == imported


def test_import_malformed_leaves_store_untouched(tmp_db, tmp_path, fixed_now):
    init_db(tmp_db)
    current = _plan(fixed_now)
    save_plan(tmp_db, current)
    bad = tmp_path / "bad.json"
    bad.write_text("{not json", encoding="utf-8")
    result = import_plan(tmp_db, bad)
    assert not result.ok
    assert result.error.kind == MALFORMED
    assert load_latest_plan(tmp_db) == current


def test_import_missing_field(tmp_db, tmp_path):
    init_db(tmp_db)
    path = tmp_path / "partial.json"
    path.write_text(json.dumps({"id": "plan-1", "title": "Partial"}), encoding="utf-8")
    result = import_plan(tmp_db, path)
    assert result.error.kind == MISSING_FIELD
    assert result.error.field == "plan.weeksData"
    assert load_latest_plan(tmp_db) is None


def test_read_missing_file(tmp_path):
    result = read_plan_file(tmp_path / "nowhere.json")
    assert not result.ok
    assert result.error.kind == MALFORMED


def test_read_binary_file(tmp_path):
    path = tmp_path / "plan.json"
    path.write_bytes(b"\xff\xfe\x00garbage")
    assert read_plan_file(path).error.kind == MALFORMED
