"""Database initialization and persistence for plans, tests and rank."""
import json
import logging
import os
import sqlite3
from pathlib import Path
from typing import Optional

from expert_maker.models import ExpertPlan, RankConfig, RankState, TestRecord, Weakness
from expert_maker.plan import deserialize_plan, serialize_plan
from expert_maker.quiz import parse_task_key
from expert_maker.rank import (
    DEFAULT_RANK_CONFIG, initial_rank_state, rank_config_from_dict, rank_config_to_dict,
    rank_state_from_dict, rank_state_to_dict,
)

log = logging.getLogger(__name__)

DEFAULT_DB_PATH = os.environ.get(
    "EXPERT_MAKER_DB", str(Path.home() / ".expert_maker" / "expert_maker.db")
)

SCHEMA = """
CREATE TABLE IF NOT EXISTS plans (
    id TEXT PRIMARY KEY,
    title TEXT,
    created_at TEXT,
    json TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS tests (
    id TEXT PRIMARY KEY,
    task_id TEXT NOT NULL,
    score INTEGER NOT NULL,
    passed INTEGER NOT NULL,
    timestamp TEXT NOT NULL,
    weaknesses TEXT
);

CREATE TABLE IF NOT EXISTS rank (
    k TEXT PRIMARY KEY,
    v TEXT
);

CREATE TABLE IF NOT EXISTS user_settings (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    key TEXT NOT NULL UNIQUE,
    value TEXT
);
"""


def get_connection(db_path: str = DEFAULT_DB_PATH) -> sqlite3.Connection:
    """Return a SQLite connection with row factory enabled."""
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    return conn


def init_db(db_path: str = DEFAULT_DB_PATH) -> None:
    """Initialize the database, creating all tables if they don't exist."""
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    conn = get_connection(db_path)
    conn.executescript(SCHEMA)
    conn.commit()
    conn.close()


# --- Plans ---


def save_plan(db_path: str, plan: ExpertPlan) -> None:
    """Store the plan as the single current plan."""
    conn = get_connection(db_path)
    conn.execute("DELETE FROM plans")
    conn.execute(
        "INSERT INTO plans (id, title, created_at, json) VALUES (?, ?, ?, ?)",
        (plan.id, plan.title, plan.created_at, serialize_plan(plan)),
    )
    conn.commit()
    conn.close()


def load_latest_plan(db_path: str) -> Optional[ExpertPlan]:
    conn = get_connection(db_path)
    row = conn.execute("SELECT id, json FROM plans ORDER BY created_at DESC LIMIT 1").fetchone()
    conn.close()
    if not row:
        return None
    result = deserialize_plan(row["json"])
    if not result.ok:
        log.warning("Stored plan %s could not be decoded: %s", row["id"], result.error.message)
        return None
    return result.plan


# --- Test records ---


def append_test(db_path: str, record: TestRecord) -> None:
    conn = get_connection(db_path)
    conn.execute(
        "INSERT INTO tests (id, task_id, score, passed, timestamp, weaknesses) VALUES (?, ?, ?, ?, ?, ?)",
        (
            record.id,
            record.task_id,
            record.score,
            int(record.passed),
            record.timestamp,
            json.dumps([w.to_dict() for w in record.weaknesses]),
        ),
    )
    conn.commit()
    conn.close()


def list_tests(db_path: str) -> list[TestRecord]:
    """All test records, oldest first. Rows with unreadable weaknesses are skipped."""
    conn = get_connection(db_path)
    rows = conn.execute(
        "SELECT * FROM tests ORDER BY timestamp ASC, rowid ASC"
    ).fetchall()
    conn.close()
    records = []
    for row in rows:
        try:
            weaknesses = tuple(Weakness.from_dict(w) for w in json.loads(row["weaknesses"] or "[]"))
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            log.warning("Skipping test %s with unreadable weaknesses: %s", row["id"], e)
            continue
        session_id, mode = parse_task_key(row["task_id"])
        records.append(TestRecord(
            id=row["id"],
            task_id=row["task_id"],
            score=int(row["score"]),
            passed=bool(row["passed"]),
            timestamp=row["timestamp"],
            mode=mode,
            session_id=session_id,
            weaknesses=weaknesses,
        ))
    return records


def clear_tests(db_path: str) -> None:
    conn = get_connection(db_path)
    conn.execute("DELETE FROM tests")
    conn.commit()
    conn.close()


# --- Rank ---


def _put_rank_blob(db_path: str, key: str, value: dict) -> None:
    conn = get_connection(db_path)
    conn.execute(
        "INSERT INTO rank (k, v) VALUES (?, ?) ON CONFLICT(k) DO UPDATE SET v=excluded.v",
        (key, json.dumps(value)),
    )
    conn.commit()
    conn.close()


def _get_rank_blob(db_path: str, key: str) -> Optional[str]:
    conn = get_connection(db_path)
    row = conn.execute("SELECT v FROM rank WHERE k = ?", (key,)).fetchone()
    conn.close()
    return row["v"] if row else None


def save_rank_state(db_path: str, state: RankState) -> None:
    _put_rank_blob(db_path, "state", rank_state_to_dict(state))


def save_rank_config(db_path: str, config: RankConfig) -> None:
    _put_rank_blob(db_path, "config", rank_config_to_dict(config))


def load_rank_state(db_path: str) -> RankState:
    raw = _get_rank_blob(db_path, "state")
    if raw is None:
        return initial_rank_state()
    try:
        return rank_state_from_dict(json.loads(raw), load_rank_config(db_path))
    except ValueError as e:
        log.warning("Failed to parse rank state, starting fresh: %s", e)
        return initial_rank_state()


def load_rank_config(db_path: str) -> RankConfig:
    raw = _get_rank_blob(db_path, "config")
    if raw is None:
        return DEFAULT_RANK_CONFIG
    try:
        return rank_config_from_dict(json.loads(raw))
    except ValueError as e:
        log.warning("Failed to parse rank config, using defaults: %s", e)
        return DEFAULT_RANK_CONFIG
