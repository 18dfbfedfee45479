import sqlite3
import datetime
import json
from contextlib import contextmanager
from typing import List, Tuple, Optional, Iterable

from errors import NotFoundError, ValidationError
from models import (
    DailyMetric,
    SorenessEntry,
    JumpTest,
    DailyLoad,
    PRRecord,
    PR_TYPES,
    MuscleLoadEntry,
    MobilityProtocol,
    ProtocolStep,
    SessionFinisherAssignment,
    validate_date,
    validate_number,
)


class Database:
    """Provides SQLite connection management and schema initialization."""

    _TABLE_DEFINITIONS = {
        "daily_metrics": (
            """CREATE TABLE daily_metrics (
                    user_id TEXT NOT NULL,
                    date TEXT NOT NULL,
                    hrv_rmssd REAL,
                    sleep_minutes REAL,
                    PRIMARY KEY (user_id, date)
                );""",
            ["user_id", "date", "hrv_rmssd", "sleep_minutes"],
        ),
        "soreness": (
            """CREATE TABLE soreness (
                    user_id TEXT NOT NULL,
                    date TEXT NOT NULL,
                    score INTEGER NOT NULL,
                    PRIMARY KEY (user_id, date)
                );""",
            ["user_id", "date", "score"],
        ),
        "jump_tests": (
            """CREATE TABLE jump_tests (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id TEXT NOT NULL,
                    date TEXT NOT NULL,
                    height_cm REAL NOT NULL DEFAULT 0
                );""",
            ["id", "user_id", "date", "height_cm"],
        ),
        "daily_loads": (
            """CREATE TABLE daily_loads (
                    user_id TEXT NOT NULL,
                    date TEXT NOT NULL,
                    daily_load REAL NOT NULL,
                    PRIMARY KEY (user_id, date)
                );""",
            ["user_id", "date", "daily_load"],
        ),
        "personal_records": (
            """CREATE TABLE personal_records (
                    user_id TEXT NOT NULL,
                    exercise TEXT NOT NULL,
                    type TEXT NOT NULL,
                    value REAL NOT NULL,
                    achieved_at TEXT NOT NULL,
                    PRIMARY KEY (user_id, exercise, type)
                );""",
            ["user_id", "exercise", "type", "value", "achieved_at"],
        ),
        "muscle_load_daily": (
            """CREATE TABLE muscle_load_daily (
                    user_id TEXT NOT NULL,
                    date TEXT NOT NULL,
                    muscle TEXT NOT NULL,
                    load_score REAL NOT NULL,
                    PRIMARY KEY (user_id, date, muscle)
                );""",
            ["user_id", "date", "muscle", "load_score"],
        ),
        "mobility_protocols": (
            """CREATE TABLE mobility_protocols (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL UNIQUE,
                    muscle_targets TEXT NOT NULL,
                    steps TEXT NOT NULL DEFAULT '[]',
                    duration_min INTEGER NOT NULL DEFAULT 0
                );""",
            ["id", "name", "muscle_targets", "steps", "duration_min"],
        ),
        "workout_sessions": (
            """CREATE TABLE workout_sessions (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id TEXT NOT NULL,
                    started_at TEXT NOT NULL
                );""",
            ["id", "user_id", "started_at"],
        ),
        "session_finishers": (
            """CREATE TABLE session_finishers (
                    session_id INTEGER PRIMARY KEY,
                    protocol_id INTEGER NOT NULL,
                    auto_assigned INTEGER NOT NULL DEFAULT 0,
                    created_at TEXT NOT NULL,
                    FOREIGN KEY(session_id) REFERENCES workout_sessions(id) ON DELETE CASCADE,
                    FOREIGN KEY(protocol_id) REFERENCES mobility_protocols(id) ON DELETE CASCADE
                );""",
            ["session_id", "protocol_id", "auto_assigned", "created_at"],
        ),
        "notifications": (
            """CREATE TABLE notifications (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id TEXT NOT NULL,
                    timestamp TEXT NOT NULL,
                    event TEXT NOT NULL,
                    payload TEXT NOT NULL,
                    read INTEGER NOT NULL DEFAULT 0
                );""",
            ["id", "user_id", "timestamp", "event", "payload", "read"],
        ),
    }

    def __init__(self, db_path: str = "readiness.db") -> None:
        self._db_path = db_path
        self._ensure_schema()

    @contextmanager
    def _connection(self):
        connection = sqlite3.connect(self._db_path)
        connection.execute("PRAGMA foreign_keys=on;")
        try:
            yield connection
            connection.commit()
        finally:
            connection.close()

    def _ensure_schema(self) -> None:
        with self._connection() as conn:
            conn.execute("PRAGMA foreign_keys=off;")
            for table, (sql, columns) in self._TABLE_DEFINITIONS.items():
                self._ensure_table(conn, table, sql, columns)

    def _ensure_table(
        self, conn: sqlite3.Connection, table: str, sql: str, columns: List[str]
    ) -> None:
        cur = conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name=?;", (table,)
        )
        if cur.fetchone() is None:
            conn.execute(sql)
            return

        cur = conn.execute(f"PRAGMA table_info({table});")
        existing_cols = [row[1] for row in cur.fetchall()]
        if existing_cols == columns:
            return

        conn.execute(f"DROP TABLE IF EXISTS {table}_old;")
        conn.execute(f"ALTER TABLE {table} RENAME TO {table}_old;")
        conn.execute(sql)
        common = [c for c in existing_cols if c in columns]
        if common:
            cols = ", ".join(common)
            conn.execute(f"INSERT INTO {table} ({cols}) SELECT {cols} FROM {table}_old;")
        conn.execute(f"DROP TABLE {table}_old;")


class BaseRepository(Database):
    """Base repository providing helper methods."""

    def execute(self, query: str, params: Tuple = ()) -> int:
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute(query, params)
            return cursor.lastrowid

    def execute_rowcount(self, query: str, params: Tuple = ()) -> int:
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute(query, params)
            return cursor.rowcount

    def fetch_all(self, query: str, params: Tuple = ()) -> List[Tuple]:
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute(query, params)
            return cursor.fetchall()


class MetricsRepository(BaseRepository):
    """Repository for daily biometrics, soreness and jump tests."""

    def get_daily_metric(self, user_id: str, date: str) -> Optional[DailyMetric]:
        rows = self.fetch_all(
            "SELECT hrv_rmssd, sleep_minutes FROM daily_metrics WHERE user_id = ? AND date = ?;",
            (user_id, date),
        )
        if not rows:
            return None
        hrv, sleep = rows[0]
        return DailyMetric(
            user_id=user_id,
            date=date,
            hrv_rmssd=float(hrv) if hrv is not None else None,
            sleep_minutes=float(sleep) if sleep is not None else None,
        )

    def upsert_daily_metric(self, metric: DailyMetric) -> None:
        validate_date(metric.date)
        if metric.hrv_rmssd is None and metric.sleep_minutes is None:
            raise ValidationError("at least one value required")
        for name, value in (("hrv_rmssd", metric.hrv_rmssd), ("sleep_minutes", metric.sleep_minutes)):
            validate_number(name, value, minimum=0)
        self.execute(
            "INSERT INTO daily_metrics (user_id, date, hrv_rmssd, sleep_minutes) VALUES (?, ?, ?, ?) "
            "ON CONFLICT(user_id, date) DO UPDATE SET "
            "hrv_rmssd=COALESCE(excluded.hrv_rmssd, daily_metrics.hrv_rmssd), "
            "sleep_minutes=COALESCE(excluded.sleep_minutes, daily_metrics.sleep_minutes);",
            (metric.user_id, metric.date, metric.hrv_rmssd, metric.sleep_minutes),
        )

    def get_soreness_entry(self, user_id: str, date: str) -> Optional[SorenessEntry]:
        rows = self.fetch_all(
            "SELECT score FROM soreness WHERE user_id = ? AND date = ?;",
            (user_id, date),
        )
        if not rows:
            return None
        return SorenessEntry(user_id=user_id, date=date, score=int(rows[0][0]))

    def upsert_soreness_entry(self, entry: SorenessEntry) -> None:
        validate_date(entry.date)
        if isinstance(entry.score, bool) or not isinstance(entry.score, int):
            raise ValidationError("soreness score must be an integer")
        if not 1 <= entry.score <= 10:
            raise ValidationError("soreness score must be between 1 and 10")
        self.execute(
            "INSERT INTO soreness (user_id, date, score) VALUES (?, ?, ?) "
            "ON CONFLICT(user_id, date) DO UPDATE SET score=excluded.score;",
            (entry.user_id, entry.date, entry.score),
        )

    def fetch_soreness_history(
        self, user_id: str, start_date: Optional[str] = None, end_date: Optional[str] = None
    ) -> list[SorenessEntry]:
        query = "SELECT date, score FROM soreness WHERE user_id = ?"
        params: list[str] = [user_id]
        if start_date:
            query += " AND date >= ?"
            params.append(start_date)
        if end_date:
            query += " AND date <= ?"
            params.append(end_date)
        query += " ORDER BY date;"
        rows = self.fetch_all(query, tuple(params))
        return [SorenessEntry(user_id, d, int(s)) for d, s in rows]

    def add_jump_test(self, test: JumpTest) -> int:
        validate_date(test.date)
        height = test.height_cm if test.height_cm is not None else 0.0
        validate_number("jump height", height, minimum=0)
        return self.execute(
            "INSERT INTO jump_tests (user_id, date, height_cm) VALUES (?, ?, ?);",
            (test.user_id, test.date, height),
        )

    def get_jump_test(self, user_id: str, date: str) -> Optional[JumpTest]:
        """Return the most recently logged jump test for ``date``."""
        rows = self.fetch_all(
            "SELECT height_cm FROM jump_tests WHERE user_id = ? AND date = ? ORDER BY id DESC LIMIT 1;",
            (user_id, date),
        )
        if not rows:
            return None
        return JumpTest(user_id=user_id, date=date, height_cm=float(rows[0][0]))


class LoadSeriesRepository(BaseRepository):
    """Repository for daily training load."""

    def log(self, user_id: str, date: str, daily_load: float) -> None:
        validate_date(date)
        validate_number("daily load", daily_load, minimum=0)
        self.execute(
            "INSERT INTO daily_loads (user_id, date, daily_load) VALUES (?, ?, ?) "
            "ON CONFLICT(user_id, date) DO UPDATE SET daily_load=excluded.daily_load;",
            (user_id, date, float(daily_load)),
        )

    def bulk_log(self, user_id: str, entries: Iterable[Tuple[str, float]]) -> None:
        for date, load in entries:
            self.log(user_id, date, load)

    def get_daily_load_series(
        self, user_id: str, start_date: Optional[str] = None, end_date: Optional[str] = None
    ) -> list[DailyLoad]:
        query = "SELECT date, daily_load FROM daily_loads WHERE user_id = ?"
        params: list[str] = [user_id]
        if start_date:
            query += " AND date >= ?"
            params.append(start_date)
        if end_date:
            query += " AND date <= ?"
            params.append(end_date)
        query += " ORDER BY date;"
        rows = self.fetch_all(query, tuple(params))
        return [DailyLoad(user_id, d, float(v)) for d, v in rows]


class PRRepository(BaseRepository):
    """Repository for personal records, one row per exercise and type."""

    def get_best_pr(self, user_id: str, exercise: str, pr_type: str) -> Optional[PRRecord]:
        rows = self.fetch_all(
            "SELECT value, achieved_at FROM personal_records "
            "WHERE user_id = ? AND exercise = ? AND type = ?;",
            (user_id, exercise, pr_type),
        )
        if not rows:
            return None
        return PRRecord(user_id, exercise, pr_type, float(rows[0][0]), rows[0][1])

    def get_bests(self, user_id: str, exercise: str) -> dict[str, Optional[PRRecord]]:
        return {t: self.get_best_pr(user_id, exercise, t) for t in PR_TYPES}

    def upsert_pr(self, record: PRRecord) -> bool:
        """Store ``record`` if it beats the current best.

        Returns ``True`` when a row was inserted or improved. The comparison
        happens inside the upsert so concurrent submissions cannot lower a
        record.
        """
        if record.type not in PR_TYPES:
            raise ValidationError(f"unknown record type: {record.type}")
        validate_number("record value", record.value)
        changed = self.execute_rowcount(
            "INSERT INTO personal_records (user_id, exercise, type, value, achieved_at) "
            "VALUES (?, ?, ?, ?, ?) "
            "ON CONFLICT(user_id, exercise, type) DO UPDATE SET "
            "value=excluded.value, achieved_at=excluded.achieved_at "
            "WHERE excluded.value > personal_records.value;",
            (record.user_id, record.exercise, record.type, float(record.value), record.achieved_at),
        )
        return changed > 0

    def fetch_for_user(self, user_id: str, exercise: Optional[str] = None) -> list[PRRecord]:
        query = "SELECT exercise, type, value, achieved_at FROM personal_records WHERE user_id = ?"
        params: list[str] = [user_id]
        if exercise:
            query += " AND exercise = ?"
            params.append(exercise)
        query += " ORDER BY exercise, type;"
        rows = self.fetch_all(query, tuple(params))
        return [PRRecord(user_id, ex, t, float(v), at) for ex, t, v, at in rows]


class MuscleLoadRepository(BaseRepository):
    """Repository for per-muscle daily load scores."""

    def log(self, entry: MuscleLoadEntry) -> None:
        validate_date(entry.date)
        validate_number("load score", entry.load_score, minimum=0)
        self.execute(
            "INSERT INTO muscle_load_daily (user_id, date, muscle, load_score) VALUES (?, ?, ?, ?) "
            "ON CONFLICT(user_id, date, muscle) DO UPDATE SET load_score=excluded.load_score;",
            (entry.user_id, entry.date, entry.muscle, float(entry.load_score)),
        )

    def get_muscle_load_for_day(self, user_id: str, date: str) -> list[MuscleLoadEntry]:
        rows = self.fetch_all(
            "SELECT muscle, load_score FROM muscle_load_daily "
            "WHERE user_id = ? AND date = ? ORDER BY load_score DESC, muscle;",
            (user_id, date),
        )
        if not rows:
            raise NotFoundError("no muscle load data found for session date")
        return [MuscleLoadEntry(user_id, date, m, float(s)) for m, s in rows]


class ProtocolRepository(BaseRepository):
    """Read access to the mobility protocol catalog."""

    def add(
        self,
        name: str,
        muscle_targets: Iterable[str],
        steps: Iterable[ProtocolStep] = (),
        duration_minutes: int = 0,
    ) -> int:
        targets = sorted({m.strip() for m in muscle_targets if m and m.strip()})
        if not targets:
            raise ValidationError("protocol needs at least one muscle target")
        steps_json = json.dumps(
            [{"step": s.step, "duration_seconds": s.duration_seconds} for s in steps]
        )
        return self.execute(
            "INSERT INTO mobility_protocols (name, muscle_targets, steps, duration_min) VALUES (?, ?, ?, ?);",
            (name, "|".join(targets), steps_json, int(duration_minutes)),
        )

    @staticmethod
    def _row_to_protocol(row: Tuple) -> MobilityProtocol:
        pid, name, targets, steps, duration = row
        return MobilityProtocol(
            id=int(pid),
            name=name,
            muscle_targets=frozenset(m for m in targets.split("|") if m),
            steps=[ProtocolStep(s["step"], int(s["duration_seconds"])) for s in json.loads(steps)],
            duration_minutes=int(duration),
        )

    def list_protocols(self) -> list[MobilityProtocol]:
        rows = self.fetch_all(
            "SELECT id, name, muscle_targets, steps, duration_min FROM mobility_protocols ORDER BY id;"
        )
        return [self._row_to_protocol(r) for r in rows]

    def fetch(self, protocol_id: int) -> Optional[MobilityProtocol]:
        rows = self.fetch_all(
            "SELECT id, name, muscle_targets, steps, duration_min FROM mobility_protocols WHERE id = ?;",
            (protocol_id,),
        )
        return self._row_to_protocol(rows[0]) if rows else None


class SessionRepository(BaseRepository):
    """Repository for workout sessions."""

    def create(self, user_id: str, started_at: Optional[str] = None) -> int:
        ts = started_at or datetime.datetime.now(datetime.timezone.utc).isoformat()
        try:
            datetime.datetime.fromisoformat(ts)
        except ValueError:
            raise ValidationError(f"invalid timestamp: {ts!r}")
        return self.execute(
            "INSERT INTO workout_sessions (user_id, started_at) VALUES (?, ?);",
            (user_id, ts),
        )

    def fetch(self, session_id: int, user_id: Optional[str] = None) -> Optional[dict]:
        query = "SELECT id, user_id, started_at FROM workout_sessions WHERE id = ?"
        params: list = [session_id]
        if user_id is not None:
            query += " AND user_id = ?"
            params.append(user_id)
        rows = self.fetch_all(query + ";", tuple(params))
        if not rows:
            return None
        sid, uid, started = rows[0]
        return {"id": int(sid), "user_id": uid, "started_at": started}


class FinisherAssignmentRepository(BaseRepository):
    """Repository for the single finisher protocol attached to a session."""

    def upsert_assignment(
        self, session_id: int, protocol_id: int, auto_assigned: bool
    ) -> SessionFinisherAssignment:
        self.execute(
            "INSERT INTO session_finishers (session_id, protocol_id, auto_assigned, created_at) "
            "VALUES (?, ?, ?, ?) "
            "ON CONFLICT(session_id) DO UPDATE SET protocol_id=excluded.protocol_id, "
            "auto_assigned=excluded.auto_assigned, created_at=excluded.created_at;",
            (
                session_id,
                protocol_id,
                1 if auto_assigned else 0,
                datetime.datetime.now(datetime.timezone.utc).isoformat(),
            ),
        )
        return SessionFinisherAssignment(session_id, protocol_id, bool(auto_assigned))

    def fetch(self, session_id: int) -> Optional[SessionFinisherAssignment]:
        rows = self.fetch_all(
            "SELECT session_id, protocol_id, auto_assigned FROM session_finishers WHERE session_id = ?;",
            (session_id,),
        )
        if not rows:
            return None
        sid, pid, auto = rows[0]
        return SessionFinisherAssignment(int(sid), int(pid), bool(auto))

    def count(self, session_id: int) -> int:
        rows = self.fetch_all(
            "SELECT COUNT(*) FROM session_finishers WHERE session_id = ?;", (session_id,)
        )
        return int(rows[0][0])


class NotificationRepository(BaseRepository):
    """Repository for published engine events."""

    def add(self, user_id: str, event: str, payload: dict) -> int:
        return self.execute(
            "INSERT INTO notifications (user_id, timestamp, event, payload, read) VALUES (?, ?, ?, ?, 0);",
            (
                user_id,
                datetime.datetime.now(datetime.timezone.utc).isoformat(),
                event,
                json.dumps(payload, sort_keys=True),
            ),
        )

    def fetch_all(self, user_id: Optional[str] = None, unread_only: bool = False) -> list[dict[str, object]]:
        sql = "SELECT id, user_id, timestamp, event, payload, read FROM notifications WHERE 1=1"
        params: list = []
        if user_id is not None:
            sql += " AND user_id = ?"
            params.append(user_id)
        if unread_only:
            sql += " AND read=0"
        sql += " ORDER BY id;"
        rows = super().fetch_all(sql, tuple(params))
        return [
            {
                "id": r[0],
                "user_id": r[1],
                "timestamp": r[2],
                "event": r[3],
                "payload": json.loads(r[4]),
                "read": bool(r[5]),
            }
            for r in rows
        ]

    def mark_read(self, nid: int, user_id: str) -> bool:
        """Mark one of ``user_id``'s notifications read; False when none matched."""
        changed = self.execute_rowcount(
            "UPDATE notifications SET read=1 WHERE id=? AND user_id=?;", (nid, user_id)
        )
        return changed > 0

    def unread_count(self, user_id: str) -> int:
        rows = super().fetch_all(
            "SELECT COUNT(*) FROM notifications WHERE user_id = ? AND read=0;", (user_id,)
        )
        return rows[0][0] if rows else 0
