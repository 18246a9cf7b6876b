import queue
import sqlite3
import threading
import time
from datetime import datetime, timezone
from typing import List, Optional

from config import DB_PATH, MAX_STRIKES


def now_iso():
    return datetime.now(timezone.utc).isoformat()


SCHEMA = """
CREATE TABLE IF NOT EXISTS sessions (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    session_id TEXT UNIQUE NOT NULL,
    domain TEXT,
    level TEXT,
    strikes INTEGER NOT NULL DEFAULT 0,
    status TEXT NOT NULL DEFAULT 'active',
    started_at TEXT NOT NULL,
    last_update TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS violations (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    session_id TEXT NOT NULL,
    violation_type TEXT NOT NULL,
    action TEXT NOT NULL,
    detail TEXT,
    ts TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_violations_session_id ON violations(session_id);
CREATE INDEX IF NOT EXISTS idx_violations_ts ON violations(ts);
CREATE INDEX IF NOT EXISTS idx_sessions_session_id ON sessions(session_id);
"""

STATUS_ACTIVE = "active"
STATUS_WARN = "warning"
STATUS_COMPLETED = "completed"
STATUS_TERMINATED = "terminated"


def _connect(db_path: Optional[str] = None):
    return sqlite3.connect(db_path or DB_PATH)


def _execute_with_retry(func, db_path=None, max_attempts=3, retry_delay=0.1):
    """
    Run func(connection), retrying while another writer holds the lock.

    The audit log is written from the client while the server reads it, so
    "database is locked" is expected now and then. Other errors, and the last
    locked attempt, propagate.
    """
    for attempt in range(max_attempts):
        try:
            with _connect(db_path) as con:
                return func(con)
        except sqlite3.OperationalError as e:
            if "database is locked" in str(e).lower() and attempt < max_attempts - 1:
                print(f"[DB] Database locked, retrying... (attempt {attempt + 1}/{max_attempts})")
                time.sleep(retry_delay)
            else:
                raise


def init_db(db_path=None):
    """Create tables if they do not exist."""
    def _init(con):
        con.executescript(SCHEMA)

    try:
        _execute_with_retry(_init, db_path)
    except sqlite3.Error as e:
        print(f"[DB] Failed to initialize database: {e}")
        raise


def _status_from_strikes(strikes: int) -> str:
    if strikes >= MAX_STRIKES:
        return STATUS_TERMINATED
    if strikes > 0:
        return STATUS_WARN
    return STATUS_ACTIVE


def start_session(session_id: str, domain: str = None, level: str = None, db_path=None):
    def _start(con):
        ts = now_iso()
        con.execute(
            "INSERT OR REPLACE INTO sessions (session_id, domain, level, strikes, status, started_at, last_update) "
            "VALUES (?, ?, ?, 0, ?, ?, ?)",
            (session_id, domain, level, STATUS_ACTIVE, ts, ts),
        )

    try:
        _execute_with_retry(_start, db_path)
    except sqlite3.Error as e:
        print(f"[DB] Failed to start session {session_id}: {e}")


def set_strikes(session_id: str, strikes: int, db_path=None):
    status = _status_from_strikes(strikes)

    def _set(con):
        con.execute("UPDATE sessions SET strikes=?, status=?, last_update=? WHERE session_id=?",
                    (strikes, status, now_iso(), session_id))

    try:
        _execute_with_retry(_set, db_path)
    except sqlite3.Error as e:
        print(f"[DB] Failed to set strikes for {session_id}: {e}")
        # Continue the session even if the write fails


def end_session(session_id: str, status: str, db_path=None):
    def _end(con):
        con.execute("UPDATE sessions SET status=?, last_update=? WHERE session_id=?",
                    (status, now_iso(), session_id))

    try:
        _execute_with_retry(_end, db_path)
    except sqlite3.Error as e:
        print(f"[DB] Failed to close session {session_id}: {e}")


def log_violation(session_id: str, violation_type: str, action: str, detail: str = None, db_path=None):
    """
    Record one escalation decision.

    Args:
        session_id: Interview session identifier
        violation_type: Violation type or strike reason
        action: Decision taken ("warning", "strike", "debounced", "terminated")
        detail: Human readable message shown to the candidate
    """
    def _log(con):
        con.execute(
            "INSERT INTO violations (session_id, violation_type, action, detail, ts) VALUES (?, ?, ?, ?, ?)",
            (session_id, violation_type, action, detail, now_iso()),
        )

    try:
        _execute_with_retry(_log, db_path)
    except sqlite3.Error as e:
        print(f"[DB] Failed to log violation for {session_id} ({violation_type}): {e}")


def get_status(db_path=None) -> List[dict]:
    def _get(con):
        return con.execute(
            "SELECT session_id, domain, level, strikes, status, started_at, last_update "
            "FROM sessions ORDER BY id DESC"
        ).fetchall()

    try:
        rows = _execute_with_retry(_get, db_path)
    except sqlite3.Error as e:
        print(f"[DB] Failed to read sessions: {e}")
        return []
    return [
        {'session_id': r[0], 'domain': r[1], 'level': r[2], 'strikes': r[3],
         'status': r[4], 'started_at': r[5], 'last_update': r[6]}
        for r in rows
    ]


def recent_violations(session_id: str = None, limit: int = 50, db_path=None) -> List[dict]:
    def _get(con):
        if session_id:
            return con.execute(
                "SELECT session_id, violation_type, action, detail, ts FROM violations "
                "WHERE session_id=? ORDER BY id DESC LIMIT ?",
                (session_id, limit),
            ).fetchall()
        return con.execute(
            "SELECT session_id, violation_type, action, detail, ts FROM violations ORDER BY id DESC LIMIT ?",
            (limit,),
        ).fetchall()

    try:
        rows = _execute_with_retry(_get, db_path)
    except sqlite3.Error as e:
        print(f"[DB] Failed to read violations: {e}")
        return []
    return [
        {'session_id': r[0], 'type': r[1], 'action': r[2], 'detail': r[3], 'ts': r[4]}
        for r in rows
    ]


class SessionLog:
    """
    Audit trail for one interview session, bound to a database path.

    Writes are queued and applied in order by one writer thread, so a locked
    database never stalls the caller (the escalation engine runs on the
    event loop). close() queues the final status and stops the writer;
    join() waits for everything queued to reach the database.
    """

    def __init__(self, session_id: str, db_path: str = None):
        self.session_id = session_id
        self.db_path = db_path
        init_db(db_path)
        self._writes = queue.Queue()
        self._writer = threading.Thread(target=self._drain, name=f"audit-{session_id}", daemon=True)
        self._writer.start()

    def start(self, domain: str = None, level: str = None):
        self._writes.put((start_session, (self.session_id, domain, level, self.db_path)))

    def violation(self, violation_type: str, action: str, detail: str = None):
        self._writes.put((log_violation, (self.session_id, violation_type, action, detail, self.db_path)))

    def strikes(self, count: int):
        self._writes.put((set_strikes, (self.session_id, count, self.db_path)))

    def close(self, status: str):
        self._writes.put((end_session, (self.session_id, status, self.db_path)))
        self._writes.put(None)

    def join(self, timeout: float = None):
        self._writer.join(timeout)

    def _drain(self):
        while True:
            item = self._writes.get()
            if item is None:
                return
            func, args = item
            try:
                func(*args)
            except Exception as e:
                print(f"[DB] Audit write failed for {self.session_id}: {e}")
