"""SQLite implementation of the trip, user, subscription and reconciliation stores."""

from __future__ import annotations

import json
import sqlite3
import threading
import uuid
from collections.abc import Iterator
from contextlib import closing, contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from getback.domain.enums import Direction, OrphanKind, TripErrorCode, TripRelation
from getback.domain.models import CreateTripQuery, SearchCriteria, Subscription, Trip, User, user_list_name
from getback.infrastructure.logging import get_logger
from getback.persistence.models import OrphanRecord
from getback.shared.result import Left, Result, Right

log = get_logger("sqlite-store")

_TRIP_TABLES = {
    Direction.FROM_CAMPUS: "trips_from_campus",
    Direction.FROM_AIRPORT: "trips_from_airport",
}
_TRIP_COLUMNS = (
    "trip_id, owner_email, max_other_members, trip_date, trip_hour, trip_quarter_hour, "
    "trip_name, college, airport, member_emails, created_at"
)

# A single statement: the capacity, owner and duplicate checks are evaluated
# under the same write lock that performs the append.
_JOIN_SQL = """
UPDATE {table}
SET member_emails = json_insert(member_emails, '$[#]', ?)
WHERE trip_id = ?
  AND json_array_length(member_emails) < max_other_members
  AND owner_email != ?
  AND NOT EXISTS (
      SELECT 1 FROM json_each({table}.member_emails) WHERE json_each.value = ?
  )
"""


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _trip_schema(table: str) -> str:
    return f"""
    CREATE TABLE IF NOT EXISTS {table} (
        trip_id TEXT PRIMARY KEY,
        owner_email TEXT NOT NULL,
        max_other_members INTEGER NOT NULL CHECK (max_other_members >= 0),
        trip_date TEXT NOT NULL,
        trip_hour INTEGER NOT NULL,
        trip_quarter_hour INTEGER NOT NULL,
        trip_name TEXT NOT NULL,
        college TEXT NOT NULL,
        airport TEXT NOT NULL,
        member_emails TEXT NOT NULL DEFAULT '[]',
        created_at TEXT NOT NULL
    );
    CREATE INDEX IF NOT EXISTS idx_{table}_search
        ON {table}(trip_date, trip_hour, college, airport);
    """


class SQLiteDatabase:
    """Connection factory and schema owner for one database file."""

    def __init__(self, db_path: str | Path) -> None:
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._schema_lock = threading.Lock()
        self._init_schema()

    def connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path, timeout=10.0, isolation_level=None)
        conn.execute("PRAGMA journal_mode=WAL;")
        conn.execute("PRAGMA foreign_keys=ON;")
        return conn

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """Write transaction. The write lock is taken at BEGIN so concurrent
        writers queue on the busy timeout instead of failing on upgrade."""
        with closing(self.connect()) as conn:
            conn.execute("BEGIN IMMEDIATE")
            try:
                yield conn
            except BaseException:
                conn.execute("ROLLBACK")
                raise
            conn.execute("COMMIT")

    def _init_schema(self) -> None:
        script = "".join(_trip_schema(table) for table in _TRIP_TABLES.values())
        script += """
        CREATE TABLE IF NOT EXISTS users (
            email TEXT PRIMARY KEY,
            created_at TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS user_trips (
            email TEXT NOT NULL,
            relation TEXT NOT NULL,
            direction TEXT NOT NULL,
            trip_id TEXT NOT NULL,
            created_at TEXT NOT NULL,
            UNIQUE (email, relation, direction, trip_id),
            FOREIGN KEY(email) REFERENCES users(email)
        );

        CREATE TABLE IF NOT EXISTS subscriptions (
            subscription_id INTEGER PRIMARY KEY AUTOINCREMENT,
            email TEXT NOT NULL,
            direction TEXT NOT NULL,
            trip_date TEXT NOT NULL,
            trip_hour INTEGER NOT NULL,
            trip_quarter_hour INTEGER NOT NULL,
            college TEXT NOT NULL,
            airport TEXT NOT NULL,
            created_at TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS orphans (
            orphan_id INTEGER PRIMARY KEY AUTOINCREMENT,
            kind TEXT NOT NULL,
            direction TEXT NOT NULL,
            trip_id TEXT NOT NULL,
            email TEXT NOT NULL,
            reason TEXT NOT NULL,
            created_at TEXT NOT NULL,
            resolved INTEGER NOT NULL DEFAULT 0
        );

        CREATE INDEX IF NOT EXISTS idx_user_trips_email ON user_trips(email);
        CREATE INDEX IF NOT EXISTS idx_subscriptions_match
            ON subscriptions(direction, trip_date, trip_hour, college, airport);
        """
        with self._schema_lock, closing(self.connect()) as conn:
            conn.executescript(script)


def _row_to_trip(row: tuple[Any, ...]) -> Trip:
    return Trip(
        trip_id=row[0],
        owner_email=row[1],
        max_other_members=row[2],
        trip_date=row[3],
        trip_hour=row[4],
        trip_quarter_hour=row[5],
        trip_name=row[6],
        college=row[7],
        airport=row[8],
        member_emails=json.loads(row[9] or "[]"),
        created_at=row[10],
    )


class SQLiteTripStore:
    backend = "sqlite"

    def __init__(self, db: SQLiteDatabase) -> None:
        self._db = db

    def create_trip(self, query: CreateTripQuery, direction: Direction) -> Result[TripErrorCode, Trip]:
        trip = Trip(
            trip_id=uuid.uuid4().hex,
            owner_email=query.owner_email,
            max_other_members=query.max_other_members,
            trip_date=query.trip_date,
            trip_hour=query.trip_hour,
            trip_quarter_hour=query.trip_quarter_hour,
            trip_name=query.trip_name,
            college=query.college,
            airport=query.airport,
            member_emails=[],
            created_at=_now(),
        )
        table = _TRIP_TABLES[direction]
        try:
            with self._db.transaction() as conn:
                conn.execute(
                    f"INSERT INTO {table} ({_TRIP_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                    (
                        trip.trip_id,
                        trip.owner_email,
                        trip.max_other_members,
                        trip.trip_date.isoformat(),
                        trip.trip_hour,
                        trip.trip_quarter_hour,
                        trip.trip_name,
                        trip.college,
                        trip.airport,
                        "[]",
                        trip.created_at,
                    ),
                )
        except sqlite3.Error as exc:
            log.error("create_trip_failed", f"could not insert trip into {table}", exc=exc)
            return Left(TripErrorCode.DATABASE_ERROR)
        return Right(trip)

    def get_trip(self, trip_id: str, direction: Direction) -> Result[TripErrorCode, Trip]:
        table = _TRIP_TABLES[direction]
        try:
            with closing(self._db.connect()) as conn:
                row = conn.execute(
                    f"SELECT {_TRIP_COLUMNS} FROM {table} WHERE trip_id = ?",
                    (trip_id,),
                ).fetchone()
        except sqlite3.Error as exc:
            log.error("get_trip_failed", f"could not read trip {trip_id}", exc=exc)
            return Left(TripErrorCode.DATABASE_ERROR)
        if row is None:
            return Left(TripErrorCode.NOT_FOUND)
        return Right(_row_to_trip(row))

    def add_user_to_trip(self, trip_id: str, email: str, direction: Direction) -> Result[TripErrorCode, bool]:
        table = _TRIP_TABLES[direction]
        try:
            with self._db.transaction() as conn:
                cursor = conn.execute(_JOIN_SQL.format(table=table), (email, trip_id, email, email))
                if cursor.rowcount == 1:
                    return Right(True)
                # Nothing changed; the re-read sits in the same write transaction
                # so it sees exactly the state the conditional update rejected.
                row = conn.execute(
                    f"SELECT owner_email, max_other_members, member_emails FROM {table} WHERE trip_id = ?",
                    (trip_id,),
                ).fetchone()
        except sqlite3.Error as exc:
            log.error("add_user_to_trip_failed", f"could not join trip {trip_id}", exc=exc)
            return Left(TripErrorCode.DATABASE_ERROR)

        if row is None:
            return Left(TripErrorCode.NOT_FOUND)
        owner_email, max_other_members, raw_members = row
        members = json.loads(raw_members or "[]")
        if email == owner_email or email in members:
            return Left(TripErrorCode.ALREADY_MEMBER)
        if len(members) >= max_other_members:
            return Left(TripErrorCode.TRIP_FULL)
        return Right(False)

    def delete_trip(self, trip_id: str, requester_email: str, direction: Direction) -> Result[TripErrorCode, bool]:
        table = _TRIP_TABLES[direction]
        try:
            with self._db.transaction() as conn:
                cursor = conn.execute(
                    f"DELETE FROM {table} WHERE trip_id = ? AND owner_email = ?",
                    (trip_id, requester_email),
                )
                deleted = cursor.rowcount == 1
        except sqlite3.Error as exc:
            log.error("delete_trip_failed", f"could not delete trip {trip_id}", exc=exc)
            return Left(TripErrorCode.DATABASE_ERROR)
        return Right(deleted)

    def search_trips(self, criteria: SearchCriteria, direction: Direction) -> Result[TripErrorCode, list[Trip]]:
        table = _TRIP_TABLES[direction]
        try:
            with closing(self._db.connect()) as conn:
                rows = conn.execute(
                    f"""
                    SELECT {_TRIP_COLUMNS}
                    FROM {table}
                    WHERE trip_date = ? AND trip_hour = ? AND college = ? AND airport = ?
                    ORDER BY trip_quarter_hour ASC, created_at ASC, rowid ASC
                    """,
                    (criteria.trip_date.isoformat(), criteria.trip_hour, criteria.college, criteria.airport),
                ).fetchall()
        except sqlite3.Error as exc:
            log.error("search_trips_failed", f"could not search {table}", exc=exc)
            return Left(TripErrorCode.DATABASE_ERROR)
        return Right([_row_to_trip(row) for row in rows])


class SQLiteUserStore:
    backend = "sqlite"

    def __init__(self, db: SQLiteDatabase) -> None:
        self._db = db

    def _append(
        self, email: str, trip_id: str, relation: TripRelation, direction: Direction
    ) -> Result[TripErrorCode, bool]:
        now = _now()
        try:
            with self._db.transaction() as conn:
                conn.execute("INSERT OR IGNORE INTO users (email, created_at) VALUES (?, ?)", (email, now))
                conn.execute(
                    """
                    INSERT OR IGNORE INTO user_trips (email, relation, direction, trip_id, created_at)
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    (email, relation.value, direction.value, trip_id, now),
                )
        except sqlite3.Error as exc:
            log.error(
                "user_append_failed",
                f"could not append {relation.value} trip {trip_id} to user",
                exc=exc,
            )
            return Left(TripErrorCode.DATABASE_ERROR)
        return Right(True)

    def add_owned_trip(self, email: str, trip_id: str, direction: Direction) -> Result[TripErrorCode, bool]:
        return self._append(email, trip_id, TripRelation.OWNED, direction)

    def add_member_trip(self, email: str, trip_id: str, direction: Direction) -> Result[TripErrorCode, bool]:
        return self._append(email, trip_id, TripRelation.MEMBER, direction)

    def get_user(self, email: str) -> User | None:
        with closing(self._db.connect()) as conn:
            exists = conn.execute("SELECT 1 FROM users WHERE email = ?", (email,)).fetchone()
            if exists is None:
                return None
            rows = conn.execute(
                """
                SELECT relation, direction, trip_id
                FROM user_trips
                WHERE email = ?
                ORDER BY created_at ASC, rowid ASC
                """,
                (email,),
            ).fetchall()

        lists: dict[str, list[str]] = {}
        for relation, direction, trip_id in rows:
            name = user_list_name(TripRelation(relation), Direction(direction))
            lists.setdefault(name, []).append(trip_id)
        return User(email=email, **lists)


class SQLiteSubscriptionStore:
    backend = "sqlite"

    def __init__(self, db: SQLiteDatabase) -> None:
        self._db = db

    def add_subscription(self, subscription: Subscription) -> Result[TripErrorCode, Subscription]:
        try:
            with self._db.transaction() as conn:
                conn.execute(
                    """
                    INSERT INTO subscriptions (
                        email, direction, trip_date, trip_hour, trip_quarter_hour,
                        college, airport, created_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        subscription.email,
                        subscription.direction.value,
                        subscription.trip_date.isoformat(),
                        subscription.trip_hour,
                        subscription.trip_quarter_hour,
                        subscription.college,
                        subscription.airport,
                        _now(),
                    ),
                )
        except sqlite3.Error as exc:
            log.error("add_subscription_failed", "could not store subscription", exc=exc)
            return Left(TripErrorCode.DATABASE_ERROR)
        return Right(subscription)

    def find_subscribers(self, criteria: SearchCriteria, direction: Direction) -> Result[TripErrorCode, list[str]]:
        try:
            with closing(self._db.connect()) as conn:
                rows = conn.execute(
                    """
                    SELECT DISTINCT email
                    FROM subscriptions
                    WHERE direction = ? AND trip_date = ? AND trip_hour = ?
                      AND college = ? AND airport = ?
                    ORDER BY email ASC
                    """,
                    (
                        direction.value,
                        criteria.trip_date.isoformat(),
                        criteria.trip_hour,
                        criteria.college,
                        criteria.airport,
                    ),
                ).fetchall()
        except sqlite3.Error as exc:
            log.error("find_subscribers_failed", "could not query subscriptions", exc=exc)
            return Left(TripErrorCode.DATABASE_ERROR)
        return Right([row[0] for row in rows])


def _row_to_orphan(row: tuple[Any, ...]) -> OrphanRecord:
    return OrphanRecord(
        orphan_id=row[0],
        kind=OrphanKind(row[1]),
        direction=Direction(row[2]),
        trip_id=row[3],
        email=row[4],
        reason=row[5],
        created_at=row[6],
        resolved=bool(row[7]),
    )


_ORPHAN_COLUMNS = "orphan_id, kind, direction, trip_id, email, reason, created_at, resolved"


class SQLiteReconciliationLog:
    backend = "sqlite"

    def __init__(self, db: SQLiteDatabase) -> None:
        self._db = db

    def record_orphan(
        self,
        kind: OrphanKind,
        direction: Direction,
        trip_id: str,
        email: str,
        reason: str = "",
    ) -> OrphanRecord | None:
        created_at = _now()
        try:
            with self._db.transaction() as conn:
                cursor = conn.execute(
                    """
                    INSERT INTO orphans (kind, direction, trip_id, email, reason, created_at)
                    VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    (kind.value, direction.value, trip_id, email, reason, created_at),
                )
                orphan_id = cursor.lastrowid
        except sqlite3.Error as exc:
            log.error(
                "record_orphan_failed",
                f"could not record {kind.value} orphan for trip {trip_id}",
                exc=exc,
            )
            return None
        return OrphanRecord(
            orphan_id=orphan_id,
            kind=kind,
            direction=direction,
            trip_id=trip_id,
            email=email,
            reason=reason,
            created_at=created_at,
        )

    def get_orphan(self, orphan_id: int) -> OrphanRecord | None:
        with closing(self._db.connect()) as conn:
            row = conn.execute(
                f"SELECT {_ORPHAN_COLUMNS} FROM orphans WHERE orphan_id = ?",
                (orphan_id,),
            ).fetchone()
        return _row_to_orphan(row) if row is not None else None

    def list_orphans(self, include_resolved: bool = False) -> list[OrphanRecord]:
        where = "" if include_resolved else "WHERE resolved = 0"
        with closing(self._db.connect()) as conn:
            rows = conn.execute(
                f"SELECT {_ORPHAN_COLUMNS} FROM orphans {where} ORDER BY orphan_id ASC"
            ).fetchall()
        return [_row_to_orphan(row) for row in rows]

    def mark_resolved(self, orphan_id: int) -> bool:
        with self._db.transaction() as conn:
            cursor = conn.execute(
                "UPDATE orphans SET resolved = 1 WHERE orphan_id = ? AND resolved = 0",
                (orphan_id,),
            )
            resolved = cursor.rowcount == 1
        return resolved

    def unresolved_count(self) -> int:
        with closing(self._db.connect()) as conn:
            row = conn.execute("SELECT COUNT(*) FROM orphans WHERE resolved = 0").fetchone()
        return int(row[0])


__all__ = [
    "SQLiteDatabase",
    "SQLiteReconciliationLog",
    "SQLiteSubscriptionStore",
    "SQLiteTripStore",
    "SQLiteUserStore",
]
