import json
import sqlite3
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from cgwise.components.calculator import CalculationResult, CalculatorDefinition
from cgwise.components.calculators import CalculatorRecord
from cgwise.components.history import GuestCalculation, SavedCalculation
from cgwise.domain.entities import (
    AccessRequest,
    EmailRecord,
    GuestSession,
    LoginAttempt,
    SystemLog,
    User,
)


# Helper to convert sqlite rows to dicts
def dict_factory(cursor: sqlite3.Cursor, row: Any) -> dict[str, Any]:
    d = {}
    for idx, col in enumerate(cursor.description):
        d[col[0]] = row[idx]
    return d


def to_iso(dt: datetime) -> str:
    """UTC ISO-8601 text; naive datetimes are taken to be UTC."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC).isoformat()


def parse_dt(s: str | None) -> datetime | None:
    return datetime.fromisoformat(s) if s else None


class _SQLiteRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = dict_factory
        conn.execute("PRAGMA foreign_keys = ON;")
        return conn

    def _write(self, sql: str, params: tuple[Any, ...]) -> int:
        """Run one statement in its own transaction. Returns rowcount."""
        conn = self._get_conn()
        try:
            cursor = conn.execute(sql, params)
            conn.commit()
            return cursor.rowcount
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _fetch_one(self, sql: str, params: tuple[Any, ...] = ()) -> dict[str, Any] | None:
        conn = self._get_conn()
        try:
            row: dict[str, Any] | None = conn.execute(sql, params).fetchone()
            return row
        finally:
            conn.close()

    def _fetch_all(self, sql: str, params: tuple[Any, ...] = ()) -> list[dict[str, Any]]:
        conn = self._get_conn()
        try:
            return list(conn.execute(sql, params).fetchall())
        finally:
            conn.close()


# --- Users & Access ---


class SQLiteUserRepo(_SQLiteRepo):
    def save(self, user: User) -> User:
        self._write(
            """
            INSERT INTO users (
                id, email, name, password_hash, role, status,
                unit_preference, theme_preference, colorblind_mode, font_size,
                company, position, country, created_at, last_login
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                email=excluded.email,
                name=excluded.name,
                password_hash=excluded.password_hash,
                role=excluded.role,
                status=excluded.status,
                unit_preference=excluded.unit_preference,
                theme_preference=excluded.theme_preference,
                colorblind_mode=excluded.colorblind_mode,
                font_size=excluded.font_size,
                company=excluded.company,
                position=excluded.position,
                country=excluded.country,
                last_login=excluded.last_login
            """,
            (
                str(user.id),
                user.email.lower(),
                user.name,
                user.password_hash,
                user.role,
                user.status,
                user.unit_preference,
                user.theme_preference,
                user.colorblind_mode,
                user.font_size,
                user.company,
                user.position,
                user.country,
                to_iso(user.created_at),
                to_iso(user.last_login) if user.last_login else None,
            ),
        )
        return user

    def get_by_id(self, user_id: UUID) -> User | None:
        row = self._fetch_one("SELECT * FROM users WHERE id = ?", (str(user_id),))
        return self._map_row(row) if row else None

    def get_by_email(self, email: str) -> User | None:
        row = self._fetch_one("SELECT * FROM users WHERE email = ?", (email.lower(),))
        return self._map_row(row) if row else None

    def list_all(self) -> list[User]:
        rows = self._fetch_all("SELECT * FROM users ORDER BY created_at DESC")
        return [self._map_row(r) for r in rows]

    def _map_row(self, row: dict[str, Any]) -> User:
        return User(
            id=UUID(row["id"]),
            email=row["email"],
            name=row["name"],
            password_hash=row["password_hash"],
            role=row["role"],
            status=row["status"],
            unit_preference=row["unit_preference"],
            theme_preference=row["theme_preference"],
            colorblind_mode=row["colorblind_mode"],
            font_size=row["font_size"],
            company=row["company"],
            position=row["position"],
            country=row["country"],
            created_at=parse_dt(row["created_at"]),
            last_login=parse_dt(row["last_login"]),
        )


class SQLiteAccessRequestRepo(_SQLiteRepo):
    def save(self, request: AccessRequest) -> AccessRequest:
        self._write(
            """
            INSERT INTO access_requests (
                id, email, name, password_hash, company, position, country,
                preferred_units, role, status, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                name=excluded.name,
                password_hash=excluded.password_hash,
                company=excluded.company,
                position=excluded.position,
                country=excluded.country,
                preferred_units=excluded.preferred_units,
                role=excluded.role,
                status=excluded.status
            """,
            (
                str(request.id),
                request.email.lower(),
                request.name,
                request.password_hash,
                request.company,
                request.position,
                request.country,
                request.preferred_units,
                request.role,
                request.status,
                to_iso(request.created_at),
            ),
        )
        return request

    def get_by_id(self, request_id: UUID) -> AccessRequest | None:
        row = self._fetch_one("SELECT * FROM access_requests WHERE id = ?", (str(request_id),))
        return self._map_row(row) if row else None

    def get_by_email(self, email: str) -> AccessRequest | None:
        row = self._fetch_one(
            "SELECT * FROM access_requests WHERE email = ?", (email.lower(),)
        )
        return self._map_row(row) if row else None

    def delete(self, request_id: UUID) -> None:
        self._write("DELETE FROM access_requests WHERE id = ?", (str(request_id),))

    def list_all(self) -> list[AccessRequest]:
        rows = self._fetch_all("SELECT * FROM access_requests ORDER BY created_at DESC")
        return [self._map_row(r) for r in rows]

    def _map_row(self, row: dict[str, Any]) -> AccessRequest:
        return AccessRequest(
            id=UUID(row["id"]),
            email=row["email"],
            name=row["name"],
            password_hash=row["password_hash"],
            company=row["company"],
            position=row["position"],
            country=row["country"],
            preferred_units=row["preferred_units"],
            role=row["role"],
            status=row["status"],
            created_at=parse_dt(row["created_at"]),
        )


class SQLiteLoginAttemptRepo(_SQLiteRepo):
    def get(self, email: str) -> LoginAttempt | None:
        row = self._fetch_one("SELECT * FROM login_attempts WHERE email = ?", (email.lower(),))
        if not row:
            return None
        return LoginAttempt(
            email=row["email"],
            attempts=row["attempts"],
            last_attempt=parse_dt(row["last_attempt"]),
            locked_until=parse_dt(row["locked_until"]),
        )

    def save(self, attempt: LoginAttempt) -> LoginAttempt:
        self._write(
            """
            INSERT INTO login_attempts (email, attempts, last_attempt, locked_until)
            VALUES (?, ?, ?, ?)
            ON CONFLICT(email) DO UPDATE SET
                attempts=excluded.attempts,
                last_attempt=excluded.last_attempt,
                locked_until=excluded.locked_until
            """,
            (
                attempt.email.lower(),
                attempt.attempts,
                to_iso(attempt.last_attempt),
                to_iso(attempt.locked_until) if attempt.locked_until else None,
            ),
        )
        return attempt

    def delete(self, email: str) -> None:
        self._write("DELETE FROM login_attempts WHERE email = ?", (email.lower(),))


# --- Settings & Audit ---


class SQLiteSettingsRepo(_SQLiteRepo):
    def get(self, key: str) -> str | None:
        row = self._fetch_one("SELECT value FROM settings WHERE key = ?", (key,))
        return row["value"] if row else None

    def get_all(self) -> dict[str, str]:
        rows = self._fetch_all("SELECT key, value FROM settings")
        return {r["key"]: r["value"] for r in rows}

    def set(self, key: str, value: str, updated_at: datetime) -> None:
        self._write(
            """
            INSERT INTO settings (key, value, updated_at) VALUES (?, ?, ?)
            ON CONFLICT(key) DO UPDATE SET
                value=excluded.value,
                updated_at=excluded.updated_at
            """,
            (key, value, to_iso(updated_at)),
        )


class SQLiteSystemLogRepo(_SQLiteRepo):
    def save(self, entry: SystemLog) -> SystemLog:
        self._write(
            "INSERT INTO system_logs (id, type, message, timestamp, user) VALUES (?, ?, ?, ?, ?)",
            (str(entry.id), entry.type, entry.message, to_iso(entry.timestamp), entry.user),
        )
        return entry

    def list_recent(self, limit: int) -> list[SystemLog]:
        rows = self._fetch_all(
            "SELECT * FROM system_logs ORDER BY timestamp DESC LIMIT ?", (limit,)
        )
        return [
            SystemLog(
                id=UUID(r["id"]),
                type=r["type"],
                message=r["message"],
                timestamp=parse_dt(r["timestamp"]),
                user=r["user"],
            )
            for r in rows
        ]


class SQLiteEmailRecordRepo(_SQLiteRepo):
    def save(self, record: EmailRecord) -> EmailRecord:
        self._write(
            """
            INSERT INTO email_records
            (id, from_email, to_email, subject, body, type, sent_at, status)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                str(record.id),
                record.from_email,
                record.to_email,
                record.subject,
                record.body,
                record.type,
                to_iso(record.sent_at),
                record.status,
            ),
        )
        return record

    def list_recent(self, limit: int) -> list[EmailRecord]:
        rows = self._fetch_all(
            "SELECT * FROM email_records ORDER BY sent_at DESC LIMIT ?", (limit,)
        )
        return [
            EmailRecord(
                id=UUID(r["id"]),
                from_email=r["from_email"],
                to_email=r["to_email"],
                subject=r["subject"],
                body=r["body"],
                type=r["type"],
                sent_at=parse_dt(r["sent_at"]),
                status=r["status"],
            )
            for r in rows
        ]


# --- Calculators ---


class SQLiteCalculatorRepo(_SQLiteRepo):
    def get(self, calculator_id: str) -> CalculatorRecord | None:
        row = self._fetch_one("SELECT * FROM calculators WHERE id = ?", (calculator_id,))
        return self._map_row(row) if row else None

    def list_all(self) -> list[CalculatorRecord]:
        rows = self._fetch_all(
            "SELECT * FROM calculators ORDER BY usage_count DESC, position ASC"
        )
        return [self._map_row(r) for r in rows]

    def save(self, record: CalculatorRecord) -> CalculatorRecord:
        self._write(
            """
            INSERT INTO calculators (
                id, definition_json, enabled, usage_count, position, created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                definition_json=excluded.definition_json,
                enabled=excluded.enabled,
                usage_count=excluded.usage_count,
                position=excluded.position,
                updated_at=excluded.updated_at
            """,
            (
                record.id,
                record.definition.model_dump_json(),
                1 if record.enabled else 0,
                record.usage_count,
                record.position,
                to_iso(record.created_at),
                to_iso(record.updated_at),
            ),
        )
        return record

    def delete(self, calculator_id: str) -> bool:
        return self._write("DELETE FROM calculators WHERE id = ?", (calculator_id,)) > 0

    def delete_all(self) -> None:
        self._write("DELETE FROM calculators", ())

    def increment_usage(self, calculator_id: str) -> bool:
        updated = self._write(
            "UPDATE calculators SET usage_count = usage_count + 1 WHERE id = ?",
            (calculator_id,),
        )
        return updated > 0

    def count(self) -> int:
        row = self._fetch_one("SELECT COUNT(*) AS n FROM calculators")
        return int(row["n"]) if row else 0

    def _map_row(self, row: dict[str, Any]) -> CalculatorRecord:
        return CalculatorRecord(
            definition=CalculatorDefinition.model_validate_json(row["definition_json"]),
            enabled=bool(row["enabled"]),
            usage_count=row["usage_count"],
            position=row["position"],
            created_at=parse_dt(row["created_at"]),
            updated_at=parse_dt(row["updated_at"]),
        )


# --- History ---


class SQLiteSavedCalculationRepo(_SQLiteRepo):
    def save(self, calculation: SavedCalculation) -> SavedCalculation:
        self._write(
            """
            INSERT INTO saved_calculations (
                id, user_id, calculator_id, calculator_name, calculator_short_name,
                inputs_json, result_json, unit_system, notes, saved_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                notes=excluded.notes
            """,
            (
                str(calculation.id),
                str(calculation.user_id),
                calculation.calculator_id,
                calculation.calculator_name,
                calculation.calculator_short_name,
                json.dumps(calculation.inputs),
                calculation.result.model_dump_json(),
                calculation.unit_system,
                calculation.notes,
                to_iso(calculation.saved_at),
            ),
        )
        return calculation

    def get(self, calculation_id: UUID) -> SavedCalculation | None:
        row = self._fetch_one(
            "SELECT * FROM saved_calculations WHERE id = ?", (str(calculation_id),)
        )
        return self._map_row(row) if row else None

    def list_by_user(
        self,
        user_id: UUID,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[SavedCalculation]:
        sql = "SELECT * FROM saved_calculations WHERE user_id = ?"
        params: list[Any] = [str(user_id)]
        if start is not None:
            sql += " AND saved_at >= ?"
            params.append(to_iso(start))
        if end is not None:
            sql += " AND saved_at <= ?"
            params.append(to_iso(end))
        sql += " ORDER BY saved_at DESC"
        return [self._map_row(r) for r in self._fetch_all(sql, tuple(params))]

    def delete(self, calculation_id: UUID) -> None:
        self._write("DELETE FROM saved_calculations WHERE id = ?", (str(calculation_id),))

    def delete_by_user(self, user_id: UUID) -> int:
        return self._write("DELETE FROM saved_calculations WHERE user_id = ?", (str(user_id),))

    def _map_row(self, row: dict[str, Any]) -> SavedCalculation:
        return SavedCalculation(
            id=UUID(row["id"]),
            user_id=UUID(row["user_id"]),
            calculator_id=row["calculator_id"],
            calculator_name=row["calculator_name"],
            calculator_short_name=row["calculator_short_name"],
            inputs=json.loads(row["inputs_json"]),
            result=CalculationResult.model_validate_json(row["result_json"]),
            unit_system=row["unit_system"],
            notes=row["notes"],
            saved_at=parse_dt(row["saved_at"]),
        )


class SQLiteGuestRepo(_SQLiteRepo):
    """Guest sessions and their capped calculation history."""

    def save_session(self, session: GuestSession) -> GuestSession:
        self._write(
            """
            INSERT INTO guest_sessions (
                id, calculation_count, max_calculations, created_at, last_activity
            ) VALUES (?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                calculation_count=excluded.calculation_count,
                max_calculations=excluded.max_calculations,
                last_activity=excluded.last_activity
            """,
            (
                session.id,
                session.calculation_count,
                session.max_calculations,
                to_iso(session.created_at),
                to_iso(session.last_activity),
            ),
        )
        return session

    def get(self, session_id: str) -> GuestSession | None:
        row = self._fetch_one("SELECT * FROM guest_sessions WHERE id = ?", (session_id,))
        if not row:
            return None
        return GuestSession(
            id=row["id"],
            calculation_count=row["calculation_count"],
            max_calculations=row["max_calculations"],
            created_at=parse_dt(row["created_at"]),
            last_activity=parse_dt(row["last_activity"]),
        )

    def delete(self, session_id: str) -> None:
        conn = self._get_conn()
        try:
            conn.execute("DELETE FROM guest_calculations WHERE session_id = ?", (session_id,))
            conn.execute("DELETE FROM guest_sessions WHERE id = ?", (session_id,))
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def delete_idle_before(self, cutoff: datetime) -> int:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                DELETE FROM guest_calculations WHERE session_id IN (
                    SELECT id FROM guest_sessions WHERE last_activity < ?
                )
                """,
                (to_iso(cutoff),),
            )
            cursor = conn.execute(
                "DELETE FROM guest_sessions WHERE last_activity < ?", (to_iso(cutoff),)
            )
            conn.commit()
            return cursor.rowcount
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def save_calculation(self, calculation: GuestCalculation) -> GuestCalculation:
        self._write(
            """
            INSERT INTO guest_calculations (
                id, session_id, calculator_id, calculator_name, calculator_short_name,
                inputs_json, result_json, unit_system, saved_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                str(calculation.id),
                calculation.session_id,
                calculation.calculator_id,
                calculation.calculator_name,
                calculation.calculator_short_name,
                json.dumps(calculation.inputs),
                calculation.result.model_dump_json(),
                calculation.unit_system,
                to_iso(calculation.saved_at),
            ),
        )
        return calculation

    def list_calculations(self, session_id: str) -> list[GuestCalculation]:
        rows = self._fetch_all(
            "SELECT * FROM guest_calculations WHERE session_id = ? ORDER BY saved_at DESC",
            (session_id,),
        )
        return [
            GuestCalculation(
                id=UUID(r["id"]),
                session_id=r["session_id"],
                calculator_id=r["calculator_id"],
                calculator_name=r["calculator_name"],
                calculator_short_name=r["calculator_short_name"],
                inputs=json.loads(r["inputs_json"]),
                result=CalculationResult.model_validate_json(r["result_json"]),
                unit_system=r["unit_system"],
                saved_at=parse_dt(r["saved_at"]),
            )
            for r in rows
        ]

    def count_calculations(self, session_id: str) -> int:
        row = self._fetch_one(
            "SELECT COUNT(*) AS n FROM guest_calculations WHERE session_id = ?", (session_id,)
        )
        return int(row["n"]) if row else 0

    def delete_calculations(self, session_id: str) -> int:
        return self._write("DELETE FROM guest_calculations WHERE session_id = ?", (session_id,))
