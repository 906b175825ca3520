"""
Local durable store for the tracking client.

Three tables kept in a SQLite file between runs:
    profile   - singleton row holding the onboarding profile
    sessions  - finished sessions keyed by id, indexed by start time
    settings  - singleton row holding tracking preferences
Each row stores the JSON document of the record.
"""
import logging
import os
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import create_engine, MetaData, Table, Column, String, DateTime, JSON, select, delete, func
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool

from posturepal.schemas.profile import ProfileResponse, SettingsResponse, SettingsUpdate
from posturepal.services.session_tracker import TrackedSession
from posturepal.services.stats_calculator import StatsCalculator

logger = logging.getLogger(__name__)

SINGLETON_KEY = "current"

metadata = MetaData()

profile_table = Table(
    "profile",
    metadata,
    Column("key", String(20), primary_key=True),
    Column("data", JSON, nullable=False),
)

sessions_table = Table(
    "sessions",
    metadata,
    Column("id", String(64), primary_key=True),
    Column("start_time", DateTime, nullable=False, index=True),  # naive UTC
    Column("data", JSON, nullable=False),
)

settings_table = Table(
    "settings",
    metadata,
    Column("key", String(20), primary_key=True),
    Column("data", JSON, nullable=False),
)


class LocalStoreError(RuntimeError):
    """The local database could not be read or written."""


def _naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class LocalStore:
    """
    SQLite-backed store for profile, settings and finished sessions.

    Args:
        path: Database file; parent directories are created on demand.
              Pass ":memory:" for a throwaway store.
    """

    def __init__(self, path: str):
        self.path = path
        if path == ":memory:":
            # One shared connection, so every thread sees the same database
            self.engine = create_engine(
                "sqlite://",
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        else:
            directory = os.path.dirname(os.path.abspath(path))
            os.makedirs(directory, exist_ok=True)
            self.engine = create_engine(f"sqlite:///{path}")
        try:
            metadata.create_all(self.engine)
        except SQLAlchemyError as e:
            raise LocalStoreError(f"Cannot open local store at {path}: {e}") from e

    def close(self) -> None:
        self.engine.dispose()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _upsert(self, table: Table, key_column: str, values: dict) -> None:
        stmt = sqlite_insert(table).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=[key_column],
            set_={name: value for name, value in values.items() if name != key_column},
        )
        try:
            with self.engine.begin() as conn:
                conn.execute(stmt)
        except SQLAlchemyError as e:
            raise LocalStoreError(f"Write to {table.name} failed: {e}") from e

    def _fetch_data(self, table: Table, key: str) -> Optional[dict]:
        try:
            with self.engine.connect() as conn:
                row = conn.execute(select(table.c.data).where(table.c.key == key)).first()
        except SQLAlchemyError as e:
            raise LocalStoreError(f"Read from {table.name} failed: {e}") from e
        return row.data if row else None

    def _delete_all(self, table: Table) -> int:
        try:
            with self.engine.begin() as conn:
                return conn.execute(delete(table)).rowcount
        except SQLAlchemyError as e:
            raise LocalStoreError(f"Clearing {table.name} failed: {e}") from e

    # ------------------------------------------------------------------
    # Profile
    # ------------------------------------------------------------------

    def save_profile(self, profile: ProfileResponse) -> None:
        if profile.created_at is None:
            profile = profile.model_copy(update={"created_at": datetime.now(timezone.utc)})
        self._upsert(profile_table, "key", {"key": SINGLETON_KEY, "data": profile.model_dump(mode="json")})

    def get_profile(self) -> Optional[ProfileResponse]:
        data = self._fetch_data(profile_table, SINGLETON_KEY)
        return ProfileResponse.model_validate(data) if data is not None else None

    def delete_profile(self) -> None:
        self._delete_all(profile_table)

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    def save_settings(self, settings: SettingsResponse) -> None:
        self._upsert(settings_table, "key", {"key": SINGLETON_KEY, "data": settings.model_dump(mode="json")})

    def get_settings(self) -> Optional[SettingsResponse]:
        data = self._fetch_data(settings_table, SINGLETON_KEY)
        return SettingsResponse.model_validate(data) if data is not None else None

    def get_settings_or_default(self) -> SettingsResponse:
        return self.get_settings() or SettingsResponse()

    def update_settings(self, update: SettingsUpdate) -> SettingsResponse:
        """
        Merge only the provided fields over the stored (or default) settings.
        """
        current = self.get_settings_or_default()
        changes = update.model_dump(exclude_unset=True, exclude_none=True)
        merged = current.model_copy(update=changes)
        self.save_settings(merged)
        return merged

    def delete_settings(self) -> None:
        self._delete_all(settings_table)

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    def save_session(self, session: TrackedSession) -> None:
        self._upsert(sessions_table, "id", {
            "id": session.id,
            "start_time": _naive_utc(session.start_time),
            "data": session.to_dict(),
        })

    def get_session(self, session_id: str) -> Optional[TrackedSession]:
        try:
            with self.engine.connect() as conn:
                row = conn.execute(
                    select(sessions_table.c.data).where(sessions_table.c.id == session_id)
                ).first()
        except SQLAlchemyError as e:
            raise LocalStoreError(f"Read from sessions failed: {e}") from e
        return TrackedSession.from_dict(row.data) if row else None

    def list_sessions(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        page: int = 1,
        limit: Optional[int] = None,
    ) -> List[TrackedSession]:
        """
        Sessions newest first, optionally bounded by start time and paginated.
        """
        stmt = select(sessions_table.c.data).order_by(
            sessions_table.c.start_time.desc(), sessions_table.c.id.desc()
        )
        if start is not None:
            stmt = stmt.where(sessions_table.c.start_time >= _naive_utc(start))
        if end is not None:
            stmt = stmt.where(sessions_table.c.start_time <= _naive_utc(end))
        if limit is not None:
            stmt = stmt.offset((max(page, 1) - 1) * limit).limit(limit)

        try:
            with self.engine.connect() as conn:
                rows = conn.execute(stmt).all()
        except SQLAlchemyError as e:
            raise LocalStoreError(f"Read from sessions failed: {e}") from e
        return [TrackedSession.from_dict(row.data) for row in rows]

    def count_sessions(self) -> int:
        try:
            with self.engine.connect() as conn:
                return conn.execute(select(func.count()).select_from(sessions_table)).scalar_one()
        except SQLAlchemyError as e:
            raise LocalStoreError(f"Read from sessions failed: {e}") from e

    def delete_session(self, session_id: str) -> bool:
        """
        Returns False when no session with that id exists.
        """
        try:
            with self.engine.begin() as conn:
                deleted = conn.execute(
                    delete(sessions_table).where(sessions_table.c.id == session_id)
                ).rowcount
        except SQLAlchemyError as e:
            raise LocalStoreError(f"Delete from sessions failed: {e}") from e
        return deleted > 0

    def clear_all_sessions(self) -> int:
        return self._delete_all(sessions_table)

    def clear_all_data(self) -> None:
        for table in (profile_table, sessions_table, settings_table):
            self._delete_all(table)
        logger.info("Cleared all local data")

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------

    def stats(self) -> dict:
        return StatsCalculator.calculate_overall_stats(self.list_sessions())

    def weekly_stats(self, now: Optional[datetime] = None) -> dict:
        return StatsCalculator.weekly_stats(self.list_sessions(), now=now)
