from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from linkhub.errors import (
    LinkHubError,
    NotFound,
    RemoteCallFailed,
    UsernameTaken,
    VersionConflict,
)
from linkhub.extensions import db
from linkhub.models import Profile, utcnow

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = {"links", "theme"}
ORDERABLE_FIELDS = {"created_at", "updated_at", "username"}


@dataclass
class StoreResult:
    data: Any = None
    error: LinkHubError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _project_columns(row: dict, columns) -> dict:
    if not columns:
        return row
    return {key: row[key] for key in columns if key in row}


class ProfileStore:
    """Profile table access with ``(data, error)`` results instead of raises."""

    def select(
        self,
        username: str | None = None,
        user_id: str | None = None,
        columns=None,
        limit: int | None = None,
        order_by: str | None = None,
        descending: bool = True,
    ) -> StoreResult:
        try:
            query = Profile.query
            if username is not None:
                query = query.filter_by(username=username)
            if user_id is not None:
                query = query.filter_by(user_id=str(user_id))
            if order_by:
                if order_by not in ORDERABLE_FIELDS:
                    return StoreResult(
                        error=RemoteCallFailed(f"cannot order by {order_by}")
                    )
                column = getattr(Profile, order_by)
                query = query.order_by(column.desc() if descending else column.asc())
            if limit:
                query = query.limit(limit)
            rows = [_project_columns(p.as_dict(), columns) for p in query.all()]
        except SQLAlchemyError as exc:
            logger.warning("Profile select failed: %s", exc)
            db.session.rollback()
            return StoreResult(error=RemoteCallFailed())
        return StoreResult(data=rows)

    def select_one(self, username: str) -> StoreResult:
        result = self.select(username=username, limit=1)
        if not result.ok:
            return result
        if not result.data:
            return StoreResult(error=NotFound(f"profile @{username} not found"))
        return StoreResult(data=result.data[0])

    def insert(self, record: dict) -> StoreResult:
        profile = Profile(
            username=record["username"],
            user_id=str(record["user_id"]),
            links=list(record.get("links") or []),
            theme=record.get("theme") or "dark",
            version=1,
        )
        if record.get("created_at"):
            profile.created_at = record["created_at"]
        try:
            db.session.add(profile)
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            logger.info("Profile insert rejected, @%s exists", record["username"])
            return StoreResult(error=UsernameTaken())
        except SQLAlchemyError as exc:
            db.session.rollback()
            logger.warning("Profile insert failed for @%s: %s", record["username"], exc)
            return StoreResult(error=RemoteCallFailed())
        return StoreResult(data=profile.as_dict())

    def update(
        self,
        patch: dict,
        username: str,
        expected_version: int | None = None,
    ) -> StoreResult:
        unknown = set(patch) - UPDATABLE_FIELDS
        if unknown or not patch:
            return StoreResult(
                error=RemoteCallFailed(f"unsupported patch fields: {sorted(unknown)}")
            )

        stmt = update(Profile).where(Profile.username == username)
        if expected_version is not None:
            stmt = stmt.where(Profile.version == expected_version)
        stmt = stmt.values(
            **patch, version=Profile.version + 1, updated_at=utcnow()
        ).execution_options(synchronize_session=False)

        try:
            matched = db.session.execute(stmt).rowcount
            db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            logger.warning("Profile update failed for @%s: %s", username, exc)
            return StoreResult(error=RemoteCallFailed())

        db.session.expire_all()
        current = self.select_one(username)
        if matched == 0:
            if not current.ok:
                return current
            logger.info(
                "Stale write to @%s rejected (expected version %s)",
                username,
                expected_version,
            )
            return StoreResult(error=VersionConflict())
        return current
