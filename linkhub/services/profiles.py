from __future__ import annotations

import logging
import time
from datetime import datetime, timezone

from linkhub.errors import (
    RemoteCallFailed,
    Unauthorized,
    UsernameTaken,
    ValidationFailed,
)
from linkhub.services.availability import (
    VERDICT_TAKEN,
    VERDICT_UNKNOWN,
    check_username_availability,
)
from linkhub.services.common import (
    USERNAME_RULES,
    is_valid_username,
    normalize_username,
)
from linkhub.services.editor import make_link
from linkhub.services.themes import DEFAULT_THEME_ID, is_known_theme

logger = logging.getLogger(__name__)


def build_links(drafts) -> list[dict]:
    links: list[dict] = []
    base_ms = int(time.time() * 1000)
    for draft in drafts or []:
        links.append(
            make_link(
                links,
                draft.get("title"),
                draft.get("url"),
                draft.get("category"),
                now_ms=base_ms,
            )
        )
    return links


def create_profile(store, user_id, username, links, theme=DEFAULT_THEME_ID) -> dict:
    """Validate and insert a new profile for ``user_id``.

    The availability pre-check gives a friendly early answer; the store's
    unique constraint on ``username`` is what actually decides a race.
    """
    if not user_id:
        raise Unauthorized("You must be signed in to create a LinkHub")

    candidate = normalize_username(username)
    if not is_valid_username(candidate):
        raise ValidationFailed(USERNAME_RULES)
    if not links:
        raise ValidationFailed("Please add at least one link")
    theme = theme or DEFAULT_THEME_ID
    if not is_known_theme(theme):
        raise ValidationFailed(f"Unknown theme: {theme}")
    prepared = build_links(links)

    verdict = check_username_availability(store, candidate)
    if verdict == VERDICT_TAKEN:
        raise UsernameTaken()
    if verdict == VERDICT_UNKNOWN:
        raise RemoteCallFailed("Failed to create LinkHub. Please try again.")

    result = store.insert(
        {
            "username": candidate,
            "user_id": str(user_id),
            "links": prepared,
            "theme": theme,
        }
    )
    if result.error:
        raise result.error
    logger.info("Created profile @%s for user %s", candidate, user_id)
    return result.data


def get_profile(store, username: str) -> dict:
    result = store.select_one(normalize_username(username))
    if result.error:
        raise result.error
    return result.data


def list_user_profiles(store, user_id) -> list[dict]:
    result = store.select(user_id=str(user_id), order_by="created_at")
    if result.error:
        raise result.error
    return result.data


def featured_profiles(store, limit: int = 3) -> list[dict]:
    result = store.select(order_by="created_at", limit=limit)
    if result.error:
        raise result.error
    return result.data


def all_profiles(store) -> list[dict]:
    result = store.select(order_by="created_at")
    if result.error:
        raise result.error
    return result.data


def count_links(profiles) -> int:
    return sum(len(profile.get("links") or []) for profile in profiles)


def is_owner(profile: dict | None, user_id) -> bool:
    if not profile or user_id is None:
        return False
    return str(profile.get("user_id")) == str(user_id)


def _parse_moment(moment) -> datetime:
    if isinstance(moment, str):
        moment = datetime.fromisoformat(moment)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


def _ago(amount: int, unit: str) -> str:
    return f"{amount} {unit}{'' if amount == 1 else 's'} ago"


def format_relative_time(moment, now: datetime | None = None) -> str:
    now = _parse_moment(now or datetime.now(timezone.utc))
    seconds = int((now - _parse_moment(moment)).total_seconds())
    if seconds < 60:
        return "just now"
    minutes = seconds // 60
    if minutes < 60:
        return _ago(minutes, "minute")
    hours = minutes // 60
    if hours < 24:
        return _ago(hours, "hour")
    days = hours // 24
    if days < 30:
        return _ago(days, "day")
    months = days // 30
    if months < 12:
        return _ago(months, "month")
    return _ago(months // 12, "year")
