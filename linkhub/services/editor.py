from __future__ import annotations

import logging
import threading
import time

from linkhub.errors import (
    LinkHubError,
    NotFound,
    RemoteCallFailed,
    ValidationFailed,
)
from linkhub.services.common import clean_link_fields
from linkhub.services.themes import DEFAULT_THEME_ID, is_known_theme

logger = logging.getLogger(__name__)


def next_link_id(links: list[dict], now_ms: int | None = None) -> int:
    stamp = int(time.time() * 1000) if now_ms is None else now_ms
    highest = max((int(link["id"]) for link in links), default=0)
    return max(stamp, highest + 1)


def make_link(links: list[dict], title, url, category, now_ms=None) -> dict:
    clean_title, clean_url, clean_category = clean_link_fields(title, url, category)
    return {
        "id": next_link_id(links, now_ms),
        "title": clean_title,
        "url": clean_url,
        "category": clean_category,
    }


def move_link(links: list[dict], from_index: int, to_index: int) -> list[dict]:
    moved = list(links)
    moved.insert(to_index, moved.pop(from_index))
    return moved


def _index_of(links: list[dict], link_id) -> int:
    for index, link in enumerate(links):
        if link["id"] == link_id:
            return index
    return -1


class LinkCollectionEditor:
    """Ordered links of one profile, mirrored to the profile store.

    Each mutation computes the new list from the current one, writes the whole
    list in a single store update and only then replaces the local copy. A
    failed write leaves the local copy as it was. Mutations on one editor run
    one at a time; writers holding separate editors are kept apart by the
    store's version check.
    """

    def __init__(
        self,
        store,
        username: str,
        links=None,
        theme: str = DEFAULT_THEME_ID,
        version: int | None = None,
    ):
        self.store = store
        self.username = username
        self.theme = theme or DEFAULT_THEME_ID
        self.version = version
        self._links: list[dict] = [dict(link) for link in (links or [])]
        self._detached = False
        self._lock = threading.Lock()

    @classmethod
    def load(cls, store, username: str) -> "LinkCollectionEditor":
        result = store.select_one(username)
        if result.error:
            raise result.error
        return cls.from_record(store, result.data)

    @classmethod
    def from_record(cls, store, record: dict) -> "LinkCollectionEditor":
        return cls(
            store,
            record["username"],
            links=record.get("links") or [],
            theme=record.get("theme") or DEFAULT_THEME_ID,
            version=record.get("version"),
        )

    @property
    def links(self) -> list[dict]:
        return [dict(link) for link in self._links]

    @property
    def detached(self) -> bool:
        return self._detached

    def detach(self) -> None:
        self._detached = True

    def get_link(self, link_id) -> dict:
        index = _index_of(self._links, link_id)
        if index < 0:
            raise NotFound(f"link {link_id} not found")
        return dict(self._links[index])

    def add_link(self, title, url, category="") -> dict:
        with self._lock:
            link = make_link(self._links, title, url, category)
            self._persist_links([*self._links, link], "add link")
        return dict(link)

    def edit_link(self, link_id, title, url, category="") -> dict:
        with self._lock:
            index = _index_of(self._links, link_id)
            if index < 0:
                raise NotFound(f"link {link_id} not found")
            clean_title, clean_url, clean_category = clean_link_fields(
                title, url, category
            )
            updated = {
                **self._links[index],
                "title": clean_title,
                "url": clean_url,
                "category": clean_category,
            }
            links = list(self._links)
            links[index] = updated
            self._persist_links(links, "edit link")
        return dict(updated)

    def delete_link(self, link_id) -> None:
        with self._lock:
            remaining = [link for link in self._links if link["id"] != link_id]
            if len(remaining) == len(self._links):
                return
            self._persist_links(remaining, "delete link")

    def reorder(self, from_id, to_id) -> None:
        with self._lock:
            from_index = _index_of(self._links, from_id)
            to_index = _index_of(self._links, to_id)
            if from_index < 0 or to_index < 0:
                raise NotFound("cannot reorder, link not found")
            if from_index == to_index:
                return
            self._persist_links(
                move_link(self._links, from_index, to_index), "reorder links"
            )

    def set_theme(self, theme_id: str) -> None:
        if not is_known_theme(theme_id):
            raise ValidationFailed(f"Unknown theme: {theme_id}")
        with self._lock:
            confirmed = self._write({"theme": theme_id}, "update theme")
            if not self._detached:
                self.theme = theme_id
                self._track_version(confirmed)

    def _persist_links(self, links: list[dict], action: str) -> None:
        confirmed = self._write({"links": links}, action)
        if self._detached:
            logger.debug(
                "Ignoring confirmed %s for detached @%s", action, self.username
            )
            return
        self._links = links
        self._track_version(confirmed)

    def _write(self, patch: dict, action: str):
        result = self.store.update(
            patch, username=self.username, expected_version=self.version
        )
        if result.error:
            logger.warning(
                "Failed to %s for @%s: %s", action, self.username, result.error
            )
            if isinstance(result.error, LinkHubError):
                raise result.error
            raise RemoteCallFailed(f"Failed to {action}") from result.error
        return result.data

    def _track_version(self, confirmed) -> None:
        if self.version is not None and confirmed:
            self.version = confirmed.get("version", self.version + 1)
