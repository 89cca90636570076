import pytest

from linkhub import create_app
from linkhub.config import TestConfig
from linkhub.errors import NotFound, VersionConflict
from linkhub.extensions import db
from linkhub.services.store import StoreResult


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        db.drop_all()
        db.create_all()
    yield app


@pytest.fixture
def client(app):
    return app.test_client()


class MemoryStore:
    """Profile store double that records calls and can fail on demand."""

    def __init__(self, records=None):
        self.records = {}
        for record in records or []:
            self.records[record["username"]] = {
                "links": [],
                "theme": "dark",
                "version": 1,
                **record,
            }
        self.calls: list[tuple] = []
        self.fail_next = None

    def _pop_failure(self):
        failure, self.fail_next = self.fail_next, None
        return failure

    def select(self, username=None, user_id=None, columns=None, limit=None,
               order_by=None, descending=True):
        self.calls.append(("select", username, user_id))
        failure = self._pop_failure()
        if failure:
            return StoreResult(error=failure)
        rows = [
            dict(record)
            for record in self.records.values()
            if (username is None or record["username"] == username)
            and (user_id is None or record.get("user_id") == user_id)
        ]
        if columns:
            rows = [{key: row[key] for key in columns} for row in rows]
        return StoreResult(data=rows[:limit] if limit else rows)

    def select_one(self, username):
        result = self.select(username=username)
        if result.error:
            return result
        if not result.data:
            return StoreResult(error=NotFound())
        return StoreResult(data=result.data[0])

    def insert(self, record):
        self.calls.append(("insert", record["username"]))
        failure = self._pop_failure()
        if failure:
            return StoreResult(error=failure)
        stored = {"id": len(self.records) + 1, "version": 1, **record}
        self.records[record["username"]] = stored
        return StoreResult(data=dict(stored))

    def update(self, patch, username, expected_version=None):
        self.calls.append(("update", username, dict(patch)))
        failure = self._pop_failure()
        if failure:
            return StoreResult(error=failure)
        record = self.records.get(username)
        if record is None:
            return StoreResult(error=NotFound())
        if expected_version is not None and record["version"] != expected_version:
            return StoreResult(error=VersionConflict())
        record.update(patch)
        record["version"] += 1
        return StoreResult(data=dict(record))

    def updates(self):
        return [call for call in self.calls if call[0] == "update"]


@pytest.fixture
def memory_store():
    return MemoryStore(
        [{"username": "ada", "user_id": "1", "links": [], "theme": "dark"}]
    )


@pytest.fixture
def make_store():
    return MemoryStore
