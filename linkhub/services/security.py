from __future__ import annotations

from functools import wraps

from flask import current_app, g, jsonify
from flask_login import current_user

from linkhub.errors import Unauthorized
from linkhub.services.common import normalize_username
from linkhub.services.editor import LinkCollectionEditor
from linkhub.services.profiles import is_owner


def profile_store():
    return current_app.extensions["profile_store"]


def current_user_id() -> str | None:
    if not current_user.is_authenticated:
        return None
    return current_user.get_id()


def api_auth_required(func):
    @wraps(func)
    def wrapped(*args, **kwargs):
        if not current_user.is_authenticated:
            return jsonify({"error": "authentication required"}), 401
        g.api_user = current_user
        return func(*args, **kwargs)

    return wrapped


def load_owned_editor(
    username: str, expected_version: int | None = None
) -> LinkCollectionEditor:
    store = profile_store()
    result = store.select_one(normalize_username(username))
    if result.error:
        raise result.error
    if not is_owner(result.data, current_user_id()):
        raise Unauthorized()
    editor = LinkCollectionEditor.from_record(store, result.data)
    if expected_version is not None:
        editor.version = expected_version
    return editor
