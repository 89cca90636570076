from __future__ import annotations

from flask import current_app, jsonify, request

from linkhub.api import api_bp
from linkhub.errors import LinkHubError, ValidationFailed
from linkhub.services.availability import check_username_availability
from linkhub.services.common import normalize_username, text_field
from linkhub.services.profiles import (
    all_profiles,
    create_profile,
    featured_profiles,
    get_profile,
    is_owner,
)
from linkhub.services.projection import group_by_category, project
from linkhub.services.search import search_profiles
from linkhub.services.security import (
    api_auth_required,
    current_user_id,
    load_owned_editor,
    profile_store,
)
from linkhub.services.themes import THEMES


@api_bp.errorhandler(LinkHubError)
def handle_linkhub_error(exc: LinkHubError):
    if exc.status_code >= 500:
        current_app.logger.warning("API request failed: %s", exc)
    return jsonify({"error": exc.message}), exc.status_code


def _payload() -> dict:
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else {}


def _editor_state(editor) -> dict:
    return {
        "username": editor.username,
        "links": editor.links,
        "theme": editor.theme,
        "version": editor.version,
    }


def _link_id(payload: dict, key: str) -> int:
    try:
        return int(payload.get(key))
    except (TypeError, ValueError):
        raise ValidationFailed(f"{key} must be a link id") from None


def _expected_version(payload: dict) -> int | None:
    raw = payload.get("version")
    if raw is None:
        return None
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise ValidationFailed("version must be an integer") from None


@api_bp.route("/health")
def health():
    return jsonify({"status": "ok", "service": "LinkHub"})


@api_bp.route("/themes", methods=["GET"])
def themes_list():
    return jsonify({"items": [theme.as_dict() for theme in THEMES]})


@api_bp.route("/profiles", methods=["GET"])
def profiles_list():
    store = profile_store()
    query = (request.args.get("q") or "").strip()
    if not query:
        limit = (
            request.args.get("limit", type=int)
            or current_app.config["FEATURED_PROFILE_LIMIT"]
        )
        return jsonify({"items": featured_profiles(store, limit=limit)})

    ranked = search_profiles(
        all_profiles(store),
        query,
        limit=request.args.get("limit", type=int)
        or current_app.config["PROFILE_SEARCH_LIMIT"],
    )
    return jsonify(
        {
            "items": [
                {
                    **item["profile"],
                    "score": item["score"],
                    "match_reasons": item["reasons"],
                }
                for item in ranked
            ]
        }
    )


@api_bp.route("/profiles", methods=["POST"])
@api_auth_required
def profiles_create():
    payload = _payload()
    links = payload.get("links") or []
    if not isinstance(links, list) or not all(isinstance(i, dict) for i in links):
        raise ValidationFailed("links must be a list of objects")
    created = create_profile(
        profile_store(),
        current_user_id(),
        payload.get("username"),
        links,
        theme=payload.get("theme") or current_app.config["DEFAULT_THEME"],
    )
    return jsonify(created), 201


@api_bp.route("/profiles/<username>", methods=["GET"])
def profiles_get(username: str):
    record = get_profile(profile_store(), username)
    visible = project(
        record["links"],
        request.args.get("q") or "",
        request.args.get("filter_by") or "title",
        request.args.get("category") or "",
    )
    return jsonify(
        {
            **record,
            "visible_links": visible,
            "groups": [
                {"category": name, "links": links}
                for name, links in group_by_category(visible)
            ],
            "is_owner": is_owner(record, current_user_id()),
        }
    )


@api_bp.route("/profiles/<username>/links", methods=["POST"])
@api_auth_required
def links_create(username: str):
    payload = _payload()
    editor = load_owned_editor(username, _expected_version(payload))
    link = editor.add_link(
        payload.get("title"), payload.get("url"), payload.get("category")
    )
    return jsonify({"link": link, **_editor_state(editor)}), 201


@api_bp.route("/profiles/<username>/links/<int:link_id>", methods=["PATCH"])
@api_auth_required
def links_update(username: str, link_id: int):
    payload = _payload()
    editor = load_owned_editor(username, _expected_version(payload))
    current = editor.get_link(link_id)
    link = editor.edit_link(
        link_id,
        payload.get("title", current["title"]),
        payload.get("url", current["url"]),
        payload.get("category", current["category"]),
    )
    return jsonify({"link": link, **_editor_state(editor)})


@api_bp.route("/profiles/<username>/links/<int:link_id>", methods=["DELETE"])
@api_auth_required
def links_delete(username: str, link_id: int):
    editor = load_owned_editor(username, _expected_version(_payload()))
    editor.delete_link(link_id)
    return jsonify({"status": "deleted", **_editor_state(editor)})


@api_bp.route("/profiles/<username>/links/reorder", methods=["POST"])
@api_auth_required
def links_reorder(username: str):
    payload = _payload()
    from_id = _link_id(payload, "from_id")
    to_id = _link_id(payload, "to_id")
    editor = load_owned_editor(username, _expected_version(payload))
    editor.reorder(from_id, to_id)
    return jsonify(_editor_state(editor))


@api_bp.route("/profiles/<username>/theme", methods=["PUT"])
@api_auth_required
def theme_update(username: str):
    payload = _payload()
    editor = load_owned_editor(username, _expected_version(payload))
    editor.set_theme(text_field(payload.get("theme"), "Theme"))
    return jsonify(_editor_state(editor))


@api_bp.route("/usernames/<username>/availability", methods=["GET"])
def username_availability(username: str):
    candidate = normalize_username(username)
    return jsonify(
        {
            "username": candidate,
            "status": check_username_availability(profile_store(), candidate),
            "seq": request.args.get("seq", type=int),
        }
    )
