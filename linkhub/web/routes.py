from __future__ import annotations

from flask import (
    abort,
    current_app,
    flash,
    make_response,
    redirect,
    render_template,
    request,
    url_for,
)
from flask_login import current_user, login_required

from linkhub.errors import LinkHubError, NotFound, Unauthorized, ValidationFailed
from linkhub.services.common import CATEGORIES, normalize_username
from linkhub.services.profiles import (
    all_profiles,
    count_links,
    create_profile,
    featured_profiles,
    format_relative_time,
    get_profile,
    is_owner,
    list_user_profiles,
)
from linkhub.services.projection import FILTER_FIELDS, group_by_category, project
from linkhub.services.search import search_profiles
from linkhub.services.security import current_user_id, load_owned_editor, profile_store
from linkhub.services.themes import THEMES, theme_css_variables
from linkhub.services.ui_mode import UiModeState
from linkhub.web import web_bp

DRAFT_LINK_ROWS = 5


def _safe_redirect_target(raw_next: str | None, fallback: str) -> str:
    candidate = (raw_next or "").strip()
    if candidate.startswith("/") and not candidate.startswith("//"):
        return candidate
    return fallback


def _not_found(message: str):
    return render_template("not_found.html", message=message), 404


def _draft_links_from_form() -> list[dict]:
    drafts = []
    for index in range(DRAFT_LINK_ROWS):
        title = (request.form.get(f"title_{index}") or "").strip()
        url = (request.form.get(f"url_{index}") or "").strip()
        category = (request.form.get(f"category_{index}") or "").strip()
        if title or url:
            drafts.append({"title": title, "url": url, "category": category})
    return drafts


@web_bp.route("/")
def home():
    store = profile_store()
    featured = []
    user_profiles = []
    search_results = []
    query = (request.args.get("q") or "").strip()
    try:
        featured = featured_profiles(
            store, limit=current_app.config["FEATURED_PROFILE_LIMIT"]
        )
        if current_user.is_authenticated:
            user_profiles = list_user_profiles(store, current_user_id())
        if query:
            search_results = search_profiles(
                all_profiles(store),
                query,
                limit=current_app.config["PROFILE_SEARCH_LIMIT"],
            )
    except LinkHubError as exc:
        current_app.logger.warning("Failed to load home page profiles: %s", exc)
        flash("Failed to load your LinkHubs", "error")

    return render_template(
        "home.html",
        featured=featured,
        user_profiles=user_profiles,
        total_links=count_links(user_profiles),
        query=query,
        search_results=search_results,
    )


@web_bp.route("/profile/<username>")
def profile(username: str):
    try:
        record = get_profile(profile_store(), username)
    except NotFound:
        return _not_found(f"No LinkHub found for @{normalize_username(username)}.")
    except LinkHubError as exc:
        current_app.logger.warning("Error fetching profile @%s: %s", username, exc)
        flash("Failed to load profile", "error")
        return redirect(url_for("web.home"))

    search_term = request.args.get("q") or ""
    filter_by = request.args.get("filter_by") or "title"
    category = request.args.get("category") or ""
    if filter_by not in FILTER_FIELDS:
        flash(f"Cannot filter links by {filter_by}.", "error")
        filter_by = "title"
    visible = project(record["links"], search_term, filter_by, category)

    return render_template(
        "profile.html",
        profile=record,
        grouped=group_by_category(visible),
        visible_count=len(visible),
        search_term=search_term,
        filter_by=filter_by,
        filter_fields=FILTER_FIELDS,
        category=category,
        categories=CATEGORIES,
        theme_vars=theme_css_variables(record["theme"]),
        is_owner=is_owner(record, current_user_id()),
        share_url=url_for("web.profile", username=record["username"], _external=True),
        created_ago=format_relative_time(record["created_at"]),
    )


@web_bp.route("/edit-profile/<username>")
@login_required
def edit_profile(username: str):
    try:
        editor = load_owned_editor(username)
    except NotFound:
        return _not_found(f"No LinkHub found for @{normalize_username(username)}.")
    except Unauthorized as exc:
        flash(exc.message, "error")
        return redirect(url_for("web.profile", username=username))
    except LinkHubError as exc:
        current_app.logger.warning("Error loading editor for @%s: %s", username, exc)
        flash("Failed to load profile", "error")
        return redirect(url_for("web.home"))

    return render_template(
        "edit_profile.html",
        username=editor.username,
        links=editor.links,
        selected_theme=editor.theme,
        version=editor.version,
        themes=THEMES,
        categories=CATEGORIES,
    )


def _apply_edit(username: str, action, success_message: str, failure_message: str):
    try:
        editor = load_owned_editor(username, request.form.get("version", type=int))
        action(editor)
    except NotFound as exc:
        flash(exc.message, "error")
    except Unauthorized as exc:
        flash(exc.message, "error")
        return redirect(url_for("web.profile", username=username))
    except ValidationFailed as exc:
        flash(exc.message, "error")
    except LinkHubError as exc:
        current_app.logger.warning("%s for @%s: %s", failure_message, username, exc)
        flash(f"{failure_message}: {exc.message}", "error")
    else:
        flash(success_message, "success")
    return redirect(url_for("web.edit_profile", username=username))


@web_bp.route("/edit-profile/<username>/links", methods=["POST"])
@login_required
def add_link(username: str):
    form = request.form
    return _apply_edit(
        username,
        lambda editor: editor.add_link(
            form.get("title"), form.get("url"), form.get("category")
        ),
        "Your link has been added successfully",
        "Failed to add link",
    )


@web_bp.route("/edit-profile/<username>/links/<int:link_id>/edit", methods=["POST"])
@login_required
def edit_link(username: str, link_id: int):
    form = request.form
    return _apply_edit(
        username,
        lambda editor: editor.edit_link(
            link_id, form.get("title"), form.get("url"), form.get("category")
        ),
        "Your link has been updated successfully",
        "Failed to update link",
    )


@web_bp.route("/edit-profile/<username>/links/<int:link_id>/delete", methods=["POST"])
@login_required
def delete_link(username: str, link_id: int):
    return _apply_edit(
        username,
        lambda editor: editor.delete_link(link_id),
        "Your link has been deleted successfully",
        "Failed to delete link",
    )


@web_bp.route("/edit-profile/<username>/links/reorder", methods=["POST"])
@login_required
def reorder_links(username: str):
    from_id = request.form.get("from_id", type=int)
    to_id = request.form.get("to_id", type=int)
    if from_id is None or to_id is None:
        abort(400)
    return _apply_edit(
        username,
        lambda editor: editor.reorder(from_id, to_id),
        "Your links have been reordered successfully",
        "Failed to reorder links",
    )


@web_bp.route("/edit-profile/<username>/theme", methods=["POST"])
@login_required
def set_theme(username: str):
    theme_id = (request.form.get("theme") or "").strip()
    return _apply_edit(
        username,
        lambda editor: editor.set_theme(theme_id),
        "Your theme has been updated successfully",
        "Failed to update theme",
    )


@web_bp.route("/create-linkhub", methods=["GET", "POST"])
@login_required
def create_linkhub():
    form_values = {
        "username": "",
        "theme": current_app.config["DEFAULT_THEME"],
        "drafts": [],
    }
    if request.method == "POST":
        form_values = {
            "username": normalize_username(request.form.get("username")),
            "theme": (request.form.get("theme") or "").strip()
            or current_app.config["DEFAULT_THEME"],
            "drafts": _draft_links_from_form(),
        }
        try:
            created = create_profile(
                profile_store(),
                current_user_id(),
                form_values["username"],
                form_values["drafts"],
                theme=form_values["theme"],
            )
        except LinkHubError as exc:
            if exc.status_code >= 500:
                current_app.logger.warning("Error creating LinkHub: %s", exc)
            flash(exc.message, "error")
        else:
            return redirect(url_for("web.profile", username=created["username"]))

    return render_template(
        "create_linkhub.html",
        form=form_values,
        draft_rows=DRAFT_LINK_ROWS,
        themes=THEMES,
        categories=CATEGORIES,
    )


@web_bp.route("/ui-mode/toggle", methods=["POST"])
def toggle_ui_mode():
    cookie_name = current_app.config["UI_MODE_COOKIE"]
    target = _safe_redirect_target(request.form.get("next"), url_for("web.home"))
    response = make_response(redirect(target))

    state = UiModeState(
        {cookie_name: request.cookies.get(cookie_name)},
        system_default=request.headers.get("Sec-CH-Prefers-Color-Scheme"),
        storage_key=cookie_name,
    )
    state.subscribe(
        lambda mode: response.set_cookie(
            cookie_name,
            mode,
            max_age=current_app.config["UI_MODE_COOKIE_MAX_AGE"],
            samesite="Lax",
        )
    )
    state.toggle()
    return response
