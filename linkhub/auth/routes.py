from flask import flash, redirect, render_template, request, url_for
from flask_login import current_user, login_required, login_user, logout_user

from linkhub.auth import auth_bp
from linkhub.extensions import db
from linkhub.models import User


def _safe_redirect_target(raw_next: str | None, fallback: str) -> str:
    candidate = (raw_next or "").strip()
    if candidate.startswith("/") and not candidate.startswith("//"):
        return candidate
    return fallback


@auth_bp.route("/sign-up", methods=["GET", "POST"])
def sign_up():
    if current_user.is_authenticated:
        return redirect(url_for("web.home"))

    if request.method == "POST":
        email = (request.form.get("email") or "").strip().lower()
        display_name = (request.form.get("display_name") or "").strip() or None
        password = request.form.get("password") or ""
        confirm = request.form.get("confirm_password") or ""

        if not email or not password:
            flash("Email and password are required.", "error")
        elif password != confirm:
            flash("Passwords do not match.", "error")
        elif User.query.filter_by(email=email).first():
            flash("An account with that email already exists.", "error")
        else:
            user = User(email=email, display_name=display_name)
            user.set_password(password)
            db.session.add(user)
            db.session.commit()
            login_user(user)
            flash("Welcome to LinkHub!", "success")
            return redirect(url_for("web.home"))

    return render_template("sign_up.html")


@auth_bp.route("/sign-in", methods=["GET", "POST"])
def sign_in():
    next_url = _safe_redirect_target(request.args.get("next"), url_for("web.home"))
    if current_user.is_authenticated:
        return redirect(next_url)

    if request.method == "POST":
        email = (request.form.get("email") or "").strip().lower()
        password = request.form.get("password") or ""

        user = User.query.filter_by(email=email).first()
        if user and user.check_password(password):
            login_user(user, remember=bool(request.form.get("remember")))
            return redirect(next_url)
        flash("Invalid credentials.", "error")

    return render_template("sign_in.html")


@auth_bp.route("/sign-out", methods=["POST"])
@login_required
def sign_out():
    logout_user()
    return redirect(url_for("web.home"))
