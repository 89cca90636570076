from flask import Blueprint

auth_bp = Blueprint("auth", __name__)

from linkhub.auth import routes  # noqa: E402,F401
