# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

# backend/stockroom/routes/auth.py
"""
Authentication API routes

- POST /api/auth/login: credentials -> user + bearer token
- POST /api/auth/register: self-registration, always role USER
- GET  /api/auth/me: the authenticated user
"""

from flask import Blueprint, current_app, g, jsonify

from ..decorators import require_auth
from ..services import auth_service, token_service
from ..validation import get_json_body, require_fields


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


def _session_response(user, message: str) -> dict:
    token = token_service.issue_token(user.id, user.username, user.role)
    return {"message": message, "user": user.to_dict(), "token": token}


@auth_bp.post("/login")
def login_route():
    """
    Authenticate user and issue a bearer token.

    Unknown usernames and wrong passwords get the same 401 message.
    """
    data = get_json_body()
    require_fields(data, "username", "password")

    user = auth_service.authenticate(data["username"], data["password"])
    current_app.logger.info("User %s logged in", user.username)

    return jsonify(_session_response(user, "Login successful")), 200


@auth_bp.post("/register")
def register_route():
    data = get_json_body()
    user = auth_service.create_user(data, allow_role=False)
    current_app.logger.info("Registered user %s", user.username)

    return jsonify(_session_response(user, "User registered successfully")), 201


@auth_bp.get("/me")
@require_auth
def me_route():
    return jsonify({
        "message": "User information retrieved successfully",
        "user": g.current_user.to_dict(),
    }), 200
