from __future__ import annotations

from flask import Flask, g, request

from ..common.http import bearer_required, field, json_body, json_error, json_ok
from ..core.exceptions import InvalidTokenError, NotFoundError
from ..container import Container
from .model import ProfilePatch


def register(app: Flask, container: Container) -> None:
    auth = container.auth_service
    token_required = bearer_required(auth)

    @app.route("/api/register", methods=["POST"], endpoint="register")
    def register_account():
        body = json_body()
        result = auth.register(
            full_name=field(body, "full_name"),
            phone=field(body, "phone"),
            email=field(body, "email"),
            password=field(body, "password"),
            password_confirmation=field(body, "password_confirmation"),
        )
        return json_ok(
            message="Registration successful. Please check your email to verify your account.",
            email=result.email,
        )

    @app.route("/api/verify-email", methods=["GET"], endpoint="verify_email")
    def verify_email():
        try:
            auth.verify_email(request.args.get("token"))
        except InvalidTokenError:
            return json_error("Token is invalid or has expired", 400)
        return json_ok(message="Email verified. You can now log in.")

    @app.route("/api/login", methods=["POST"], endpoint="login")
    def login():
        body = json_body()
        # "email" is the legacy name of the identifier field
        identifier = field(body, "identifier") or field(body, "email")
        try:
            result = auth.login(identifier, field(body, "password"))
        except NotFoundError as e:
            return json_error(str(e), 401)
        return json_ok(message="Login successful", token=result.token, user=result.user.to_public())

    @app.route("/api/me", methods=["GET"], endpoint="me")
    @token_required
    def me():
        user = auth.get_current_user(g.identity)
        return json_ok(user=user.to_public())

    @app.route("/api/profile", methods=["PUT"], endpoint="update_profile")
    @token_required
    def update_profile():
        body = json_body()
        patch = ProfilePatch(email=field(body, "email") or None, phone=field(body, "phone") or None)
        user = auth.update_profile(g.identity, patch)
        return json_ok(message="Profile updated", user=user.to_public())

    @app.route("/api/change-password", methods=["POST"], endpoint="change_password")
    @token_required
    def change_password():
        body = json_body()
        auth.change_password(g.identity, field(body, "old_password"), field(body, "new_password"))
        return json_ok(message="Password changed")
