"""Tests for the aiohttp transport against a local aiohttp server."""

import pytest
from aiohttp import test_utils, web

from standapp_client.auth import AiohttpTransport, LoginSuccess, SessionAuthenticator, TransportFailure


def make_app():
    async def login(request):
        form = await request.post()
        if request.content_type != "application/x-www-form-urlencoded":
            return web.json_response({"success": False, "message": "form expected"}, status=400)
        if form.get("username") == "admin" and form.get("password") == "admin":
            response = web.json_response({"success": True, "message": "Welcome", "user_role": "Administrator", "redirect_to_setup": True})
            response.set_cookie("session", "XYZ", path="/", httponly=True)
            return response
        return web.json_response({"success": False, "message": "Invalid credentials"}, status=401)

    async def logout(request):
        if request.headers.get("Cookie") != "session=XYZ":
            return web.json_response({"success": False}, status=401)
        return web.json_response({"success": True})

    app = web.Application()
    app.router.add_post("/login", login)
    app.router.add_get("/api/logout", logout)
    return app


async def test_login_round_trip_against_server():
    transport = AiohttpTransport(timeout_seconds=5)
    authenticator = SessionAuthenticator(transport)
    try:
        async with test_utils.TestServer(make_app()) as server:
            base_url = str(server.make_url("")).rstrip("/")

            outcome = await authenticator.authenticate(base_url, "admin", "admin")

            assert isinstance(outcome, LoginSuccess)
            assert outcome.session_token == "session=XYZ"
            assert outcome.role == "Administrator"
            assert outcome.redirect_to_setup is True

            assert await authenticator.logout(base_url, outcome.session_token) == (True, "Logged out successfully.")
    finally:
        await transport.close()


async def test_error_status_body_is_returned():
    transport = AiohttpTransport(timeout_seconds=5)
    try:
        async with test_utils.TestServer(make_app()) as server:
            response = await transport.post_form(str(server.make_url("/login")), {"username": "admin", "password": "nope"})

            assert response.status == 401
            assert "Invalid credentials" in response.body
    finally:
        await transport.close()


async def test_refused_connection_raises_transport_failure():
    transport = AiohttpTransport(timeout_seconds=5)
    try:
        with pytest.raises(TransportFailure):
            await transport.post_form(f"http://127.0.0.1:{test_utils.unused_port()}/login", {"username": "a", "password": "b"})
    finally:
        await transport.close()


async def test_invalid_url_raises_transport_failure():
    transport = AiohttpTransport(timeout_seconds=5)
    try:
        with pytest.raises(TransportFailure):
            await transport.get("not a url")
    finally:
        await transport.close()
