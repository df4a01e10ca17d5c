#!/usr/bin/env python3
"""
HTTP API for playlist analysis.

Handles the Spotify login flow, keeps the user's tokens in a signed cookie
session and exposes JSON endpoints for the frontend.

Usage:
    python -m spotistats.server

The server runs on http://0.0.0.0:8888 unless SPOTISTATS_SERVER_PORT is set.
"""

from __future__ import annotations

import logging
import sys
from datetime import timedelta
from typing import Callable, Optional

import requests
from flask import Flask, jsonify, redirect, request, session
from flask_cors import CORS
from spotipy.oauth2 import SpotifyOauthError

from .analysis import PlaylistAnalyzer
from .auth import TokenProvider, store_token
from .client import Spotistats
from .config import Settings
from .errors import NotAuthenticated, SpotistatsError

logger = logging.getLogger(__name__)

SESSION_COOKIE_NAME = "spotify_session"
SESSION_LIFETIME = timedelta(hours=24)


def configure_logging(debug: bool = False) -> None:
    root = logging.getLogger()
    root.setLevel(logging.DEBUG if debug else logging.INFO)
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        ))
        root.addHandler(handler)


def create_app(
    settings: Optional[Settings] = None,
    token_provider: Optional[TokenProvider] = None,
    client_factory: Optional[Callable[[str], Spotistats]] = None,
) -> Flask:
    settings = settings or Settings.from_env()
    token_provider = token_provider or TokenProvider.from_settings(settings)
    if client_factory is None:
        def client_factory(token: str) -> Spotistats:
            return Spotistats.from_token(token, settings)
    analyzer = PlaylistAnalyzer(token_provider, client_factory=client_factory, settings=settings)

    app = Flask(__name__)
    app.config.update(
        SECRET_KEY=settings.session_secret,
        SESSION_COOKIE_NAME=SESSION_COOKIE_NAME,
        PERMANENT_SESSION_LIFETIME=SESSION_LIFETIME,
    )
    CORS(app, supports_credentials=True)

    app.extensions["token_provider"] = token_provider
    app.extensions["playlist_analyzer"] = analyzer

    @app.errorhandler(SpotistatsError)
    def _spotistats_error(err: SpotistatsError):
        return jsonify(err.to_dict()), err.status

    @app.route("/health", methods=["GET"])
    def health():
        """Health check endpoint."""
        return jsonify({"status": "ok"})

    @app.route("/login", methods=["GET"])
    def login():
        """Redirect to the Spotify authorize page."""
        return redirect(token_provider.oauth.get_authorize_url())

    @app.route("/callback", methods=["GET"])
    def callback():
        """Exchange the authorization code for access and refresh tokens."""
        code = request.args.get("code")
        if not code:
            return redirect("/?error=no_code")

        try:
            token_info = token_provider.oauth.get_access_token(code, as_dict=True, check_cache=False)
        except (SpotifyOauthError, requests.RequestException) as e:
            logger.error("Token exchange failed: %s", e)
            return redirect("/?error=token_failed")

        session.permanent = True
        store_token(session, token_info)
        return redirect("/")

    @app.route("/logout", methods=["GET"])
    def logout():
        session.clear()
        return redirect("/")

    @app.route("/api/me", methods=["GET"])
    def me():
        """Current user's Spotify profile."""
        try:
            token = token_provider.get_valid_token(session)
            return jsonify(client_factory(token).me())
        except Exception as e:
            logger.warning("Profile lookup failed: %s", e)
            return jsonify({"error": NotAuthenticated.code}), NotAuthenticated.status

    @app.route("/api/playlists", methods=["GET"])
    def playlists():
        """First page (up to 50) of the current user's playlists."""
        token = token_provider.get_valid_token(session)
        try:
            return jsonify(client_factory(token).playlists())
        except Exception as e:
            logger.error("Playlist listing failed: %s", e)
            return jsonify({"error": "fetch_failed"}), 500

    @app.route("/api/playlist/<playlist_id>/analyze", methods=["GET"])
    def analyze(playlist_id: str):
        """Analyze one playlist; errors are mapped by the SpotistatsError handler."""
        return jsonify(analyzer.analyze(playlist_id, session))

    return app


if __name__ == "__main__":
    settings = Settings.from_env()
    configure_logging(settings.debug)
    app = create_app(settings)

    print("=" * 60)
    print("Spotistats Server")
    print("=" * 60)
    print(f"Server starting on http://0.0.0.0:{settings.port}")
    print(f"Login at http://localhost:{settings.port}/login")
    print("=" * 60)

    try:
        app.run(host="0.0.0.0", port=settings.port, debug=settings.debug)
    except OSError as e:
        if "Address already in use" in str(e):
            print(f"\n❌ ERROR: Port {settings.port} is already in use.")
            print(f"Use a different port: SPOTISTATS_SERVER_PORT={settings.port + 1} python -m spotistats.server")
            sys.exit(1)
        raise
