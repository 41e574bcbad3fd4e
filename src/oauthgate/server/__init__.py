"""aiohttp server exposing the OAuth redirect endpoint."""

from oauthgate.server.app import build_controller, build_oauth_utils, create_app

__all__ = ["build_controller", "build_oauth_utils", "create_app"]
