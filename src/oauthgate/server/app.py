"""aiohttp application wiring for the redirect endpoint.

Registries are assembled once from OAuthGateConfig when the application
is created and are read-only while requests are served.
"""

from __future__ import annotations

import dataclasses
from typing import Any

import structlog
from aiohttp import web

from oauthgate.core.config import FirewallSettings, OAuthGateConfig, ResourceOwnerSettings
from oauthgate.security.oauth.config import ProviderConfig
from oauthgate.security.oauth.controller import RedirectToServiceController
from oauthgate.security.oauth.errors import (
    AccessDeniedError,
    ConfigurationError,
    ResourceOwnerNotFoundError,
)
from oauthgate.security.oauth.owner_map import ResourceOwnerMap, ResourceOwnerMapLocator
from oauthgate.security.oauth.providers import create_provider
from oauthgate.security.oauth.resource_owner import OAuth2ResourceOwner
from oauthgate.security.oauth.session import SessionManager
from oauthgate.security.oauth.state import StateStore
from oauthgate.security.oauth.utils import OAuthUtils, SecurityContext
from oauthgate.security.whitelist import DomainWhitelist

logger = structlog.get_logger()

CONTROLLER_KEY = web.AppKey("controller", RedirectToServiceController)
SESSION_MANAGER_KEY = web.AppKey("session_manager", SessionManager)
STATE_STORE_KEY = web.AppKey("state_store", StateStore)
CONFIG_KEY = web.AppKey("config", OAuthGateConfig)

ENDPOINT_FIELDS = ("authorize_url", "token_url", "userinfo_url")


def build_provider_config(name: str, settings: ResourceOwnerSettings) -> ProviderConfig:
    """Turn resource owner settings into a ProviderConfig.

    Endpoints set on a built-in provider type (github, google, facebook)
    override that provider's defaults.
    """
    kwargs: dict[str, Any] = {"name": name}
    if settings.scopes is not None:
        kwargs["scopes"] = settings.scopes
    if settings.type.lower() == "oauth2":
        kwargs["token_url"] = settings.token_url
        kwargs["userinfo_url"] = settings.userinfo_url

    provider = create_provider(
        provider_type=settings.type,
        client_id=settings.client_id,
        client_secret=settings.client_secret,
        authorize_url=settings.authorize_url,
        **kwargs,
    )

    overrides = {
        field: getattr(settings, field)
        for field in ENDPOINT_FIELDS
        if getattr(settings, field) is not None
    }
    if overrides:
        provider = dataclasses.replace(provider, **overrides)
    return provider


def build_resource_owner_map(
    firewall: FirewallSettings,
    base_url: str | None = None,
    state_store: StateStore | None = None,
) -> ResourceOwnerMap:
    owners = {}
    check_paths = {}
    for name, settings in firewall.resource_owners.items():
        owners[name] = OAuth2ResourceOwner(
            build_provider_config(name, settings),
            state_store=state_store,
        )
        if settings.check_path:
            check_paths[name] = settings.check_path

    return ResourceOwnerMap(
        owners,
        check_paths=check_paths,
        check_path=firewall.check_path,
        base_url=base_url,
    )


def build_oauth_utils(
    config: OAuthGateConfig,
    state_store: StateStore | None = None,
) -> OAuthUtils:
    """Assemble security contexts and a frozen resource owner map locator."""
    contexts = []
    maps = {}
    for firewall in config.firewalls:
        contexts.append(
            SecurityContext(
                name=firewall.name,
                pattern=firewall.pattern,
                check_path=firewall.check_path,
            )
        )
        maps[firewall.name] = build_resource_owner_map(firewall, config.base_url, state_store)

    return OAuthUtils(contexts, ResourceOwnerMapLocator.from_mapping(maps))


def build_controller(
    config: OAuthGateConfig,
    state_store: StateStore | None = None,
) -> RedirectToServiceController:
    return RedirectToServiceController(
        oauth_utils=build_oauth_utils(config, state_store),
        domain_whitelist=DomainWhitelist(config.whitelisted_domains),
        target_path_parameter=config.target_path_parameter,
        failed_use_referer=config.failed_use_referer,
        use_referer=config.use_referer,
    )


async def handle_redirect_to_service(request: web.Request) -> web.StreamResponse:
    """GET {connect_path}/{service}: start the OAuth flow for ``service``."""
    app = request.app
    config = app[CONFIG_KEY]
    controller = app[CONTROLLER_KEY]
    session_manager = app[SESSION_MANAGER_KEY]
    service = request.match_info["service"]

    session, created = await session_manager.get_or_create_session(
        request.cookies.get(config.session_cookie_name)
    )

    try:
        response = controller.redirect_to_service(request, service, session)
    except ResourceOwnerNotFoundError as e:
        logger.info("Unknown resource owner requested", resource_owner=service)
        raise web.HTTPNotFound(text=str(e)) from e
    except AccessDeniedError as e:
        raise web.HTTPForbidden(text=str(e)) from e
    except ConfigurationError as e:
        logger.error("OAuth redirect misconfigured", error=str(e), path=request.path)
        raise web.HTTPInternalServerError(text="OAuth redirect is not configured") from e
    finally:
        if created and not session.data:
            await session_manager.delete_session(session.session_id)

    if created and session.data:
        response.set_cookie(
            config.session_cookie_name,
            session.session_id,
            max_age=session_manager.session_duration,
            httponly=True,
            secure=True,
            samesite="Lax",
            path="/",
        )
    raise response


async def handle_health(request: web.Request) -> web.Response:
    return web.json_response({"status": "ok"})


async def _start_session_manager(app: web.Application) -> None:
    await app[SESSION_MANAGER_KEY].start()


async def _stop_session_manager(app: web.Application) -> None:
    await app[SESSION_MANAGER_KEY].stop()


def create_app(
    config: OAuthGateConfig,
    session_manager: SessionManager | None = None,
    state_store: StateStore | None = None,
) -> web.Application:
    """Create the aiohttp application serving the redirect endpoint.

    Args:
        config: Service configuration
        session_manager: Session store (a new in-memory store by default)
        state_store: Issued OAuth state values (a new in-memory store by default)

    Returns:
        Configured aiohttp application
    """
    app = web.Application()
    app[CONFIG_KEY] = config
    app[STATE_STORE_KEY] = state_store if state_store is not None else StateStore()
    app[CONTROLLER_KEY] = build_controller(config, app[STATE_STORE_KEY])
    app[SESSION_MANAGER_KEY] = session_manager or SessionManager(
        session_duration=config.session_duration,
    )

    app.router.add_get(f"{config.connect_path}/{{service}}", handle_redirect_to_service)
    app.router.add_get("/health", handle_health)

    app.on_startup.append(_start_session_manager)
    app.on_cleanup.append(_stop_session_manager)

    logger.info(
        "OAuth redirect app created",
        firewalls=[firewall.name for firewall in config.firewalls],
        whitelisted_domains=config.whitelisted_domains,
    )
    return app
