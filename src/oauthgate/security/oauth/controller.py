"""Redirect-to-service controller.

Entry point of the OAuth login flow: it stores where the user should land
after authorization, then sends the browser to the provider.

Security: the landing location comes from attacker-controlled input (a
request parameter or the Referer header). It is validated against the
domain whitelist before anything is written to the session; a rejected
value fails the request instead of being silently dropped.
"""

from __future__ import annotations

from collections.abc import Mapping

import structlog
from aiohttp import web

from oauthgate.security.oauth.errors import AccessDeniedError
from oauthgate.security.oauth.session import RedirectSession
from oauthgate.security.oauth.utils import OAuthUtils
from oauthgate.security.whitelist import DomainWhitelist

logger = structlog.get_logger()


class RedirectToServiceController:
    """Starts the authorization redirect for a named resource owner.

    Args:
        oauth_utils: Resolves the security context of a request
        domain_whitelist: Hosts allowed as post-authentication targets
        target_path_parameter: Request parameter carrying the target path
        failed_use_referer: Store the target under the failure key
        use_referer: Fall back to the Referer header for the target path
        extra_parameters: Query parameters added to every authorization URL
    """

    def __init__(
        self,
        oauth_utils: OAuthUtils,
        domain_whitelist: DomainWhitelist,
        target_path_parameter: str | None = "_target_path",
        failed_use_referer: bool = False,
        use_referer: bool = False,
        extra_parameters: Mapping[str, str] | None = None,
    ):
        self._utils = oauth_utils
        self._whitelist = domain_whitelist
        self._target_path_parameter = target_path_parameter
        self._failed_use_referer = failed_use_referer
        self._use_referer = use_referer
        self._extra_parameters = dict(extra_parameters or {})

    def redirect_to_service(
        self,
        request: web.Request,
        service: str,
        session: RedirectSession,
    ) -> web.HTTPFound:
        """Redirect the browser to the authorization URL of ``service``.

        Args:
            request: The incoming request
            service: Name of the resource owner
            session: Session receiving the target path

        Returns:
            A redirect to the provider's authorization URL

        Raises:
            SecurityContextNotFoundError: No security context matches the request
            ResourceOwnerMapNotFoundError: The context has no resource owner map
            ResourceOwnerNotFoundError: ``service`` is not a known resource owner
            AccessDeniedError: The target path is not whitelisted
        """
        context_name, owner_map = self._utils.get_resource_owner_map(request)
        resource_owner = owner_map.get_resource_owner_by_name(service)

        target_path = self._get_target_path(request)
        if target_path is not None:
            self._store_target_path(context_name, target_path, session)

        check_path = owner_map.get_resource_owner_check_path(service, context_name)
        authorization_url = resource_owner.get_authorization_url(
            check_path, self._extra_parameters or None
        )

        logger.info(
            "Redirecting to resource owner",
            resource_owner=service,
            context=context_name,
            has_target_path=target_path is not None,
        )
        return web.HTTPFound(authorization_url)

    def _get_target_path(self, request: web.Request) -> str | None:
        """Pick the target path: explicit parameter first, then the Referer."""
        parameter = self._target_path_parameter
        if parameter:
            for source in (request, request.match_info, request.query):
                value = source.get(parameter)
                if isinstance(value, str) and value:
                    return value

        if self._use_referer or self._failed_use_referer:
            referer = request.headers.get("Referer")
            if referer:
                return referer

        return None

    def _store_target_path(
        self,
        context_name: str,
        target_path: str,
        session: RedirectSession,
    ) -> None:
        if not self._whitelist.is_whitelisted(target_path):
            logger.warning(
                "Blocked redirect to non-whitelisted target",
                context=context_name,
                target_path=target_path[:100],
            )
            raise AccessDeniedError(target_path)

        if self._failed_use_referer:
            key = OAuthUtils.failed_target_path_session_key(context_name)
        else:
            key = OAuthUtils.target_path_session_key(context_name)
        session.set(key, target_path)
