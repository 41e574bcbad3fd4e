"""OAuth redirect initiation.

Resolves the security context of a request, validates and stores the
post-authentication target path, then redirects to the resource owner's
authorization URL.

Example usage:

    from oauthgate.security import DomainWhitelist
    from oauthgate.security.oauth import (
        OAuth2ResourceOwner,
        OAuthUtils,
        RedirectToServiceController,
        ResourceOwnerMap,
        ResourceOwnerMapLocator,
        SecurityContext,
        create_provider,
    )

    github = OAuth2ResourceOwner(
        create_provider("github", client_id="...", client_secret="...")
    )
    locator = ResourceOwnerMapLocator.from_mapping(
        {"main": ResourceOwnerMap({"github": github})}
    )
    utils = OAuthUtils([SecurityContext("main", pattern="^/")], locator)

    controller = RedirectToServiceController(
        utils,
        DomainWhitelist([".mycompany.com"]),
        use_referer=True,
    )
    response = controller.redirect_to_service(request, "github", session)
"""

from oauthgate.security.oauth.config import ProviderConfig
from oauthgate.security.oauth.controller import RedirectToServiceController
from oauthgate.security.oauth.errors import (
    AccessDeniedError,
    ConfigurationError,
    OAuthRedirectError,
    ResourceOwnerMapNotFoundError,
    ResourceOwnerNotFoundError,
    SecurityContextNotFoundError,
)
from oauthgate.security.oauth.owner_map import ResourceOwnerMap, ResourceOwnerMapLocator
from oauthgate.security.oauth.providers import (
    create_facebook_provider,
    create_github_provider,
    create_google_provider,
    create_oauth2_provider,
    create_provider,
)
from oauthgate.security.oauth.resource_owner import OAuth2ResourceOwner, ResourceOwner
from oauthgate.security.oauth.session import RedirectSession, Session, SessionManager
from oauthgate.security.oauth.state import PendingState, StateStore
from oauthgate.security.oauth.utils import OAuthUtils, SecurityContext

__all__ = [
    # Controller
    "RedirectToServiceController",
    # Errors
    "AccessDeniedError",
    "ConfigurationError",
    "OAuthRedirectError",
    "ResourceOwnerMapNotFoundError",
    "ResourceOwnerNotFoundError",
    "SecurityContextNotFoundError",
    # Registries
    "OAuthUtils",
    "ResourceOwnerMap",
    "ResourceOwnerMapLocator",
    "SecurityContext",
    # Resource owners
    "OAuth2ResourceOwner",
    "ProviderConfig",
    "ResourceOwner",
    "create_facebook_provider",
    "create_github_provider",
    "create_google_provider",
    "create_oauth2_provider",
    "create_provider",
    # Session
    "RedirectSession",
    "Session",
    "SessionManager",
    # State
    "PendingState",
    "StateStore",
]
