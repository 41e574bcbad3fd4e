"""Pre-configured OAuth provider templates.

Provides factory functions and templates for common OAuth2 providers
like GitHub, Google and Facebook, plus a generic OAuth2 provider.
"""

from __future__ import annotations

from oauthgate.security.oauth.config import ProviderConfig


def create_github_provider(
    client_id: str,
    client_secret: str,
    name: str = "github",
    scopes: list[str] | None = None,
) -> ProviderConfig:
    """Create GitHub OAuth provider configuration.

    Args:
        client_id: GitHub OAuth App client ID
        client_secret: GitHub OAuth App client secret
        name: Resource owner name used in routes and check paths
        scopes: OAuth scopes to request (defaults to user:email)

    Returns:
        Configured ProviderConfig for GitHub
    """
    return ProviderConfig(
        name=name,
        client_id=client_id,
        client_secret=client_secret,
        authorize_url="https://github.com/login/oauth/authorize",
        token_url="https://github.com/login/oauth/access_token",
        userinfo_url="https://api.github.com/user",
        scopes=scopes or ["user:email"],
        scope_separator=",",
    )


def create_google_provider(
    client_id: str,
    client_secret: str,
    name: str = "google",
    scopes: list[str] | None = None,
) -> ProviderConfig:
    """Create Google OAuth provider configuration.

    Args:
        client_id: Google OAuth client ID
        client_secret: Google OAuth client secret
        name: Resource owner name used in routes and check paths
        scopes: OAuth scopes to request (defaults to openid, email, profile)

    Returns:
        Configured ProviderConfig for Google
    """
    return ProviderConfig(
        name=name,
        client_id=client_id,
        client_secret=client_secret,
        authorize_url="https://accounts.google.com/o/oauth2/v2/auth",
        token_url="https://oauth2.googleapis.com/token",
        userinfo_url="https://openidconnect.googleapis.com/v1/userinfo",
        scopes=scopes or ["openid", "email", "profile"],
    )


def create_facebook_provider(
    client_id: str,
    client_secret: str,
    name: str = "facebook",
    scopes: list[str] | None = None,
    display: str | None = None,
) -> ProviderConfig:
    """Create Facebook OAuth provider configuration.

    Args:
        client_id: Facebook App ID
        client_secret: Facebook App secret
        name: Resource owner name used in routes and check paths
        scopes: OAuth scopes to request (defaults to email)
        display: Optional login dialog display mode ("page", "popup", "touch")

    Returns:
        Configured ProviderConfig for Facebook
    """
    parameters = {"display": display} if display else {}
    return ProviderConfig(
        name=name,
        client_id=client_id,
        client_secret=client_secret,
        authorize_url="https://www.facebook.com/v19.0/dialog/oauth",
        token_url="https://graph.facebook.com/v19.0/oauth/access_token",
        userinfo_url="https://graph.facebook.com/v19.0/me",
        scopes=scopes or ["email"],
        scope_separator=",",
        authorization_parameters=parameters,
    )


def create_oauth2_provider(
    client_id: str,
    client_secret: str,
    authorize_url: str,
    name: str = "oauth2",
    token_url: str | None = None,
    userinfo_url: str | None = None,
    scopes: list[str] | None = None,
) -> ProviderConfig:
    """Create a generic OAuth2 provider configuration.

    Args:
        client_id: OAuth client ID
        client_secret: OAuth client secret
        authorize_url: The provider's authorization endpoint
        name: Resource owner name used in routes and check paths
        token_url: The provider's token endpoint
        userinfo_url: The provider's user profile endpoint
        scopes: OAuth scopes to request

    Returns:
        Configured ProviderConfig for the OAuth2 provider
    """
    return ProviderConfig(
        name=name,
        client_id=client_id,
        client_secret=client_secret,
        authorize_url=authorize_url,
        token_url=token_url,
        userinfo_url=userinfo_url,
        scopes=scopes or [],
    )


def create_provider(
    provider_type: str,
    client_id: str,
    client_secret: str,
    authorize_url: str | None = None,
    **kwargs,
) -> ProviderConfig:
    """Factory to create provider config from type name.

    Args:
        provider_type: One of "github", "google", "facebook" or "oauth2"
        client_id: OAuth client ID
        client_secret: OAuth client secret
        authorize_url: Authorization endpoint (required for "oauth2" type)
        **kwargs: Additional arguments passed to the provider factory

    Returns:
        Configured ProviderConfig

    Raises:
        ValueError: If provider_type is unknown or required args are missing
    """
    provider_type = provider_type.lower()

    if provider_type == "github":
        return create_github_provider(client_id, client_secret, **kwargs)

    elif provider_type == "google":
        return create_google_provider(client_id, client_secret, **kwargs)

    elif provider_type == "facebook":
        return create_facebook_provider(client_id, client_secret, **kwargs)

    elif provider_type == "oauth2":
        if not authorize_url:
            raise ValueError("OAuth2 provider requires authorize_url")
        return create_oauth2_provider(
            client_id=client_id,
            client_secret=client_secret,
            authorize_url=authorize_url,
            **kwargs,
        )

    else:
        raise ValueError(
            f"Unknown provider type: {provider_type}. "
            "Supported: 'github', 'google', 'facebook', 'oauth2'"
        )
