"""Security module for oauthgate.

This module provides:
- Domain whitelisting for post-authentication redirect targets
- OAuth resource owner registries and security context resolution
- The redirect-to-service controller
"""

from oauthgate.security.whitelist import DomainWhitelist

__all__ = ["DomainWhitelist"]
