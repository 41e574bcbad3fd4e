"""oauthgate - OAuth redirect initiation with open-redirect protection."""

__version__ = "0.1.0"
