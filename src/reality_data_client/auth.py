"""Access token handling for Reality Data API requests.

Tokens are acquired by the application (the authorizer); the client only
turns them into an Authorization header.
"""

from typing import NewType

AccessToken = NewType("AccessToken", str)

BEARER_SCHEME = "Bearer"


def authorization_header(access_token: str) -> str:
    """Build the Authorization header value for a token.

    Tokens that already carry a scheme (e.g. ``"Bearer eyJ..."``, as handed out
    by most iTwin authorization clients) are sent verbatim.

    Raises:
        ValueError: If the token is empty
    """
    token = (access_token or "").strip()
    if not token:
        raise ValueError("access token must be non-empty")
    if " " in token:
        return token
    return f"{BEARER_SCHEME} {token}"


__all__ = ["AccessToken", "BEARER_SCHEME", "authorization_header"]
