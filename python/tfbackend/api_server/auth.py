"""
HTTP Basic authentication for the API server.

Credentials come from the BackendConfig handed to create_app(). When either
the username or the password is unset, authentication is disabled.
"""

import base64
import binascii
import logging
import secrets
from typing import Iterable, Optional

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse

from ..config import BackendConfig

logger = logging.getLogger(__name__)

REALM = "Restricted"


def check_credentials(auth_header: Optional[str], username: str, password: str) -> bool:
    """
    Check an Authorization header against the expected credentials.

    Args:
        auth_header: Raw header value, e.g. "Basic dXNlcjpwYXNz"
        username: Expected username
        password: Expected password

    Returns:
        True if the header carries exactly these credentials
    """
    prefix = "Basic "
    if not auth_header or not auth_header.startswith(prefix):
        return False
    try:
        decoded = base64.b64decode(auth_header[len(prefix):], validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return False

    user, sep, pwd = decoded.partition(":")
    if not sep:
        return False

    # Both comparisons always run
    user_ok = secrets.compare_digest(user.encode("utf-8"), username.encode("utf-8"))
    pwd_ok = secrets.compare_digest(pwd.encode("utf-8"), password.encode("utf-8"))
    return user_ok and pwd_ok


def unauthorized_response() -> PlainTextResponse:
    return PlainTextResponse(
        "Unauthorized",
        status_code=401,
        headers={"WWW-Authenticate": f'Basic realm="{REALM}"'},
    )


def install_basic_auth(
    app: FastAPI,
    config: BackendConfig,
    exempt_paths: Iterable[str] = ("/health",),
) -> bool:
    """
    Install the Basic auth middleware on `app` if the config enables it.

    Returns:
        True if authentication is enforced
    """
    if not config.auth_enabled:
        logger.warning("Basic authentication is disabled")
        return False

    username = config.auth_username
    password = config.auth_password
    exempt = frozenset(exempt_paths)

    @app.middleware("http")
    async def basic_auth(request: Request, call_next):
        if request.url.path in exempt:
            return await call_next(request)
        if not check_credentials(request.headers.get("Authorization"), username, password):
            logger.warning("Unauthorized: %s", request.url.path)
            return unauthorized_response()
        return await call_next(request)

    logger.info("Basic authentication enabled")
    return True
