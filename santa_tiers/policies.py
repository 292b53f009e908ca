from __future__ import annotations

import hmac

from flask import current_app

from .errors import AuthorizationFailure


def reset_token_matches(token: str | None, secret: str | None) -> bool:
    # An unset secret disables admin resets entirely.
    if not token or not secret:
        return False
    return hmac.compare_digest(token.encode("utf-8"), secret.encode("utf-8"))


def require_reset_token(token: str | None, secret: str | None) -> None:
    if not reset_token_matches(token, secret):
        current_app.logger.warning("Rejected round reset: invalid admin token.")
        raise AuthorizationFailure()
