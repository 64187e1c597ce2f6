from __future__ import annotations

import logging
import secrets

from fastapi import Depends, HTTPException, Request, status

from .config import Settings, get_settings

logger = logging.getLogger("security")


def verify_service_token(
    request: Request,
    settings: Settings = Depends(get_settings),
) -> None:
    expected = settings.service_token
    if not expected:
        # Open access for local development; warn once per process.
        if not getattr(request.app.state, "service_token_warning", False):
            logger.warning("BACKEND_SERVICE_TOKEN is not set; API is unauthenticated")
            request.app.state.service_token_warning = True  # type: ignore[attr-defined]
        return

    provided = request.headers.get("X-Service-Token", "")
    if not provided or not secrets.compare_digest(provided, expected):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="invalid service token")
