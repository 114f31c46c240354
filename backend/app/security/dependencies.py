import logging
from typing import Any

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.errors import AuthError
from app.security.tokens import decode_backoffice_token

logger = logging.getLogger("agendamentos.security")

bearer_scheme = HTTPBearer(auto_error=False)


def require_backoffice_token(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> dict[str, Any]:
    token = ""
    if credentials is not None and credentials.scheme.lower() == "bearer":
        token = credentials.credentials

    try:
        return decode_backoffice_token(token)
    except AuthError as exc:
        logger.warning(
            "Backoffice auth rejected. path=%s error_code=%s",
            request.url.path,
            exc.error_code,
        )
        raise HTTPException(
            status_code=exc.status_code,
            detail={
                "error_code": exc.error_code,
                "human_message": exc.human_message,
            },
        ) from exc
