import hmac
import logging
import os
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt
from pydantic import AliasChoices, BaseModel, Field

from app import config
from app.errors import AuthError


logger = logging.getLogger("agendamentos.security")

JWT_ALGORITHM = "HS256"
BACKOFFICE_SUBJECT = "celesc_admin"


class LoginArgs(BaseModel):
    password: str = Field(min_length=1, validation_alias=AliasChoices("senha", "password"))


def parse_login_args(raw_args: dict[str, Any]) -> LoginArgs:
    return LoginArgs.model_validate(raw_args)


def _resolve_secret(env_name: str, dev_default: str) -> str:
    value = os.getenv(env_name, "")
    if value:
        return value

    if config.is_dev_env():
        logger.warning("%s is not set in dev; using the built-in default.", env_name)
        return dev_default

    logger.error("%s is required outside dev.", env_name)
    raise AuthError(
        "Autenticação do backoffice não configurada.",
        error_code="BACKOFFICE_AUTH_NOT_CONFIGURED",
        status_code=500,
    )


def backoffice_password() -> str:
    return _resolve_secret("BACKOFFICE_PASSWORD", config.DEFAULT_BACKOFFICE_PASSWORD)


def jwt_secret() -> str:
    return _resolve_secret("JWT_SECRET", config.DEFAULT_JWT_SECRET)


def issue_backoffice_token(password: str, now: datetime | None = None) -> str:
    expected = backoffice_password()
    if not hmac.compare_digest(password.encode("utf-8"), expected.encode("utf-8")):
        raise AuthError("Senha incorreta.", error_code="INVALID_PASSWORD")

    issued_at = now or datetime.now(timezone.utc)
    expires_at = issued_at + timedelta(hours=config.jwt_expires_hours())
    payload = {
        "sub": BACKOFFICE_SUBJECT,
        "iat": int(issued_at.timestamp()),
        "exp": int(expires_at.timestamp()),
    }
    return jwt.encode(payload, jwt_secret(), algorithm=JWT_ALGORITHM)


def decode_backoffice_token(token: str) -> dict[str, Any]:
    if not token:
        raise AuthError("Token ausente.", error_code="MISSING_TOKEN")

    try:
        payload = jwt.decode(token, jwt_secret(), algorithms=[JWT_ALGORITHM])
    except JWTError as exc:
        raise AuthError(
            "Token inválido ou expirado.",
            error_code="INVALID_TOKEN",
            status_code=403,
        ) from exc

    if payload.get("sub") != BACKOFFICE_SUBJECT:
        raise AuthError(
            "Token inválido ou expirado.",
            error_code="INVALID_TOKEN",
            status_code=403,
        )
    return payload
