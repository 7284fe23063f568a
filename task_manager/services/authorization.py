"""Bearer-credential gate in front of every task operation."""

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Request

from ..errors import Unauthorized
from .auth_service import AuthService, InvalidTokenError, get_auth_service

logger = logging.getLogger(__name__)

MISSING_CREDENTIAL = "missing or malformed credential"
INVALID_CREDENTIAL = "invalid credential"
MALFORMED_PAYLOAD = "malformed credential payload"


@dataclass(frozen=True)
class RequestContext:
    """Verified identity of the caller, passed explicitly into the task service."""

    subject_id: str


class AuthorizationGate:
    def __init__(self, auth_service: AuthService) -> None:
        self.auth_service = auth_service

    def authorize(self, raw_credential: Optional[str]) -> str:
        """Resolve ``Bearer <token>`` to the subject id or raise ``Unauthorized``."""
        if not raw_credential:
            logger.info("Rejected request without credential")
            raise Unauthorized(MISSING_CREDENTIAL)

        scheme, _, token = raw_credential.partition(" ")
        token = token.strip()
        if scheme != "Bearer" or not token:
            logger.info("Rejected credential with unexpected scheme")
            raise Unauthorized(MISSING_CREDENTIAL)

        try:
            payload = self.auth_service.verify_token(token)
        except InvalidTokenError as exc:
            logger.info("Rejected token", extra={"reason": str(exc)})
            raise Unauthorized(INVALID_CREDENTIAL) from exc

        subject_id = payload.get("sub")
        if not isinstance(subject_id, str) or not subject_id:
            logger.info("Rejected token without subject")
            raise Unauthorized(MALFORMED_PAYLOAD)
        return subject_id


def get_authorization_gate(auth_service: AuthService = Depends(get_auth_service)) -> AuthorizationGate:
    return AuthorizationGate(auth_service)


async def get_request_context(
    request: Request,
    gate: AuthorizationGate = Depends(get_authorization_gate),
) -> RequestContext:
    """Get the caller's context from the Authorization header."""
    subject_id = gate.authorize(request.headers.get("Authorization"))
    return RequestContext(subject_id=subject_id)
