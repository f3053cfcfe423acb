# Copyright 2026 Firefly Software Solutions Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""JWT token encoding, decoding, and SecurityContext extraction."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt

from stockfly.kernel.exceptions import UnauthorizedException
from stockfly.security.context import SecurityContext


class JWTService:
    """Issues and verifies HMAC-signed access tokens.

    Args:
        secret: Secret key for HMAC-based signing.
        algorithm: JWT algorithm (default: HS256).
    """

    def __init__(self, secret: str, algorithm: str = "HS256") -> None:
        self._secret = secret
        self._algorithm = algorithm

    def encode(self, payload: dict[str, Any]) -> str:
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def issue(
        self,
        subject: str,
        roles: Sequence[str] = (),
        email: str | None = None,
        company_id: str | None = None,
        expires_in: timedelta = timedelta(hours=1),
    ) -> str:
        """Issue a token for *subject* that expires after *expires_in*."""
        now = datetime.now(UTC)
        payload: dict[str, Any] = {"sub": subject, "roles": list(roles), "iat": now, "exp": now + expires_in}
        if email is not None:
            payload["email"] = email
        if company_id is not None:
            payload["companyId"] = company_id
        return self.encode(payload)

    def decode(self, token: str) -> dict[str, Any]:
        """Decode and validate a JWT token.

        Raises:
            UnauthorizedException: ``TOKEN_EXPIRED`` for an expired token,
                ``INVALID_TOKEN`` for anything else PyJWT rejects.
        """
        try:
            return jwt.decode(token, self._secret, algorithms=[self._algorithm], options={"require": ["sub"]})
        except jwt.ExpiredSignatureError as exc:
            raise UnauthorizedException("Access token expired", code="TOKEN_EXPIRED") from exc
        except jwt.PyJWTError as exc:
            raise UnauthorizedException(f"Invalid token: {exc}", code="INVALID_TOKEN") from exc

    def to_security_context(self, token: str) -> SecurityContext:
        """Decode *token* and build a :class:`SecurityContext` from its claims."""
        payload = self.decode(token)
        return SecurityContext(
            user_id=str(payload["sub"]),
            email=payload.get("email"),
            company_id=payload.get("companyId"),
            roles=tuple(payload.get("roles", ())),
        )
