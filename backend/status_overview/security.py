"""Bearer-token permission evaluation and the elevated execution context.

Tokens are read from the environment at startup (see ``config``). Token
values are **never** logged or returned via any API.
"""

from __future__ import annotations

import hmac
import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator

logger = logging.getLogger("status_overview.security")


class Permission(str, Enum):
    READ = "status_overview.read"
    ADMINISTER = "administer"


class AuthorizationError(Exception):
    """Raised when the calling identity lacks a required permission."""

    def __init__(self, identity: str, permission: Permission) -> None:
        self.identity = identity
        self.permission = permission
        super().__init__(f"{identity} is missing the {permission.value} permission")


@dataclass(frozen=True)
class ExecutionContext:
    """Identity that runtime calls are made on behalf of."""

    identity: str
    permissions: frozenset[Permission] = field(default_factory=frozenset)
    elevated: bool = False


ANONYMOUS = ExecutionContext(identity="anonymous")
SYSTEM = ExecutionContext(
    identity="SYSTEM",
    permissions=frozenset({Permission.READ, Permission.ADMINISTER}),
    elevated=True,
)


def _bearer_token(authorization: str | None) -> str:
    prefix = "Bearer "
    if not authorization or not authorization.startswith(prefix):
        return ""
    return authorization[len(prefix):].strip()


class PermissionEvaluator:
    def __init__(self, read_token: str = "", admin_token: str = "") -> None:
        self._read_token = read_token
        self._admin_token = admin_token

    def authenticate(self, authorization: str | None) -> ExecutionContext:
        """Map an ``Authorization`` header onto an execution context.

        Unknown or missing tokens resolve to :data:`ANONYMOUS` rather than
        failing; permission checks decide what the caller may do.
        """
        token = _bearer_token(authorization)
        if not token:
            return ANONYMOUS
        if self._admin_token and hmac.compare_digest(token, self._admin_token):
            return ExecutionContext(
                identity="admin",
                permissions=frozenset({Permission.READ, Permission.ADMINISTER}),
            )
        if self._read_token and hmac.compare_digest(token, self._read_token):
            return ExecutionContext(identity="reader", permissions=frozenset({Permission.READ}))
        return ANONYMOUS

    def has_permission(self, context: ExecutionContext, permission: Permission) -> bool:
        if Permission.ADMINISTER in context.permissions:
            return True
        return permission in context.permissions

    def has_read_permission(self, context: ExecutionContext) -> bool:
        return self.has_permission(context, Permission.READ)

    def require_read_permission(self, context: ExecutionContext) -> None:
        if not self.has_read_permission(context):
            raise AuthorizationError(context.identity, Permission.READ)

    def require_admin_permission(self, context: ExecutionContext) -> None:
        if not self.has_permission(context, Permission.ADMINISTER):
            raise AuthorizationError(context.identity, Permission.ADMINISTER)

    @contextmanager
    def elevated(self) -> Iterator[ExecutionContext]:
        """Run the enclosed block as SYSTEM, independent of the caller."""
        logger.debug("Entering elevated context")
        try:
            yield SYSTEM
        finally:
            logger.debug("Leaving elevated context")
