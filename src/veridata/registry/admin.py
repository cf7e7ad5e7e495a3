# src/veridata/registry/admin.py

import logging

from veridata.errors import EmptyInputError, NotAuthorizedError
from veridata.hashing import is_null_identity

logger = logging.getLogger(__name__)


class AdminGate:
    """
    Authorization capability for the single administrative principal.

    The principal is fixed when the gate is built from configuration and is
    checked against the caller passed explicitly into each guarded call.
    """

    def __init__(self, admin_principal: str):
        if is_null_identity(admin_principal):
            raise EmptyInputError("Administrative principal must not be empty")
        self._admin = admin_principal.strip()

    @property
    def admin(self) -> str:
        return self._admin

    def is_admin(self, principal) -> bool:
        return isinstance(principal, str) and principal.strip() == self._admin

    def authorize(self, principal, action: str = "admin action") -> None:
        """
        Raise NotAuthorizedError unless ``principal`` is the administrator.

        Args:
            principal: Caller identity
            action: Description used in the error and log message
        """
        if not self.is_admin(principal):
            logger.warning(f"Unauthorized {action} attempted by {principal!r}")
            raise NotAuthorizedError(
                f"{principal!r} is not allowed to perform {action}", subject=principal
            )
