"""
Shared-secret check for admin routes.
"""

from __future__ import annotations

import hmac
import logging
from dataclasses import dataclass
from typing import Any, Optional

from knowledge_base.errors import UnauthorizedError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AdminAuthorizer:
    secret: Optional[str]

    @property
    def configured(self) -> bool:
        return bool(self.secret)

    def verify(self, supplied: Any) -> bool:
        """Exact comparison of ``supplied`` against the configured secret."""
        if not self.secret or not isinstance(supplied, str):
            return False
        return hmac.compare_digest(
            supplied.encode("utf-8"), self.secret.encode("utf-8")
        )

    def require(self, supplied: Any, *, route: str) -> None:
        if self.verify(supplied):
            return
        if not self.configured:
            logger.warning("Admin request to %s rejected: ADMIN_PASSWORD not set", route)
        else:
            logger.warning("Admin request to %s rejected: bad password", route)
        raise UnauthorizedError()
