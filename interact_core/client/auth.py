"""Authentication session state over :class:`BackendClient`.

Mirrors what a UI needs to render auth: ``is_authenticated``,
``access_token``, ``user``, ``loading`` and ``error``. Operations return a
boolean instead of raising; the failure text lands in ``error``.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from pydantic import ValidationError

from ..base.dto import ApiResponse, AuthResultDTO
from ..base.logging import LogContext, get_logger, log_event
from .backend import BackendClient


class AuthSession:
    def __init__(self, backend: BackendClient) -> None:
        self.backend = backend
        self.user: Optional[Dict[str, Any]] = None
        self.loading = False
        self.error: Optional[str] = None
        self._logger = get_logger("interact.auth")

    @property
    def access_token(self) -> Optional[str]:
        return self.backend.access_token

    @property
    def is_authenticated(self) -> bool:
        return self.backend.is_authenticated

    async def signup(self, name: str, email: str, password: str) -> bool:
        self._begin()
        return self._accept(await self.backend.signup(name, email, password), "Signup failed")

    async def login(self, email: str, password: str) -> bool:
        self._begin()
        return self._accept(await self.backend.login(email, password), "Login failed")

    async def refresh(self) -> bool:
        self._begin()
        return self._accept(await self.backend.refresh_token(), "Refresh failed")

    async def logout(self) -> None:
        """Notify the backend, then drop local credentials whatever it answered."""
        self.loading = True
        try:
            await self.backend.logout()
        finally:
            self.backend.clear_credentials()
            self.user = None
            self.error = None
            self.loading = False

    def _begin(self) -> None:
        self.loading = True
        self.error = None

    def _accept(self, res: ApiResponse, failure: str) -> bool:
        self.loading = False
        if not res.success:
            self.error = res.error or failure
            return False
        try:
            result = AuthResultDTO.model_validate(res.data or {})
        except ValidationError:
            self.error = failure
            return False
        self.backend.set_credentials(result.access_token)
        self.user = result.user
        log_event(self._logger, "auth.session_started", LogContext(component="auth"), level=logging.DEBUG)
        return True


__all__ = ["AuthSession"]
