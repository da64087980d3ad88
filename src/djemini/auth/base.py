from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol


class AuthHealthStatus(str, Enum):
    OK = "ok"
    OK_API_QUOTA = "ok_api_quota"
    AUTH_INVALID = "auth_invalid"
    FAILED = "failed"


@dataclass(frozen=True)
class AuthHealthResult:
    provider: str
    status: AuthHealthStatus
    message: str

    @property
    def ok(self) -> bool:
        return self.status in (AuthHealthStatus.OK, AuthHealthStatus.OK_API_QUOTA)


class AuthProvider(Protocol):
    """
    Credential provider interface.

    - load_credential() loads (and refreshes) a stored credential; never prompts
    - login() runs the interactive consent flow and persists the result
    - logout() forgets the stored token
    - build_client() returns an authenticated API client
    - health_check() performs a cheap authenticated call
    """

    name: str

    def load_credential(self) -> bool: ...

    def login(self) -> None: ...

    def logout(self) -> bool: ...

    def build_client(self) -> Any: ...

    def health_check(self) -> AuthHealthResult: ...
