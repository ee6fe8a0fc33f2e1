"""Tagged permission sets keyed by principal"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict
from ..errors import NotAuthorized

class Role(Enum):
    UNAUTHORIZED = 0
    AUTHORIZED = 1

@dataclass
class AuthorizationSet:
    """Role per principal; anything not listed is unauthorized"""
    roles: Dict[str, Role] = field(default_factory=dict)

    def role_of(self, principal: str) -> Role:
        return self.roles.get(principal, Role.UNAUTHORIZED)

    def is_authorized(self, principal: str) -> bool:
        return self.role_of(principal) is Role.AUTHORIZED

    def grant(self, principal: str) -> None:
        self.roles[principal] = Role.AUTHORIZED

    def revoke(self, principal: str) -> None:
        self.roles[principal] = Role.UNAUTHORIZED

    def require(self, principal: str) -> None:
        if not self.is_authorized(principal):
            raise NotAuthorized(f"Account {principal!r} is not authorized")
