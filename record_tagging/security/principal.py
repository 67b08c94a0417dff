"""
Authenticated principal consumed by the access engine
"""
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Principal(BaseModel):
    """Identity (usually an email address) plus role names"""
    model_config = ConfigDict(frozen=True)

    identity: Optional[str] = None
    roles: List[str] = Field(default_factory=list)

    def has_role(self, role: str) -> bool:
        return role.lower() in {r.lower() for r in self.roles}

    def has_any_role(self, roles) -> bool:
        return any(self.has_role(role) for role in roles)

    @property
    def normalized_identity(self) -> Optional[str]:
        if not self.identity or not self.identity.strip():
            return None
        return self.identity.strip().lower()

    @property
    def local_part(self) -> Optional[str]:
        identity = self.normalized_identity
        if identity is None:
            return None
        return identity.split("@", 1)[0]

    @property
    def domain(self) -> Optional[str]:
        identity = self.normalized_identity
        if identity is None or "@" not in identity:
            return None
        return identity.split("@", 1)[1]

    @property
    def display_name(self) -> str:
        return self.identity or "Anonymous"
