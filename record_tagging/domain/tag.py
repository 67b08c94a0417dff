"""
Tag value type and tag catalog definitions
"""
from datetime import datetime, timezone
from typing import Dict, Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _as_aware(value: datetime) -> datetime:
    # Documents written by other drivers may carry naive UTC datetimes
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class Tag(BaseModel):
    """
    Immutable, namespaced label attached to an entity.

    Tags carry provenance (source, createdBy), an optional confidence score
    and an optional expiry. Every change produces a new Tag.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    namespace: str
    source: str
    confidence: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    value: Optional[str] = None
    created_by: Optional[str] = Field(default=None, alias="createdBy")
    created_at: datetime = Field(default_factory=utc_now, alias="createdAt")
    expires_at: Optional[datetime] = Field(default=None, alias="expiresAt")
    metadata: Optional[Dict[str, str]] = None
    is_active: bool = Field(default=True, alias="isActive")
    version: int = 1

    @property
    def identifier(self) -> str:
        """namespace:name, or namespace:name=value for parameterized tags"""
        if self.value:
            return f"{self.namespace}:{self.name}={self.value}"
        return f"{self.namespace}:{self.name}"

    @property
    def effective_confidence(self) -> float:
        """Confidence used for ranking; absent means deterministic (1.0)"""
        return 1.0 if self.confidence is None else self.confidence

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        if self.expires_at is None:
            return False
        return (now or utc_now()) >= _as_aware(self.expires_at)

    def is_valid(self, now: Optional[datetime] = None) -> bool:
        return self.is_active and not self.is_expired(now)

    def deactivate(self) -> "Tag":
        return self.model_copy(update={"is_active": False})

    def with_expiration(self, expires_at: datetime) -> "Tag":
        return self.model_copy(update={"expires_at": expires_at})

    def with_metadata(self, key: str, value: str) -> "Tag":
        metadata = dict(self.metadata or {})
        metadata[key] = value
        return self.model_copy(update={"metadata": metadata})

    def to_document(self) -> Dict[str, Any]:
        """Persisted wire shape with camelCase keys"""
        return self.model_dump(by_alias=True)

    @classmethod
    def create(
        cls,
        name: str,
        namespace: str,
        source: str,
        confidence: Optional[float] = None,
        value: Optional[str] = None,
        created_by: Optional[str] = None,
        expires_at: Optional[datetime] = None,
        metadata: Optional[Dict[str, str]] = None,
    ) -> "Tag":
        return cls(
            name=name,
            namespace=namespace,
            source=source,
            confidence=confidence,
            value=value,
            created_by=created_by,
            expires_at=expires_at,
            metadata=metadata,
        )


class TagDefinition(BaseModel):
    """Canonical catalog entry for a tag identifier"""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    namespace: str
    name: str
    display_name: str = Field(alias="displayName")
    description: str
    category: str
    is_sensitive: bool = Field(default=False, alias="isSensitive")
    allowed_roles: List[str] = Field(default_factory=list, alias="allowedRoles")
    allowed_taggers: List[str] = Field(default_factory=list, alias="allowedTaggers")
    is_deprecated: bool = Field(default=False, alias="isDeprecated")
    replaced_by: Optional[str] = Field(default=None, alias="replacedBy")
    is_automatic: bool = Field(default=False, alias="isAutomatic")
    is_mutable: bool = Field(default=True, alias="isMutable")
    value_pattern: Optional[str] = Field(default=None, alias="valuePattern")
    retention_days: Optional[int] = Field(default=None, alias="retentionDays")
    related_tags: List[str] = Field(default_factory=list, alias="relatedTags")
    created_by: str = Field(default="system", alias="createdBy")
    created_at: datetime = Field(default_factory=utc_now, alias="createdAt")
    version: int = 1
    metadata: Optional[Dict[str, str]] = None

    @property
    def identifier(self) -> str:
        return f"{self.namespace}:{self.name}"

    def is_role_allowed(self, role: str) -> bool:
        if not self.is_sensitive or not self.allowed_roles:
            return True
        return role.lower() in {r.lower() for r in self.allowed_roles}

    def can_role_tag(self, role: str) -> bool:
        if not self.allowed_taggers:
            return True
        return role.lower() in {r.lower() for r in self.allowed_taggers}

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)
