"""
Tag-based access decisions
Shared by the authorization gate and the data-access filter
"""
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence
import logging

from ..config import settings
from ..domain.entities import Taggable
from ..domain.tag import Tag, utc_now
from .principal import Principal

logger = logging.getLogger(__name__)


# Roles allowed to read entities carrying each sensitivity tag (keys are lowercase tag names)
SENSITIVITY_ROLES: Dict[str, Sequence[str]] = {
    "phi": ("Admin", "Clinician", "PHI-Reader"),
    "pii": ("Admin", "User", "PII-Reader"),
    "clinical-data": ("Admin", "Clinician"),
    "diagnosis-data": ("Admin", "Clinician"),
}

ASSIGNMENT_PREFIXES = ("team-", "assigned-to-")


@dataclass(frozen=True)
class AccessDecision:
    allowed: bool
    reason: str
    tag: Optional[Tag] = None  # tag that caused a denial

    def __bool__(self) -> bool:
        return self.allowed


class AccessDecisionEngine:
    """
    Decides whether a principal may read an entity from its tags.

    Order of checks:
    1. The admin role is always allowed.
    2. An entity without active tags is unrestricted.
    3. Every sensitivity tag with a role requirement needs one of its roles.
    4. When access tags exist, at least one must match the principal.
    """

    def __init__(
        self,
        admin_role: Optional[str] = None,
        allow_same_domain: Optional[bool] = None,
        sensitivity_roles: Optional[Dict[str, Sequence[str]]] = None,
    ):
        self.admin_role = admin_role or settings.ADMIN_ROLE
        self.allow_same_domain = settings.ACCESS_ALLOW_SAME_DOMAIN if allow_same_domain is None \
            else allow_same_domain
        self.sensitivity_roles = {
            name.lower(): tuple(roles)
            for name, roles in (sensitivity_roles or SENSITIVITY_ROLES).items()
        }

    def decide(self, tags: Iterable[Tag], principal: Principal) -> AccessDecision:
        if principal.has_role(self.admin_role):
            return AccessDecision(True, "admin role")

        now = utc_now()
        active = [tag for tag in tags if tag.is_valid(now)]
        if not active:
            return AccessDecision(True, "no active tags")

        for tag in active:
            if tag.namespace != "sensitivity":
                continue
            required = self.sensitivity_roles.get(tag.name.lower())
            if required and not principal.has_any_role(required):
                return self._deny(principal, tag, f"requires one of roles: {', '.join(required)}")

        access_tags = [tag for tag in active if tag.namespace == "access"]
        if access_tags and not any(self._matches(tag, principal) for tag in access_tags):
            return self._deny(principal, access_tags[0], "no matching access tag")

        return AccessDecision(True, "all tag checks passed")

    def can_access(self, tags: Iterable[Tag], principal: Principal) -> bool:
        return self.decide(tags, principal).allowed

    def authorize(
        self,
        tags: Iterable[Tag],
        principal: Principal,
        namespace: Optional[str] = None,
        name: Optional[str] = None,
    ) -> AccessDecision:
        """
        Authorization gate restricted to tags matching namespace and/or name

        Returns an allow decision when no tag matches the restriction.
        """
        relevant = [
            tag for tag in tags
            if (namespace is None or tag.namespace == namespace) and (name is None or tag.name == name)
        ]
        if not relevant:
            return AccessDecision(True, "no relevant tags")
        return self.decide(relevant, principal)

    def filter_entities(self, entities: Iterable[Any], principal: Principal) -> List[Any]:
        """Keep only entities the principal may read"""
        return [entity for entity in entities if self.can_access(self._tags_of(entity), principal)]

    def sanitize_entity(self, entity: Any, principal: Principal) -> Optional[Any]:
        """The entity itself when readable, otherwise None"""
        if entity is None:
            return None
        return entity if self.can_access(self._tags_of(entity), principal) else None

    def _matches(self, tag: Tag, principal: Principal) -> bool:
        identity = principal.normalized_identity
        if identity is None:
            return False

        value = (tag.value or "").strip().lower()
        if value:
            if value == identity:
                return True
            if self.allow_same_domain and "@" in value and principal.domain is not None \
                    and value.split("@", 1)[1] == principal.domain:
                return True

        tag_name = tag.name.lower()
        for prefix in ASSIGNMENT_PREFIXES:
            if tag_name.startswith(prefix) and tag_name[len(prefix):] == principal.local_part:
                return True

        return False

    @staticmethod
    def _tags_of(entity: Any) -> List[Tag]:
        if isinstance(entity, Taggable):
            return list(entity.tags)
        return []

    @staticmethod
    def _deny(principal: Principal, tag: Tag, reason: str) -> AccessDecision:
        logger.warning(f"Access denied: user={principal.display_name}, tag={tag.identifier}, reason={reason}")
        return AccessDecision(False, reason, tag)
