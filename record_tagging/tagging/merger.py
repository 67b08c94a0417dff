"""
Tag merger
Deduplicates evaluated tags and reconciles them with an entity's existing tags
"""
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence, Tuple
import logging

from ..domain.tag import Tag, utc_now

logger = logging.getLogger(__name__)


class TagMerger:
    """Merges tags from multiple rules and with previously stored tags"""

    def deduplicate(self, tags: Iterable[Tag]) -> List[Tag]:
        """
        Keep one tag per identifier

        The highest confidence wins (absent confidence counts as 1.0). On a
        tie the first tag seen wins, which is the tag from the rule with the
        lowest priority number. Output keeps first-appearance order.

        Args:
            tags: Tags in rule priority order

        Returns:
            Deduplicated list of tags
        """
        by_identifier: Dict[str, Tag] = {}
        for tag in tags:
            identifier = tag.identifier
            existing = by_identifier.get(identifier)
            if existing is None:
                by_identifier[identifier] = tag
            elif tag.effective_confidence > existing.effective_confidence:
                by_identifier[identifier] = tag
                logger.debug(f"Replaced {identifier} from {existing.source} with higher confidence "
                             f"tag from {tag.source}: {tag.effective_confidence:.2f} > "
                             f"{existing.effective_confidence:.2f}")
        return list(by_identifier.values())

    def merge_with_existing(
        self,
        existing: Sequence[Tag],
        new_tags: Sequence[Tag],
        now: Optional[datetime] = None,
    ) -> Tuple[List[Tag], List[str], List[str]]:
        """
        Combine stored tags with freshly evaluated tags

        Existing tags survive when still valid and not superseded by a new tag
        with the same identifier; new tags are appended after them.

        Returns:
            (merged tags, identifiers added, identifiers removed)
        """
        now = now or utc_now()
        new_identifiers = {tag.identifier for tag in new_tags}

        kept = self.deduplicate(
            tag for tag in existing
            if tag.is_valid(now) and tag.identifier not in new_identifiers
        )
        merged = kept + list(new_tags)

        before = {tag.identifier for tag in existing}
        after = {tag.identifier for tag in merged}
        added = [tag.identifier for tag in new_tags if tag.identifier not in before]
        removed = sorted(before - after)
        return merged, added, removed

    def remove_expired(self, tags: Sequence[Tag], now: Optional[datetime] = None) -> List[Tag]:
        now = now or utc_now()
        return [tag for tag in tags if tag.is_valid(now)]

    @staticmethod
    def same_tag_set(left: Sequence[Tag], right: Sequence[Tag]) -> bool:
        """Compare tag sets ignoring timestamps"""
        def key(tag: Tag):
            return (tag.identifier, tag.source, tag.confidence, tuple(sorted((tag.metadata or {}).items())),
                    tag.is_active, tag.expires_at)
        return sorted(map(key, left), key=repr) == sorted(map(key, right), key=repr)
