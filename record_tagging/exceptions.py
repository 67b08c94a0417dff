"""
Exceptions raised by the tagging core
"""


class TaggingError(Exception):
    """Base class for tagging engine errors"""


class InvalidCollectionError(TaggingError, ValueError):
    """Raised before a backfill starts when the collection name is not recognized"""

    def __init__(self, collection_name: str, known: list):
        self.collection_name = collection_name
        self.known = known
        super().__init__(
            f"Unknown collection: '{collection_name}'. Expected one of: {', '.join(known)}"
        )
