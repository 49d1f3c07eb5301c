from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Card:
    """
    A photocard as seen by callers of the registry.

    Attributes:
        id: Opaque system-assigned identifier
        tags: Tags in insertion order. Duplicates are preserved as written.
    """

    id: str
    tags: tuple[str, ...]
