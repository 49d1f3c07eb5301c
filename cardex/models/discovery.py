from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Recommendation:
    """A card surfaced to a user, with the owner who made it discoverable."""

    card_id: str
    owner: str
