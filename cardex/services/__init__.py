"""
Cardex services.

The five record-keeping components of the exchange core. Each is a module
of async functions taking an AsyncSession first; none calls another.
Workflows that span components live in the API layer.
"""

from cardex.services import (
    card_registry,
    collection_ledger,
    discovery,
    messaging,
    reputation,
)

__all__ = [
    "card_registry",
    "collection_ledger",
    "discovery",
    "messaging",
    "reputation",
]
