"""Cardex: tagged photocard catalog, discovery, messaging and reputation."""
