"""Ordinal theory toolkit: sat numbering and rarity, ordinal notation, identifiers, media types and inscription envelopes."""

__version__ = "0.1.0"