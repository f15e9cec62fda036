"""Async client for a Pokémon catalog: fuzzy search, personal library and favorites."""

from __future__ import annotations

__version__ = "0.1.0"
