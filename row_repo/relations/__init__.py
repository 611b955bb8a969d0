"""Relationships between repositories and their resolution."""

from __future__ import annotations

from row_repo.relations.descriptor import Relationship, many, one

__all__ = ["Relationship", "many", "one"]
