"""Mapping layer - transform row dicts into typed objects."""

from __future__ import annotations

from row_repo.mapping.model import ModelMapper
from row_repo.mapping.plan import EntityPlan, InlinePlan, ResultPlan
from row_repo.mapping.protocol import Mapper
from row_repo.mapping.result import ResultMapper

__all__ = [
    "Mapper",
    "ModelMapper",
    "ResultMapper",
    "EntityPlan",
    "InlinePlan",
    "ResultPlan",
]
