"""Rules tables: schema, loading, lookups and progression.

Submodules:
    schema: Pydantic models of the rules document
    loader: Reading the bundled or configured documents, cached registries
    registry: First-match lookups with documented fallbacks
    experts: Expert definitions for intent routing
    progression: Recompute functions for class-dependent state
"""

from __future__ import annotations

from ose_referee.rules.experts import ExpertDefinition, ExpertRegistry, ExpertType
from ose_referee.rules.loader import (
    clear_rules_cache,
    get_expert_registry,
    get_rules_registry,
    load_experts,
    load_game_system,
)
from ose_referee.rules.registry import RulesRegistry
from ose_referee.rules.schema import ClassRules, GameSystemConfig


__all__ = [
    "ClassRules",
    "ExpertDefinition",
    "ExpertRegistry",
    "ExpertType",
    "GameSystemConfig",
    "RulesRegistry",
    "clear_rules_cache",
    "get_expert_registry",
    "get_rules_registry",
    "load_experts",
    "load_game_system",
]
