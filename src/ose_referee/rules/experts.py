"""Expert definitions used to route referee questions.

Each expert answers one kind of intent: rules questions are answered
from a retrieval corpus, character questions from local state, and
storytelling needs no data at all. The router itself lives outside this
package; this module only loads and looks up the definitions.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class ExpertType(StrEnum):
    """How an expert obtains the facts it answers from."""

    AI_RAG = "AI_RAG"
    LOCAL_DATA = "LOCAL_DATA"
    NARRATIVE_ONLY = "NARRATIVE_ONLY"


class ExpertDefinition(BaseModel):
    """One routable expert."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str = Field(min_length=1)
    intent_name: str = Field(min_length=1)
    description: str = ""
    type: ExpertType
    corpus_id: str | None = None
    data_source_key: str | None = None


class ExpertsDocument(BaseModel):
    """Root of the experts document."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    experts: list[ExpertDefinition] = Field(default_factory=list)


class ExpertRegistry:
    """Lookup over the loaded expert definitions."""

    def __init__(self, experts: list[ExpertDefinition]) -> None:
        self._experts = list(experts)

    def get_expert_by_intent(self, intent_name: str) -> ExpertDefinition | None:
        """Find the expert for an intent (case-insensitive)."""
        wanted = intent_name.strip().lower()
        for expert in self._experts:
            if expert.intent_name.lower() == wanted:
                return expert
        return None

    def get_expert(self, name: str) -> ExpertDefinition | None:
        for expert in self._experts:
            if expert.name == name:
                return expert
        return None

    def get_all_experts(self) -> list[ExpertDefinition]:
        return list(self._experts)

    def experts_of_type(self, expert_type: ExpertType) -> list[ExpertDefinition]:
        return [expert for expert in self._experts if expert.type == expert_type]


__all__ = [
    "ExpertType",
    "ExpertDefinition",
    "ExpertsDocument",
    "ExpertRegistry",
]
