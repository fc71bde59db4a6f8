"""Loading of the rules and expert documents.

Both documents ship inside the package (``ose_referee/data``) and are
read once per process. Settings may point at replacement files. A
document that cannot be read or does not match the schema is a startup
failure and raises RulesLoadError.
"""

from __future__ import annotations

import json
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from ose_referee.core.config import get_settings
from ose_referee.core.exceptions import RulesLoadError
from ose_referee.core.logging import get_logger
from ose_referee.rules.experts import ExpertDefinition, ExpertRegistry, ExpertsDocument
from ose_referee.rules.registry import RulesRegistry
from ose_referee.rules.schema import GameSystemConfig


logger = get_logger(__name__)

M = TypeVar("M", bound=BaseModel)

BUNDLED_DATA_PACKAGE = "ose_referee.data"
GAME_SYSTEM_RESOURCE = "gamesystem_ose.json"
EXPERTS_RESOURCE = "experts.json"


def _read_json(path: Path | None, resource: str) -> tuple[Any, str]:
    """Read a JSON document from an explicit path or the bundled data.

    Returns:
        Tuple of (parsed document, source description).
    """
    if path is None:
        source = f"{BUNDLED_DATA_PACKAGE}/{resource}"
        reader = resources.files(BUNDLED_DATA_PACKAGE).joinpath(resource)
    else:
        source = str(path)
        reader = path

    try:
        text = reader.read_text(encoding="utf-8")
    except OSError as exc:
        raise RulesLoadError(f"Cannot read rules document: {exc}", source_file=source) from exc

    try:
        return json.loads(text), source
    except json.JSONDecodeError as exc:
        raise RulesLoadError(
            f"Rules document is not valid JSON: {exc.msg}",
            source_file=source,
            details={"line": exc.lineno, "column": exc.colno},
        ) from exc


def _validate(model: type[M], document: Any, source: str) -> M:
    try:
        return model.model_validate(document)
    except PydanticValidationError as exc:
        raise RulesLoadError(
            f"Rules document does not match the {model.__name__} schema",
            source_file=source,
            details={"errors": exc.error_count(), "first_error": exc.errors()[0]["msg"]},
        ) from exc


def load_game_system(path: Path | None = None) -> GameSystemConfig:
    """Load the rules tables.

    Args:
        path: JSON file to load; None loads the bundled OSE tables.

    Returns:
        The validated rules document.

    Raises:
        RulesLoadError: If the file is unreadable or malformed.
    """
    document, source = _read_json(path, GAME_SYSTEM_RESOURCE)
    config = _validate(GameSystemConfig, document, source)
    logger.info(
        "Game system loaded",
        source=source,
        game_system=config.game_system_name,
        classes=len(config.classes),
    )
    return config


def load_experts(path: Path | None = None) -> list[ExpertDefinition]:
    """Load the expert definitions.

    Args:
        path: JSON file to load; None loads the bundled list.

    Returns:
        Expert definitions in document order.

    Raises:
        RulesLoadError: If the file is unreadable or malformed.
    """
    document, source = _read_json(path, EXPERTS_RESOURCE)
    experts = _validate(ExpertsDocument, document, source).experts
    logger.info("Experts loaded", source=source, count=len(experts))
    return experts


@lru_cache(maxsize=1)
def get_rules_registry() -> RulesRegistry:
    """Get the process-wide rules registry, loading it on first use."""
    return RulesRegistry(load_game_system(get_settings().rules.game_system_path))


@lru_cache(maxsize=1)
def get_expert_registry() -> ExpertRegistry:
    """Get the process-wide expert registry, loading it on first use."""
    return ExpertRegistry(load_experts(get_settings().rules.experts_path))


def clear_rules_cache() -> None:
    """Drop the cached registries so the next access reloads from settings."""
    get_rules_registry.cache_clear()
    get_expert_registry.cache_clear()


__all__ = [
    "load_game_system",
    "load_experts",
    "get_rules_registry",
    "get_expert_registry",
    "clear_rules_cache",
]
