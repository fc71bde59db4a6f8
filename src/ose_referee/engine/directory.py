"""Directory of live characters keyed by conversation session id.

The directory is the only state shared between concurrent requests. It
is split into shards, each guarded by its own lock, so get-or-create on
one session never waits behind another shard. Each entry also carries
its own re-entrant lock; ``session()`` holds it for the duration of a
mutation so two requests for the same conversation are applied one at a
time.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any

from ose_referee.core.config import get_settings
from ose_referee.core.exceptions import InvalidArgumentError
from ose_referee.core.logging import bound_context, get_logger
from ose_referee.engine.dice import DiceRoller, get_default_roller
from ose_referee.models.character import Character
from ose_referee.rules.registry import RulesRegistry


logger = get_logger(__name__)


@dataclass
class _Entry:
    """A character and the lock that serializes its mutations."""

    character: Character
    lock: threading.RLock = field(default_factory=threading.RLock)


class _Shard:
    """One independently locked slice of the directory."""

    __slots__ = ("lock", "entries")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.entries: dict[str, _Entry] = {}


class CharacterDirectory:
    """Thread-safe map from session id to Character.

    Example:
        >>> directory = CharacterDirectory(registry=get_rules_registry())
        >>> with directory.session("conversation-1") as character:
        ...     character.set_character_class(CharacterClass.FIGHTER)
    """

    def __init__(
        self,
        *,
        registry: RulesRegistry,
        roller: DiceRoller | None = None,
        shards: int | None = None,
        default_score: int | None = None,
    ) -> None:
        """Initialize an empty directory.

        Args:
            registry: Rules tables every created character is bound to.
            roller: Dice roller shared by created characters.
            shards: Number of lock shards; defaults to the configured value.
            default_score: Starting ability value; defaults to the configured value.
        """
        settings = get_settings().character
        self._registry = registry
        self._roller = roller if roller is not None else get_default_roller()
        self._default_score = (
            default_score if default_score is not None else settings.default_ability_score
        )
        shard_count = shards if shards is not None else settings.directory_shards
        if shard_count < 1:
            raise InvalidArgumentError(
                "Directory needs at least one shard",
                field_name="shards",
                invalid_value=shard_count,
            )
        self._shards = [_Shard() for _ in range(shard_count)]

    @property
    def registry(self) -> RulesRegistry:
        return self._registry

    @property
    def roller(self) -> DiceRoller:
        return self._roller

    def _shard(self, session_id: str) -> _Shard:
        if not isinstance(session_id, str) or not session_id.strip():
            raise InvalidArgumentError(
                "Session id must be a non-empty string",
                field_name="session_id",
                invalid_value=session_id,
            )
        return self._shards[hash(session_id) % len(self._shards)]

    def _entry(self, session_id: str) -> _Entry:
        shard = self._shard(session_id)
        with shard.lock:
            entry = shard.entries.get(session_id)
            if entry is None:
                character = Character.create(
                    registry=self._registry,
                    roller=self._roller,
                    default_score=self._default_score,
                )
                entry = _Entry(character=character)
                shard.entries[session_id] = entry
                logger.info("Character created", session_id=session_id)
            return entry

    def get_or_create(self, session_id: str) -> Character:
        """Return the session's character, creating it on first access.

        Concurrent first calls for one session id all receive the same
        instance.
        """
        return self._entry(session_id).character

    def get(self, session_id: str) -> Character | None:
        shard = self._shard(session_id)
        with shard.lock:
            entry = shard.entries.get(session_id)
        return entry.character if entry is not None else None

    def _acquire(self, session_id: str) -> _Entry:
        """Lock and return the session's live entry, creating it if needed.

        The entry is re-checked once its lock is held, since a restore or
        removal may have retired it while this thread was waiting.
        """
        shard = self._shard(session_id)
        while True:
            entry = self._entry(session_id)
            entry.lock.acquire()
            with shard.lock:
                if shard.entries.get(session_id) is entry:
                    return entry
            entry.lock.release()

    @contextmanager
    def session(self, session_id: str) -> Iterator[Character]:
        """Hold the session's lock while the caller mutates its character.

        Yields:
            The session's character, created if needed.
        """
        entry = self._acquire(session_id)
        try:
            with bound_context(session_id=session_id):
                yield entry.character
        finally:
            entry.lock.release()

    def restore(self, session_id: str, snapshot: Mapping[str, Any]) -> Character:
        """Replace the session's character with one rebuilt from a snapshot.

        Waits for any in-flight ``session()`` on the same id to finish.
        """
        character = Character.from_snapshot(snapshot, registry=self._registry, roller=self._roller)
        shard = self._shard(session_id)
        while True:
            with shard.lock:
                entry = shard.entries.get(session_id)
                if entry is None:
                    shard.entries[session_id] = _Entry(character=character)
                    break
            with entry.lock, shard.lock:
                if shard.entries.get(session_id) is entry:
                    entry.character = character
                    break
        logger.info("Character restored", session_id=session_id)
        return character

    def remove(self, session_id: str) -> bool:
        """Forget a session once no request holds it; returns whether it existed."""
        shard = self._shard(session_id)
        with shard.lock:
            entry = shard.entries.get(session_id)
        if entry is None:
            return False
        with entry.lock, shard.lock:
            removed = shard.entries.get(session_id) is entry
            if removed:
                del shard.entries[session_id]
        if removed:
            logger.info("Character removed", session_id=session_id)
        return removed

    def session_ids(self) -> list[str]:
        ids: list[str] = []
        for shard in self._shards:
            with shard.lock:
                ids.extend(shard.entries)
        return ids

    def __contains__(self, session_id: object) -> bool:
        if not isinstance(session_id, str) or not session_id.strip():
            return False
        return self.get(session_id) is not None

    def __len__(self) -> int:
        return len(self.session_ids())


__all__ = [
    "CharacterDirectory",
]
