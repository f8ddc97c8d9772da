"""Word bank: default axis labels, JSON key-value persistence and the editor gate."""

from __future__ import annotations

from dataclasses import dataclass, field
import json
import logging
from pathlib import Path
from typing import Any, Sequence

from engine.clients.env_utils import getenv_any
from engine.errors import UnauthorizedEditError

logger = logging.getLogger(__name__)

THEOLOGY_KEY = "linhas_db_theology"
CONTEXT_KEY = "linhas_db_context"
DEFAULT_EDITOR_SECRET = "989833"
DEFAULT_WORD_BANK_PATH = "server/data/word_bank.json"

DEFAULT_CONCEPTS: tuple[str, ...] = (
    "Graça",
    "Justiça",
    "Ira",
    "Misericórdia",
    "Soberania",
    "Santidade",
    "Fidelidade",
    "Amor",
    "Sabedoria",
    "Paz",
    "Verdade",
    "Glória",
    "Eternidade",
    "Onisciência",
    "Humildade",
    "Poder",
    "Redenção",
    "Esperança",
    "Criação",
    "Liberdade",
    "Obediência",
    "Comunhão",
    "Reconciliação",
    "Imutabilidade",
    "Trindade",
)

DEFAULT_CONTEXTS: tuple[str, ...] = (
    "Cruz",
    "Deserto",
    "Dinheiro",
    "Rei",
    "Templo",
    "Casamento",
    "Espada",
    "Pão",
    "Sangue",
    "Água",
    "Fogo",
    "Túmulo",
    "Cidade",
    "Pecador",
    "Lei",
    "Espinho",
    "Porta",
    "Vento",
    "Pastor",
    "Semente",
    "Mar",
    "Vinha",
    "Cálice",
    "Rocha",
    "Serpente",
)


def parse_word_list(raw: str) -> list[str]:
    """Split an editor string on commas, trimming and dropping empty entries."""
    return [word.strip() for word in raw.split(",") if word.strip()]


def join_word_list(words: Sequence[str]) -> str:
    """Render a list in the editor's comma-separated form."""
    return ", ".join(words)


@dataclass
class JsonKeyValueStore:
    """Durable string-keyed store backed by a single JSON file.

    Each value is stored as JSON; writes go through a temp file and an
    atomic replace.
    """

    path: Path

    def __post_init__(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def _read(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            logger.warning("Ignoring unreadable word bank file %s", self.path)
            return {}
        return raw if isinstance(raw, dict) else {}

    def _write(self, payload: dict[str, Any]) -> None:
        temp = self.path.with_suffix(self.path.suffix + ".tmp")
        temp.write_text(json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True), encoding="utf-8")
        temp.replace(self.path)

    def get(self, key: str) -> Any | None:
        return self._read().get(key)

    def set(self, key: str, value: Any) -> None:
        payload = self._read()
        payload[key] = value
        self._write(payload)

    def remove(self, key: str) -> None:
        payload = self._read()
        if key in payload:
            del payload[key]
            self._write(payload)


def _stored_list(store: JsonKeyValueStore, key: str, default: Sequence[str]) -> list[str]:
    value = store.get(key)
    if isinstance(value, list) and all(isinstance(item, str) for item in value):
        return list(value)
    if value is not None:
        logger.warning("Word bank key %s is not a list of strings; using defaults", key)
    return list(default)


@dataclass
class WordBank:
    """The two label pools used to build grids, persisted under stable keys."""

    store: JsonKeyValueStore
    concepts: list[str] = field(default_factory=list)
    contexts: list[str] = field(default_factory=list)

    @classmethod
    def load(cls, store: JsonKeyValueStore) -> "WordBank":
        """Load both lists, falling back to the built-in defaults for absent keys."""
        return cls(
            store=store,
            concepts=_stored_list(store, THEOLOGY_KEY, DEFAULT_CONCEPTS),
            contexts=_stored_list(store, CONTEXT_KEY, DEFAULT_CONTEXTS),
        )

    @classmethod
    def from_env(cls) -> "WordBank":
        path = getenv_any("LINHAS_WORD_BANK_PATH", default=DEFAULT_WORD_BANK_PATH) or DEFAULT_WORD_BANK_PATH
        return cls.load(JsonKeyValueStore(path=Path(path)))

    def save(self, concepts_text: str, contexts_text: str) -> None:
        """Replace both lists from editor strings and persist them."""
        self.concepts = parse_word_list(concepts_text)
        self.contexts = parse_word_list(contexts_text)
        self.store.set(THEOLOGY_KEY, self.concepts)
        self.store.set(CONTEXT_KEY, self.contexts)
        logger.info("Saved word bank: %d concepts, %d contexts", len(self.concepts), len(self.contexts))

    def reset(self) -> None:
        """Restore the built-in lists and forget the persisted ones."""
        self.concepts = list(DEFAULT_CONCEPTS)
        self.contexts = list(DEFAULT_CONTEXTS)
        self.store.remove(THEOLOGY_KEY)
        self.store.remove(CONTEXT_KEY)
        logger.info("Restored default word bank")

    def editor_text(self) -> dict[str, str]:
        return {"concepts": join_word_list(self.concepts), "contexts": join_word_list(self.contexts)}


def editor_secret() -> str:
    return getenv_any("LINHAS_EDITOR_SECRET", default=DEFAULT_EDITOR_SECRET) or DEFAULT_EDITOR_SECRET


def check_editor_secret(candidate: str, *, expected: str | None = None) -> None:
    """Raise UnauthorizedEditError unless `candidate` matches the shared secret."""
    if candidate != (expected if expected is not None else editor_secret()):
        raise UnauthorizedEditError("Senha incorreta!")
