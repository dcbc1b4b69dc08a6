"""External identifier sets, name matching and import keys."""

from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass, fields
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from uuid import UUID

PERMANENT_KEY_PREFIX: Final[str] = "artist"
PROVISIONAL_KEY_PREFIX: Final[str] = "provisional"

_NON_ALNUM = re.compile(r"[^0-9a-z]+")


def normalize_name(value: str) -> str:
    """Fold case and accents and drop everything that is not a letter or digit."""

    decomposed = unicodedata.normalize("NFKD", value)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return _NON_ALNUM.sub("", stripped.casefold())


def names_match(left: str, right: str) -> bool:
    """Fuzzy equality: normalized names are equal or one contains the other."""

    a = normalize_name(left)
    b = normalize_name(right)
    if not a or not b:
        return False
    return a == b or a in b or b in a


def is_exact_name_match(left: str, right: str) -> bool:
    return left.strip().casefold() == right.strip().casefold()


def slugify(value: str) -> str:
    decomposed = unicodedata.normalize("NFKD", value)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return _NON_ALNUM.sub("-", stripped.casefold()).strip("-")


@dataclass(slots=True, frozen=True)
class ExternalIdentifierSet:
    """Identifiers for one artist across providers.

    Values only ever grow: ``merge`` fills blanks from ``other`` and never replaces
    an id that is already present.
    """

    catalog_id: str | None = None
    ticketing_id: str | None = None
    other_provider_id: str | None = None
    display_name: str | None = None

    def __post_init__(self) -> None:
        for field_info in fields(self):
            value = getattr(self, field_info.name)
            if value is not None and not value.strip():
                object.__setattr__(self, field_info.name, None)

    @property
    def is_empty(self) -> bool:
        return all(getattr(self, f.name) is None for f in fields(self))

    @property
    def normalized_name(self) -> str | None:
        if self.display_name is None:
            return None
        return normalize_name(self.display_name) or None

    def merge(self, other: ExternalIdentifierSet) -> ExternalIdentifierSet:
        return ExternalIdentifierSet(
            catalog_id=self.catalog_id or other.catalog_id,
            ticketing_id=self.ticketing_id or other.ticketing_id,
            other_provider_id=self.other_provider_id or other.other_provider_id,
            display_name=self.display_name or other.display_name,
        )


def permanent_import_key(entity_id: UUID) -> str:
    return f"{PERMANENT_KEY_PREFIX}:{entity_id}"


def provisional_import_key(identifiers: ExternalIdentifierSet) -> str:
    """Build the deterministic provisional key for a request.

    The first populated of catalog id, ticketing id, other-provider id and
    normalized name wins, so the same input always lands on the same key.
    """

    if identifiers.catalog_id:
        return f"{PROVISIONAL_KEY_PREFIX}:catalog:{identifiers.catalog_id}"
    if identifiers.ticketing_id:
        return f"{PROVISIONAL_KEY_PREFIX}:ticketing:{identifiers.ticketing_id}"
    if identifiers.other_provider_id:
        return f"{PROVISIONAL_KEY_PREFIX}:other:{identifiers.other_provider_id}"
    name = identifiers.normalized_name
    if name:
        return f"{PROVISIONAL_KEY_PREFIX}:name:{name}"
    raise ValueError("At least one identifier is required to derive an import key")


def derive_import_key(
    identifiers: ExternalIdentifierSet,
    *,
    entity_id: UUID | None = None,
) -> str:
    if entity_id is not None:
        return permanent_import_key(entity_id)
    return provisional_import_key(identifiers)


def is_provisional(import_key: str) -> bool:
    return import_key.startswith(f"{PROVISIONAL_KEY_PREFIX}:")
