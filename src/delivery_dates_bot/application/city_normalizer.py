"""City alias table and canonical city-name resolution."""

from __future__ import annotations

import json
from collections.abc import Mapping
from functools import lru_cache
from importlib import resources
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

_PACKAGED_ALIASES = "data/city_aliases.json"


class CityAliasTableError(ValueError):
    """Raised when alias table data cannot be read or validated."""


class CityAliasTable(BaseModel):
    """Ordered alias -> canonical city mapping loaded from JSON data."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    aliases: dict[str, str] = Field(min_length=1)

    @field_validator("aliases")
    @classmethod
    def normalize_alias_keys(cls, value: dict[str, str]) -> dict[str, str]:
        normalized: dict[str, str] = {}
        for alias, canonical in value.items():
            key = alias.lower().strip()
            name = canonical.strip()
            if not key or not name:
                raise ValueError("Aliases and canonical names must not be blank.")
            normalized[key] = name
        return normalized


def parse_city_alias_table(raw_json: str) -> CityAliasTable:
    """Validate alias table JSON payload."""
    try:
        payload = json.loads(raw_json)
    except json.JSONDecodeError as exc:
        raise CityAliasTableError("City alias table is not valid JSON.") from exc

    try:
        return CityAliasTable.model_validate(payload)
    except ValidationError as exc:
        raise CityAliasTableError(f"City alias table is invalid: {exc}") from exc


def load_city_alias_table(path: Path | None = None) -> CityAliasTable:
    """Load alias table from ``path`` or from the packaged default data."""
    try:
        if path is None:
            raw_json = (
                resources.files("delivery_dates_bot.application")
                .joinpath(_PACKAGED_ALIASES)
                .read_text(encoding="utf-8")
            )
        else:
            raw_json = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise CityAliasTableError(f"Failed to read city alias table: {path}") from exc

    return parse_city_alias_table(raw_json)


class CityNormalizer:
    """Map typed city names to canonical names via a fixed alias table.

    Lookup order: exact alias match, then the first alias (in table order)
    that contains or is contained in the input. Unknown cities get only
    their first letter upper-cased and the rest lower-cased, so multi-word
    names like "Ростов-на-Дону" come out as "Ростов-на-дону".
    """

    def __init__(self, aliases: Mapping[str, str]) -> None:
        self._aliases = {alias.lower().strip(): name for alias, name in aliases.items()}

    @classmethod
    def from_table(cls, table: CityAliasTable) -> CityNormalizer:
        return cls(table.aliases)

    @classmethod
    def from_file(cls, path: Path) -> CityNormalizer:
        return cls.from_table(load_city_alias_table(path))

    def normalize(self, city: str) -> str:
        lookup_key = city.lower().strip()
        if not lookup_key:
            return city

        exact = self._aliases.get(lookup_key)
        if exact is not None:
            return exact

        for alias, canonical in self._aliases.items():
            if alias in lookup_key or lookup_key in alias:
                return canonical

        return city[:1].upper() + city[1:].lower()


@lru_cache(maxsize=1)
def default_city_normalizer() -> CityNormalizer:
    """Return normalizer backed by the packaged alias table."""
    return CityNormalizer.from_table(load_city_alias_table())


def normalize_city(city: str) -> str:
    """Resolve canonical city name with the packaged alias table."""
    return default_city_normalizer().normalize(city)
