"""Domain models for imported inventory items and their recipes."""

from collections.abc import Iterable, Mapping
from datetime import UTC, datetime
from enum import IntEnum
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, Field, field_serializer, field_validator


@runtime_checkable
class EntityRef(Protocol):
    """Anything the recipe index can hold: it only needs a name."""

    @property
    def name(self) -> str: ...


class NameLookup(Protocol):
    """Case-sensitive, exact name to entity resolution."""

    def resolve(self, name: str) -> EntityRef | None: ...


class MappingLookup:
    """``NameLookup`` over a plain name to entity mapping."""

    def __init__(self, entities: Mapping[str, EntityRef] | Iterable[EntityRef]) -> None:
        if isinstance(entities, Mapping):
            self._entities = dict(entities)
        else:
            self._entities = {entity.name: entity for entity in entities}

    def resolve(self, name: str) -> EntityRef | None:
        return self._entities.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._entities

    def __len__(self) -> int:
        return len(self._entities)


class Rarity(IntEnum):
    """Item rarity. Member names are the labels used in the workbook."""

    Unset = 0
    Common = 1
    Uncommon = 2
    Rare = 3
    Epic = 4
    Legendary = 5


class InventoryItem(BaseModel):
    """An ingredient or potion in the item catalog."""

    name: str = Field(..., min_length=1, description="Unique catalog name")
    category: str = Field(..., description="Source table, e.g. Ingredients")
    display_name: str = Field(default="", description="Name shown to players")
    rarity: Rarity = Field(default=Rarity.Unset, description="Item rarity")
    cost: int = Field(default=0, description="Purchase cost")
    uses: int = Field(default=0, description="Number of uses")
    max_profit: int = Field(default=0, description="Maximum sale profit")

    @field_validator("rarity", mode="before")
    @classmethod
    def parse_rarity_label(cls, v: Any) -> Any:
        """Accept rarity labels as well as numeric values."""
        if isinstance(v, str) and v in Rarity.__members__:
            return Rarity[v]
        return v

    @field_serializer("rarity")
    def serialize_rarity(self, rarity: Rarity) -> str:
        return rarity.name


class RecipeEntry(BaseModel):
    """Stored form of a recipe record: names only."""

    ingredients: list[str] = Field(..., min_length=1)
    product: str


class CatalogDocument(BaseModel):
    """JSON document holding the catalog items and the recipe sequence."""

    version: int = Field(default=1, description="Document format version")
    saved_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    items: list[InventoryItem] = Field(default_factory=list)
    recipes: list[RecipeEntry] = Field(default_factory=list)
    default_product: str | None = Field(
        default=None, description="Product returned when no recipe matches"
    )
