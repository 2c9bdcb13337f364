"""Polymorphic item schema for library items.

One pydantic model per item type, discriminated on ``type``. The validated
model is stored as a JSONB document; ``item_to_document`` is the only way a
document is produced so that optional groups (weapon range) are dropped
instead of persisted as empty shells.
"""

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator

from src.mk_common.enums import ItemType

DamageType = Literal["slashing", "piercing", "bludgeoning"]
WeaponCategory = Literal["simple", "martial"]
ArmorCategory = Literal["light", "medium", "heavy", "shield"]
ToolCategory = Literal["artisan", "instrument", "gaming", "kits"]
Rarity = Literal["common", "uncommon", "rare", "very_rare", "legendary", "artifact"]
WeaponProperty = Literal[
    "finesse", "light", "heavy", "two-handed", "versatile", "reach",
    "thrown", "loading", "ammunition", "special", "ranged",
]
Ruleset = Literal["2014", "2024", "homebrew"]


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class ItemCost(BaseModel):
    amount: int = Field(..., ge=0)
    currency: Literal["cp", "sp", "gp"]


class BaseItem(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str = Field(..., min_length=1, max_length=200)
    description: str = ""
    weight: float | None = Field(None, ge=0)
    cost: ItemCost | None = None
    tags: list[str] = Field(default_factory=list)
    ruleset: Ruleset | None = None
    image_url: str | None = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Item name must not be blank")
        return v


class Gear(BaseItem):
    type: Literal["gear"]


class Treasure(BaseItem):
    type: Literal["treasure"]


class WeaponDamage(BaseModel):
    dice: str = Field(..., pattern=r"^\d+(d\d+)?$")
    type: DamageType


class WeaponRange(BaseModel):
    normal: int | None = Field(None, ge=0)
    long: int | None = Field(None, ge=0)


class Weapon(BaseItem):
    type: Literal["weapon"]
    weapon_type: WeaponCategory
    damage: WeaponDamage
    properties: list[WeaponProperty] = Field(default_factory=list)
    range: WeaponRange | None = None

    @field_validator("range", mode="before")
    @classmethod
    def drop_empty_range(cls, v: Any) -> Any:
        # Melee weapons: a range group with neither bound is no range at all
        if isinstance(v, dict) and _blank(v.get("normal")) and _blank(v.get("long")):
            return None
        return v


class Armor(BaseItem):
    type: Literal["armor"]
    armor_type: ArmorCategory
    base_ac: int = Field(..., ge=10, le=20)
    dex_modifier: int | None = Field(None, ge=0, le=10)
    strength_requirement: int | None = Field(None, ge=0, le=20)
    stealth_disadvantage: bool = False


class Consumable(BaseItem):
    type: Literal["consumable"]
    uses: int = Field(..., ge=1)
    effect: str = Field(..., min_length=1)
    duration: str | None = None


class Tool(BaseItem):
    type: Literal["tool"]
    tool_type: ToolCategory
    proficiency_bonus: bool = False


class MagicItem(BaseItem):
    type: Literal["magic"]
    rarity: Rarity
    requires_attunement: bool = False
    magical_effects: list[str] = Field(..., min_length=1)

    @field_validator("magical_effects", mode="before")
    @classmethod
    def split_lines(cls, v: Any) -> Any:
        """Accept the one-effect-per-line text form as well as a list."""
        if isinstance(v, str):
            return [line.strip() for line in v.splitlines() if line.strip()]
        return v


Item = Annotated[
    Union[Gear, Treasure, Weapon, Armor, Consumable, Tool, MagicItem],
    Field(discriminator="type"),
]

ITEM_ADAPTER: TypeAdapter[Item] = TypeAdapter(Item)

ITEM_MODELS: dict[str, type[BaseItem]] = {
    ItemType.GEAR.value: Gear,
    ItemType.TREASURE.value: Treasure,
    ItemType.WEAPON.value: Weapon,
    ItemType.ARMOR.value: Armor,
    ItemType.CONSUMABLE.value: Consumable,
    ItemType.TOOL.value: Tool,
    ItemType.MAGIC.value: MagicItem,
}


def parse_item(data: dict[str, Any]) -> BaseItem:
    """Validate a raw item document. Raises pydantic.ValidationError."""
    return ITEM_ADAPTER.validate_python(data)


def item_to_document(item: BaseItem) -> dict[str, Any]:
    data = item.model_dump(mode="json")
    if data.get("type") == ItemType.WEAPON.value and data.get("range") is None:
        data.pop("range", None)
    return data


def item_type_fields() -> dict[str, dict[str, Any]]:
    """JSON schema per enabled item type, for building create/edit forms."""
    return {name: model.model_json_schema() for name, model in ITEM_MODELS.items()}
