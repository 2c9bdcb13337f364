"""Global enums — must match DB CHECK constraints exactly."""

from enum import Enum


class ShopCategory(str, Enum):
    GENERAL = "general"
    BLACKSMITH = "blacksmith"
    ARMORER = "armorer"
    FLETCHER = "fletcher"
    LEATHERWORKER = "leatherworker"
    MAGIC = "magic"
    ALCHEMIST = "alchemist"
    TRINKET = "trinket"
    TAVERN = "tavern"
    TEMPLE = "temple"
    MARKET = "market"
    TOOLSHOP = "toolshop"
    LIBRARY = "library"
    GUILDHALL = "guildhall"
    INN = "inn"
    STABLE = "stable"
    OTHER = "other"


class ItemType(str, Enum):
    GEAR = "gear"
    TREASURE = "treasure"
    WEAPON = "weapon"
    ARMOR = "armor"
    CONSUMABLE = "consumable"
    TOOL = "tool"
    MAGIC = "magic"


class ItemSource(str, Enum):
    """Provenance of a library item."""
    OFFICIAL = "official"
    CUSTOM = "custom"
    MODIFIED = "modified"


class TransactionType(str, Enum):
    BUY = "buy"
    SELL = "sell"
    END_SESSION = "end_session"


class WindowState(str, Enum):
    """Player-facing view of a market's activation window."""
    ACTIVE = "active"
    CLOSING_SOON = "closing_soon"
    CLOSED = "closed"
