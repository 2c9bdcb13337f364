"""Application resource limits.

Static configuration, not environment-driven. Enforced by the application
services before any write; the database does not know about them.
"""

MARKETS_PER_DM = 20

SHOPS_PER_MARKET = 20

ITEMS_PER_LIBRARY = 500

# Library counts at or above this are flagged as near the limit
ITEMS_PER_LIBRARY_WARNING = 450

ITEMS_PER_SHOP = 50
