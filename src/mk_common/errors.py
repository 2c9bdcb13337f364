"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Auth/DM
  3xxx: Market
  4xxx: Shop / shop item
  5xxx: Item library
  6xxx: Session stock / purchase
  7xxx: Limits / validation
  9xxx: System
"""


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- 1xxx: Auth/DM ---

class EmailExistsError(AppError):
    def __init__(self) -> None:
        super().__init__(1002, "Email already exists", 409)


class InvalidCredentialsError(AppError):
    def __init__(self) -> None:
        super().__init__(1003, "Invalid email or password", 401)


class AccountDisabledError(AppError):
    def __init__(self) -> None:
        super().__init__(1004, "Account is disabled", 403)


class InvalidRefreshTokenError(AppError):
    def __init__(self) -> None:
        super().__init__(1005, "Refresh token is invalid or expired", 401)


class ForbiddenError(AppError):
    def __init__(self, resource: str) -> None:
        super().__init__(1006, f"You do not own this {resource}", 403)


# --- 3xxx: Market ---

class MarketNotFoundError(AppError):
    def __init__(self, market_ref: str) -> None:
        super().__init__(3001, f"Market not found: {market_ref}", 404)


class MarketNotActiveError(AppError):
    def __init__(self, market_ref: str) -> None:
        super().__init__(3002, f"Market is not active: {market_ref}", 422)


class ActiveMarketConflictError(AppError):
    def __init__(self, active_market_name: str) -> None:
        super().__init__(
            3003,
            f"You already have an active market ({active_market_name}). "
            "Deactivate it before activating another one.",
            409,
        )


# --- 4xxx: Shop / shop item ---

class ShopNotFoundError(AppError):
    def __init__(self, shop_id: str) -> None:
        super().__init__(4001, f"Shop not found: {shop_id}", 404)


class ShopItemNotFoundError(AppError):
    def __init__(self, shop_item_id: str) -> None:
        super().__init__(4002, f"Shop item not found: {shop_item_id}", 404)


# --- 5xxx: Item library ---

class LibraryItemNotFoundError(AppError):
    def __init__(self, item_id: str) -> None:
        super().__init__(5001, f"Library item not found: {item_id}", 404)


# --- 6xxx: Session stock / purchase ---

class OutOfStockError(AppError):
    def __init__(self, item_name: str) -> None:
        super().__init__(6001, f"This item is out of stock: {item_name}", 422)


class CannotAffordError(AppError):
    def __init__(self, required_copper: int, available_copper: int) -> None:
        super().__init__(
            6002,
            f"You cannot afford this item: required {required_copper} cp, "
            f"available {available_copper} cp",
            422,
        )


class PlayerSessionNotFoundError(AppError):
    def __init__(self, session_id: str) -> None:
        super().__init__(6003, f"Player session not found: {session_id}", 404)


class CartNotStartedError(AppError):
    def __init__(self, access_code: str) -> None:
        super().__init__(6004, f"No player data for market {access_code}", 404)


# --- 7xxx: Limits / validation ---

class LimitExceededError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(7001, f"Limit reached: {detail}", 422)


class InvalidPriceError(AppError):
    def __init__(self) -> None:
        super().__init__(7002, "Price must have at least one positive denomination", 422)


class InvalidQuantityError(AppError):
    def __init__(self, quantity: int) -> None:
        super().__init__(7003, f"Quantity must be at least 1, got {quantity}", 422)


class MissingItemNameError(AppError):
    def __init__(self) -> None:
        super().__init__(7004, "Item name is required", 422)


# --- 9xxx: System ---

class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)
