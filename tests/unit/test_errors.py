"""Tests for mk_common.errors and mk_common.response."""

from unittest.mock import MagicMock

from src.mk_common.errors import (
    ActiveMarketConflictError,
    AppError,
    CannotAffordError,
    ForbiddenError,
    InvalidQuantityError,
    LimitExceededError,
    MarketNotFoundError,
    MissingItemNameError,
    OutOfStockError,
)
from src.mk_common.response import ApiResponse, error_response, respond, success_response


class TestAppError:
    def test_base_error(self) -> None:
        err = AppError(code=9002, message="Internal error")
        assert err.code == 9002
        assert err.message == "Internal error"
        assert err.http_status == 500
        assert isinstance(err, Exception)


class TestSpecificErrors:
    def test_active_market_conflict(self) -> None:
        err = ActiveMarketConflictError("Goblin Bazaar")
        assert err.code == 3003
        assert err.http_status == 409
        assert "already have an active market" in err.message
        assert "Goblin Bazaar" in err.message

    def test_cannot_afford_carries_amounts(self) -> None:
        err = CannotAffordError(required_copper=1500, available_copper=300)
        assert err.code == 6002
        assert err.http_status == 422
        assert "1500" in err.message
        assert "300" in err.message

    def test_cart_validation_errors(self) -> None:
        err = InvalidQuantityError(-3)
        assert err.code == 7003
        assert err.http_status == 422
        assert "-3" in err.message
        assert MissingItemNameError().code == 7004

    def test_out_of_stock(self) -> None:
        err = OutOfStockError("Longsword")
        assert err.code == 6001
        assert "Longsword" in err.message

    def test_market_not_found(self) -> None:
        assert MarketNotFoundError("m-1").http_status == 404

    def test_forbidden(self) -> None:
        err = ForbiddenError("market")
        assert err.http_status == 403
        assert "market" in err.message

    def test_limit(self) -> None:
        assert LimitExceededError("too many").code == 7001


class TestResponse:
    def test_success_defaults(self) -> None:
        resp = success_response({"a": 1})
        assert resp.code == 0
        assert resp.message == "success"
        assert resp.data == {"a": 1}
        assert resp.request_id.startswith("req_")

    def test_error_has_no_data(self) -> None:
        resp = error_response(6001, "out of stock")
        assert resp.code == 6001
        assert resp.data is None

    def test_respond_copies_request_id(self) -> None:
        request = MagicMock()
        request.state.request_id = "req_abc123"
        resp = respond(request, {"x": 1}, "done")
        assert isinstance(resp, ApiResponse)
        assert resp.request_id == "req_abc123"
        assert resp.message == "done"
