"""Tests for cx_common.errors and cx_common.response."""

from src.cx_common.errors import (
    AppError,
    CartItemExistsError,
    DuplicateTxHashError,
    InsufficientInventoryError,
    InvalidLotQuantityError,
    InvalidStateError,
    LedgerValidationError,
    NotFoundError,
    PersistenceError,
    PortfolioItemNotFoundError,
    ProjectAlreadyReviewedError,
    ProjectNotFoundError,
    PurchaseFailedError,
    RateLimitError,
    ValidationError,
)
from src.cx_common.response import ApiResponse, error_response, success_response


class TestAppError:
    def test_base_error(self) -> None:
        err = AppError(code=9002, message="Internal error")
        assert err.code == 9002
        assert err.message == "Internal error"
        assert err.http_status == 500

    def test_custom_http_status(self) -> None:
        err = AppError(code=1002, message="Already reviewed", http_status=409)
        assert err.http_status == 409

    def test_is_exception(self) -> None:
        assert isinstance(AppError(code=1001, message="test"), Exception)


class TestTaxonomy:
    def test_project_not_found(self) -> None:
        err = ProjectNotFoundError("p-1")
        assert isinstance(err, NotFoundError)
        assert err.code == 1001
        assert err.http_status == 404
        assert "p-1" in err.message

    def test_already_reviewed_is_invalid_state(self) -> None:
        err = ProjectAlreadyReviewedError("p-1", "VERIFIED")
        assert isinstance(err, InvalidStateError)
        assert err.http_status == 409
        assert "VERIFIED" in err.message

    def test_insufficient_inventory(self) -> None:
        err = InsufficientInventoryError("L-1", requested=500, available=300)
        assert err.code == 2002
        assert err.http_status == 422
        assert "500" in err.message
        assert "300" in err.message

    def test_lot_quantity_is_validation(self) -> None:
        err = InvalidLotQuantityError(150, 100, 1000)
        assert isinstance(err, ValidationError)
        assert err.code == 3001
        assert err.http_status == 422

    def test_cart_item_exists(self) -> None:
        err = CartItemExistsError("L-1")
        assert err.code == 3002
        assert err.http_status == 409

    def test_portfolio_item_not_found(self) -> None:
        err = PortfolioItemNotFoundError("item-9")
        assert err.code == 3005
        assert err.http_status == 404

    def test_purchase_failed_is_persistence(self) -> None:
        err = PurchaseFailedError("connection reset")
        assert isinstance(err, PersistenceError)
        assert err.http_status == 500

    def test_ledger_validation_is_400(self) -> None:
        err = LedgerValidationError("Missing required fields: txHash")
        assert err.code == 4001
        assert err.http_status == 400

    def test_duplicate_tx_hash(self) -> None:
        err = DuplicateTxHashError("0xabc")
        assert err.code == 4002
        assert err.http_status == 409

    def test_rate_limit(self) -> None:
        err = RateLimitError()
        assert err.code == 9001
        assert err.http_status == 429


class TestApiResponse:
    def test_success(self) -> None:
        resp = success_response({"id": "abc"})
        assert resp.code == 0
        assert resp.message == "success"
        assert resp.data == {"id": "abc"}

    def test_error(self) -> None:
        resp = error_response(2002, "Insufficient inventory")
        assert resp.code == 2002
        assert resp.message == "Insufficient inventory"
        assert resp.data is None

    def test_serialization(self) -> None:
        d = success_response({"tons": 500}).model_dump()
        assert set(d) == {"code", "message", "data", "timestamp", "request_id"}

    def test_request_id_prefix(self) -> None:
        assert ApiResponse().request_id.startswith("req_")
