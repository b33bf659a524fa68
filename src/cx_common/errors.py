"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Project registry
  2xxx: Credit inventory
  3xxx: Buyer holdings
  4xxx: Trading ledger
  9xxx: System

Every concrete error also belongs to one of the taxonomy classes below, so
callers can catch by kind (e.g. every InvalidStateError) instead of by code.
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


# --- Taxonomy ---

class ValidationError(AppError):
    """Malformed or out-of-range input. No side effects occurred."""

    def __init__(self, code: int, message: str, http_status: int = 422) -> None:
        super().__init__(code, message, http_status)


class NotFoundError(AppError):
    def __init__(self, code: int, message: str) -> None:
        super().__init__(code, message, 404)


class InvalidStateError(AppError):
    """Operation attempted from a state that forbids it. No side effects occurred."""

    def __init__(self, code: int, message: str) -> None:
        super().__init__(code, message, 409)


class PersistenceError(AppError):
    """Critical-path write failed; the operation did not happen."""

    def __init__(self, code: int, message: str) -> None:
        super().__init__(code, message, 500)


# --- 1xxx: Project registry ---

class ProjectNotFoundError(NotFoundError):
    def __init__(self, project_id: str) -> None:
        super().__init__(1001, f"Project not found: {project_id}")


class ProjectAlreadyReviewedError(InvalidStateError):
    def __init__(self, project_id: str, status: str) -> None:
        super().__init__(1002, f"Project {project_id} already reviewed (status={status})")


class ProjectNotEditableError(InvalidStateError):
    def __init__(self, project_id: str, status: str) -> None:
        super().__init__(
            1003,
            f"Project {project_id} cannot be edited in status {status}; "
            "only projects under validation can be edited",
        )


class MissingVerifierScoreError(ValidationError):
    def __init__(self) -> None:
        super().__init__(1004, "mrv_score is required to verify a project")


# --- 2xxx: Credit inventory ---

class ListingNotFoundError(NotFoundError):
    def __init__(self, listing_id: str) -> None:
        super().__init__(
            2001, f"Credit listing not found: {listing_id} (verify the project first)"
        )


class InsufficientInventoryError(AppError):
    def __init__(self, listing_id: str, requested: int, available: int) -> None:
        super().__init__(
            2002,
            f"Insufficient inventory on {listing_id}: requested {requested} t, "
            f"available {available} t",
            422,
        )


class InvalidIssueAmountError(ValidationError):
    def __init__(self, amount: int) -> None:
        super().__init__(2003, f"Issue amount must be positive, got {amount}")


# --- 3xxx: Buyer holdings ---

class InvalidLotQuantityError(ValidationError):
    def __init__(self, quantity: int, lot: int, maximum: int) -> None:
        super().__init__(
            3001,
            f"Quantity {quantity} must be a multiple of {lot} between {lot} and {maximum}",
        )


class CartItemExistsError(InvalidStateError):
    def __init__(self, listing_id: str) -> None:
        super().__init__(
            3002,
            f"Listing {listing_id} is already in the cart; remove it to change the quantity",
        )


class CartItemNotFoundError(NotFoundError):
    def __init__(self, listing_id: str) -> None:
        super().__init__(3003, f"Cart item not found for listing {listing_id}")


class EmptyCartError(ValidationError):
    def __init__(self) -> None:
        super().__init__(3004, "Cart is empty")


class PortfolioItemNotFoundError(NotFoundError):
    def __init__(self, item_id: str) -> None:
        super().__init__(3005, f"Portfolio item not found or already claimed: {item_id}")


class PurchaseFailedError(PersistenceError):
    def __init__(self, detail: str) -> None:
        super().__init__(3006, f"Purchase failed, nothing was recorded: {detail}")


class ClaimFailedError(PersistenceError):
    def __init__(self, detail: str) -> None:
        super().__init__(3007, f"Claim failed, nothing was recorded: {detail}")


# --- 4xxx: Trading ledger ---

class LedgerValidationError(ValidationError):
    def __init__(self, detail: str) -> None:
        super().__init__(4001, detail, 400)


class DuplicateTxHashError(InvalidStateError):
    def __init__(self, tx_hash: str) -> None:
        super().__init__(4002, f"Duplicate txHash: {tx_hash}")


# --- 9xxx: System ---

class RateLimitError(AppError):
    def __init__(self) -> None:
        super().__init__(9001, "Rate limit exceeded", 429)


class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)
