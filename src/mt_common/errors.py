"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Auth
  2xxx: Platform bank
  3xxx: Bank assignment
  4xxx: Commission / user
  9xxx: System (store, batch, internal)

Read paths never raise these upward; they degrade to an empty result.
Write paths raise them so the operator sees why an action was declined.
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


# --- 1xxx: Auth ---

class InvalidCredentialsError(AppError):
    def __init__(self) -> None:
        super().__init__(1001, "Invalid or expired token", 401)


class PermissionDeniedError(AppError):
    def __init__(self, detail: str = "Admin role required") -> None:
        super().__init__(1002, detail, 403)


# --- 2xxx: Platform bank ---

class BankNotFoundError(AppError):
    def __init__(self, bank_id: str) -> None:
        super().__init__(2001, f"Platform bank not found: {bank_id}", 404)


class BankHasActiveAssignmentsError(AppError):
    def __init__(self, bank_id: str) -> None:
        super().__init__(
            2002,
            f"Cannot delete bank {bank_id}: it is assigned to exchanges",
            409,
        )


class InvalidBankDataError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(2003, f"Invalid bank data: {detail}", 422)


# --- 3xxx: Bank assignment ---

class DuplicateAssignmentError(AppError):
    def __init__(self, exchange_id: str, bank_id: str) -> None:
        super().__init__(
            3001,
            f"Bank {bank_id} is already assigned to exchange {exchange_id}",
            409,
        )


# --- 4xxx: Commission / user ---

class UserNotFoundError(AppError):
    def __init__(self, user_id: str) -> None:
        super().__init__(4002, f"User not found: {user_id}", 404)


# --- 9xxx: System ---

class StoreUnavailableError(AppError):
    def __init__(self, detail: str = "Document store unavailable") -> None:
        super().__init__(9001, detail, 503)


class BatchCommitError(AppError):
    def __init__(self, detail: str = "Batch write failed; no documents were changed") -> None:
        super().__init__(9002, detail, 500)


class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9003, detail, 500)
