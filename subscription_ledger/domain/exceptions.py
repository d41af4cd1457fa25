"""Domain-specific exceptions for the subscription ledger.

Every error aborts the enclosing operation; none of them is retried by the
ledger itself.
"""


class LedgerError(Exception):
    """Base exception for all subscription ledger errors."""

    error_code = "LEDGER_ERROR"

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class AlreadyInitializedError(LedgerError):
    """Raised when the ledger is configured a second time."""

    error_code = "ALREADY_INITIALIZED"

    def __init__(self):
        super().__init__("Ledger is already initialized")


class NotInitializedError(LedgerError):
    """Raised when an operation requires a configured ledger."""

    error_code = "NOT_INITIALIZED"

    def __init__(self):
        super().__init__("Ledger is not initialized")


class UnauthorizedError(LedgerError):
    """Raised when the call is not authorized by the required identity."""

    error_code = "UNAUTHORIZED"

    def __init__(self, identity: str | None = None):
        message = (
            f"Call is not authorized by '{identity}'" if identity else "Call is not authorized"
        )
        super().__init__(message)
        self.identity = identity
        if identity:
            self.details["identity"] = identity


class SubscriptionNotFoundError(LedgerError):
    """Raised when a subscription ID does not resolve to a record."""

    error_code = "SUBSCRIPTION_NOT_FOUND"

    def __init__(self, subscription_id: int):
        super().__init__(
            f"Subscription {subscription_id} not found",
            details={"subscription_id": subscription_id},
        )
        self.subscription_id = subscription_id


class InvalidAmountError(LedgerError):
    """Raised for insufficient or invalid amounts, or an unplannable retention."""

    error_code = "INVALID_AMOUNT"

    def __init__(self, message: str, amount: int | None = None, required: int | None = None):
        super().__init__(message)
        self.amount = amount
        self.required = required
        if amount is not None:
            self.details["amount"] = amount
        if required is not None:
            self.details["required"] = required


class InvalidHeartbeatError(LedgerError):
    """Raised when the heartbeat is below the configured minimum."""

    error_code = "INVALID_HEARTBEAT"

    def __init__(self, heartbeat: int, minimum: int):
        super().__init__(
            f"Heartbeat {heartbeat} is below the minimum of {minimum} minutes",
            details={"heartbeat": heartbeat, "minimum": minimum},
        )


class InvalidThresholdError(LedgerError):
    """Raised when the threshold is outside (0, max_threshold]."""

    error_code = "INVALID_THRESHOLD"

    def __init__(self, threshold: int, maximum: int):
        super().__init__(
            f"Threshold {threshold} must be in the range (0, {maximum}]",
            details={"threshold": threshold, "maximum": maximum},
        )


class WebhookTooLongError(LedgerError):
    """Raised when the webhook payload exceeds the configured size."""

    error_code = "WEBHOOK_TOO_LONG"

    def __init__(self, size: int, maximum: int):
        super().__init__(
            f"Webhook of {size} bytes exceeds the maximum of {maximum} bytes",
            details={"size": size, "maximum": maximum},
        )


class InvalidSubscriptionStatusError(LedgerError):
    """Raised when an operation is not valid for the current lifecycle state."""

    error_code = "INVALID_SUBSCRIPTION_STATUS"

    def __init__(self, subscription_id: int, status: str):
        super().__init__(
            f"Subscription {subscription_id} is {status}",
            details={"subscription_id": subscription_id, "status": status},
        )
        self.subscription_id = subscription_id
        self.status = status


class ValidationError(LedgerError):
    """Domain validation errors for malformed arguments."""

    error_code = "VALIDATION_ERROR"


class InsufficientFundsError(LedgerError):
    """Raised by a value ledger when a holder cannot cover a transfer or burn."""

    error_code = "INSUFFICIENT_FUNDS"

    def __init__(self, holder: str, balance: int, amount: int):
        super().__init__(
            f"'{holder}' holds {balance}, cannot move {amount}",
            details={"holder": holder, "balance": balance, "amount": amount},
        )
        self.holder = holder


class StoreError(LedgerError):
    """Raised when the subscription store fails."""

    error_code = "STORE_ERROR"

    def __init__(self, message: str, key: str | None = None, operation: str | None = None):
        super().__init__(message)
        self.key = key
        self.operation = operation
        if key:
            self.details["key"] = key
        if operation:
            self.details["operation"] = operation


class SerializationError(LedgerError):
    """Serialization/deserialization errors."""

    error_code = "SERIALIZATION_ERROR"


class ConfigurationError(LedgerError):
    """Raised when settings cannot be loaded or are invalid."""

    error_code = "CONFIGURATION_ERROR"
