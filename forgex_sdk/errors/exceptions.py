"""
Exception definitions for ForgeX SDK
"""

from enum import Enum
from typing import Any, Optional


class ErrorCode(Enum):
    """
    Unified error codes for SDK operations

    1xxx - Upstream provider errors
    2xxx - Solana RPC errors
    3xxx - Wallet errors
    4xxx - Adapter availability errors
    9xxx - Configuration errors
    """
    # Upstream errors (some recoverable)
    UPSTREAM_CONNECTION_FAILED = "1001"
    UPSTREAM_TIMEOUT = "1002"
    UPSTREAM_RATE_LIMITED = "1003"
    UPSTREAM_HTTP_ERROR = "1004"
    UPSTREAM_NOT_FOUND = "1005"
    UPSTREAM_GRAPHQL_ERROR = "1006"
    UPSTREAM_MALFORMED_RESPONSE = "1007"
    UPSTREAM_FAILED = "1008"

    # RPC errors
    RPC_ERROR = "2001"
    RPC_INVALID_RESPONSE = "2002"

    # Wallet errors
    WALLET_INVALID_STATE = "3001"
    WALLET_CANNOT_SIGN = "3002"

    # Adapter errors
    ADAPTER_UNAVAILABLE = "4001"

    # Configuration errors
    CONFIG_INVALID = "9001"
    CONFIG_MISSING = "9002"


class ForgeXError(Exception):
    """
    Base exception for all ForgeX SDK errors

    Attributes:
        message: Human-readable error message
        code: Error code for programmatic handling
        recoverable: Whether the error might succeed on retry
        original_error: The underlying exception if any
        details: Additional error context
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode,
        recoverable: bool = False,
        original_error: Optional[Exception] = None,
        details: Optional[dict] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.recoverable = recoverable
        self.original_error = original_error
        self.details = details or {}

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.message}"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code.value}, message={self.message!r})"

    @property
    def should_retry(self) -> bool:
        """Indicate if the operation should be retried"""
        return self.recoverable


class UpstreamError(ForgeXError):
    """
    Normalized failure of a provider call

    Every adapter operation surfaces HTTP errors, GraphQL error payloads,
    transport failures and malformed responses as this type. The message is
    always prefixed with "<provider>.<operation>".
    """

    def __init__(
        self,
        provider: str,
        operation: str,
        detail: str,
        code: ErrorCode = ErrorCode.UPSTREAM_FAILED,
        recoverable: bool = False,
        status_code: Optional[int] = None,
        original_error: Optional[Exception] = None,
        details: Optional[dict] = None,
    ):
        context = {"provider": provider, "operation": operation}
        if status_code is not None:
            context["status_code"] = status_code
        if details:
            context.update(details)
        super().__init__(
            f"{provider}.{operation}: {detail}",
            code,
            recoverable=recoverable,
            original_error=original_error,
            details=context,
        )
        self.provider = provider
        self.operation = operation
        self.detail = detail
        self.status_code = status_code

    @property
    def qualified_operation(self) -> str:
        return f"{self.provider}.{self.operation}"

    @classmethod
    def http_status(
        cls, provider: str, operation: str, status_code: int, message: Optional[str] = None
    ) -> "UpstreamError":
        if status_code == 404:
            detail, code = "Resource not found", ErrorCode.UPSTREAM_NOT_FOUND
        elif status_code == 429:
            detail, code = "Rate limit exceeded", ErrorCode.UPSTREAM_RATE_LIMITED
        else:
            detail, code = f"HTTP {status_code}", ErrorCode.UPSTREAM_HTTP_ERROR
        if message:
            detail = f"{detail}: {message}"
        return cls(
            provider,
            operation,
            detail,
            code=code,
            recoverable=status_code == 429 or status_code >= 500,
            status_code=status_code,
        )

    @classmethod
    def timeout(cls, provider: str, operation: str, timeout_seconds: float) -> "UpstreamError":
        return cls(
            provider,
            operation,
            f"request timed out after {timeout_seconds}s",
            code=ErrorCode.UPSTREAM_TIMEOUT,
            recoverable=True,
        )

    @classmethod
    def connection_failed(
        cls, provider: str, operation: str, url: str, error: Optional[Exception] = None
    ) -> "UpstreamError":
        return cls(
            provider,
            operation,
            f"connection failed to {url}: {error}",
            code=ErrorCode.UPSTREAM_CONNECTION_FAILED,
            recoverable=True,
            original_error=error,
        )

    @classmethod
    def graphql(cls, provider: str, operation: str, errors: list) -> "UpstreamError":
        messages = [e.get("message", str(e)) if isinstance(e, dict) else str(e) for e in errors]
        return cls(
            provider,
            operation,
            "; ".join(messages) or "GraphQL error",
            code=ErrorCode.UPSTREAM_GRAPHQL_ERROR,
            details={"errors": errors},
        )

    @classmethod
    def malformed(
        cls, provider: str, operation: str, reason: str, error: Optional[Exception] = None
    ) -> "UpstreamError":
        return cls(
            provider,
            operation,
            f"malformed response ({reason})",
            code=ErrorCode.UPSTREAM_MALFORMED_RESPONSE,
            original_error=error,
        )

    @classmethod
    def from_exception(cls, provider: str, operation: str, error: Exception) -> "UpstreamError":
        return cls(
            provider,
            operation,
            f"{type(error).__name__}: {error}",
            original_error=error,
        )

    @classmethod
    def rescoped(cls, provider: str, operation: str, error: "UpstreamError") -> "UpstreamError":
        """error re-reported under provider.operation, keeping its code and cause"""
        details = {k: v for k, v in error.details.items() if k not in ("provider", "operation", "status_code")}
        details["cause"] = error.qualified_operation
        return cls(
            provider,
            operation,
            error.message,
            code=error.code,
            recoverable=error.recoverable,
            status_code=error.status_code,
            original_error=error,
            details=details,
        )


class RpcError(UpstreamError):
    """
    Solana JSON-RPC errors

    Raised when the node returns an `error` object or an unusable result.
    """

    def __init__(
        self,
        operation: str,
        detail: str,
        endpoint: Optional[str] = None,
        rpc_code: Optional[int] = None,
        rpc_data: Any = None,
        code: ErrorCode = ErrorCode.RPC_ERROR,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(
            "rpc",
            operation,
            detail,
            code=code,
            original_error=original_error,
            details={"endpoint": endpoint, "rpc_error_code": rpc_code, "rpc_error_data": rpc_data},
        )
        self.endpoint = endpoint
        self.rpc_code = rpc_code

    @classmethod
    def from_response(cls, method: str, error: dict, endpoint: Optional[str] = None) -> "RpcError":
        return cls(
            method,
            f"RPC error: {error.get('message', error)}",
            endpoint=endpoint,
            rpc_code=error.get("code"),
            rpc_data=error.get("data"),
        )


class ConfigurationError(ForgeXError):
    """
    Configuration or parameter error

    Raised when:
    - A required credential is missing at the point of use
    - A parameter is outside its documented range
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.CONFIG_INVALID,
        param_name: Optional[str] = None,
    ):
        super().__init__(
            message,
            code,
            recoverable=False,
            details={"param_name": param_name} if param_name else None,
        )
        self.param_name = param_name

    @classmethod
    def missing(cls, param_name: str) -> "ConfigurationError":
        return cls(
            f"Required configuration missing: {param_name}",
            ErrorCode.CONFIG_MISSING,
            param_name=param_name,
        )

    @classmethod
    def invalid(cls, param_name: str, reason: str) -> "ConfigurationError":
        return cls(
            f"Invalid configuration for {param_name}: {reason}",
            ErrorCode.CONFIG_INVALID,
            param_name=param_name,
        )


class InvalidWalletState(ForgeXError):
    """
    Wallet cannot be used in its current state

    Raised when binding a wallet without a public key, or when an operation
    needs a signing callback the bound wallet does not provide.
    """

    def __init__(self, message: str, code: ErrorCode = ErrorCode.WALLET_INVALID_STATE):
        super().__init__(message, code, recoverable=False)

    @classmethod
    def no_public_key(cls) -> "InvalidWalletState":
        return cls("Wallet has no public key; connect it before binding")

    @classmethod
    def not_bound(cls) -> "InvalidWalletState":
        return cls("No wallet is bound")

    @classmethod
    def cannot_sign(cls, capability: str = "sign_transaction") -> "InvalidWalletState":
        return cls(
            f"Bound wallet does not provide {capability}",
            ErrorCode.WALLET_CANNOT_SIGN,
        )


class AdapterUnavailable(ForgeXError):
    """Adapter slot is absent"""

    def __init__(self, provider: str, reason: str):
        super().__init__(
            f"Adapter '{provider}' is unavailable: {reason}",
            ErrorCode.ADAPTER_UNAVAILABLE,
            recoverable=False,
            details={"provider": provider, "reason": reason},
        )
        self.provider = provider
        self.reason = reason
