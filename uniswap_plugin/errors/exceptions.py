"""
Exception definitions for the Uniswap plugin
"""

from enum import Enum
from typing import Optional


class ErrorCode(Enum):
    """
    Unified error codes for plugin operations

    1xxx - RPC errors
    2xxx - Transaction errors
    4xxx - Pool errors
    5xxx - Position errors
    6xxx - Wallet errors
    8xxx - Subgraph errors
    9xxx - Configuration / parameter errors
    """
    # RPC errors (recoverable)
    RPC_CONNECTION_FAILED = "1001"
    RPC_TIMEOUT = "1002"
    RPC_RATE_LIMITED = "1003"
    RPC_INVALID_RESPONSE = "1004"

    # Transaction errors
    TX_SEND_FAILED = "2002"
    TX_CONFIRMATION_FAILED = "2003"
    TX_REVERTED = "2006"
    TX_APPROVAL_FAILED = "2007"

    # Pool errors
    POOL_NOT_FOUND = "4001"
    POOL_INVALID_STATE = "4003"

    # Position errors
    POSITION_NOT_FOUND = "5001"
    POSITION_EMPTY = "5004"

    # Wallet errors
    WALLET_NOT_CONFIGURED = "6001"
    WALLET_CHAIN_ID_MISSING = "6004"
    WALLET_CREATION_FAILED = "6005"

    # Subgraph errors
    SUBGRAPH_HTTP_ERROR = "8001"
    SUBGRAPH_QUERY_ERROR = "8002"
    SUBGRAPH_EMPTY_RESPONSE = "8003"

    # Configuration errors
    CONFIG_INVALID = "9001"
    CONFIG_MISSING = "9002"
    INVALID_PARAMETERS = "9003"


class UniswapPluginError(Exception):
    """
    Base exception for all plugin errors

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


class RpcError(UniswapPluginError):
    """
    RPC-related errors - typically recoverable
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.RPC_CONNECTION_FAILED,
        original_error: Optional[Exception] = None,
        endpoint: Optional[str] = None,
    ):
        super().__init__(
            message,
            code,
            recoverable=True,
            original_error=original_error,
            details={"endpoint": endpoint} if endpoint else None,
        )
        self.endpoint = endpoint

    @classmethod
    def connection_failed(cls, endpoint: str, error: Exception = None) -> "RpcError":
        return cls(
            f"Failed to connect to RPC endpoint: {endpoint}",
            ErrorCode.RPC_CONNECTION_FAILED,
            original_error=error,
            endpoint=endpoint,
        )


class SubgraphError(UniswapPluginError):
    """
    Subgraph query failures

    HTTP and transport failures are recoverable, GraphQL errors are not.
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.SUBGRAPH_QUERY_ERROR,
        recoverable: bool = False,
        original_error: Optional[Exception] = None,
        endpoint: Optional[str] = None,
    ):
        super().__init__(
            message,
            code,
            recoverable=recoverable,
            original_error=original_error,
            details={"endpoint": endpoint} if endpoint else None,
        )
        self.endpoint = endpoint

    @classmethod
    def http_error(cls, endpoint: str, status_code: int, body: str = "") -> "SubgraphError":
        # 429 and 5xx are worth retrying
        recoverable = status_code == 429 or status_code >= 500
        return cls(
            f"Subgraph request failed with HTTP {status_code}: {body[:200]}",
            ErrorCode.SUBGRAPH_HTTP_ERROR,
            recoverable=recoverable,
            endpoint=endpoint,
        )

    @classmethod
    def request_failed(cls, endpoint: str, error: Exception) -> "SubgraphError":
        return cls(
            f"Subgraph request failed: {error}",
            ErrorCode.SUBGRAPH_HTTP_ERROR,
            recoverable=True,
            original_error=error,
            endpoint=endpoint,
        )

    @classmethod
    def query_failed(cls, errors: list) -> "SubgraphError":
        messages = "; ".join(str(e.get("message", e)) if isinstance(e, dict) else str(e) for e in errors)
        return cls(f"Subgraph query failed: {messages}", ErrorCode.SUBGRAPH_QUERY_ERROR)

    @classmethod
    def empty_response(cls) -> "SubgraphError":
        return cls("Subgraph response contained no data", ErrorCode.SUBGRAPH_EMPTY_RESPONSE)


class PoolUnavailable(UniswapPluginError):
    """
    Pool not available - not recoverable
    """

    def __init__(
        self,
        message: str,
        pool_address: Optional[str] = None,
        code: ErrorCode = ErrorCode.POOL_NOT_FOUND,
        details: Optional[dict] = None,
    ):
        merged = {"pool_address": pool_address}
        merged.update(details or {})
        super().__init__(
            message,
            code,
            recoverable=False,
            details=merged,
        )
        self.pool_address = pool_address

    @classmethod
    def not_found(cls, token0: Optional[str] = None, token1: Optional[str] = None, fee: Optional[int] = None) -> "PoolUnavailable":
        return cls(
            "Pool not found",
            code=ErrorCode.POOL_NOT_FOUND,
            details={"token0": token0, "token1": token1, "fee": fee},
        )

    @classmethod
    def invalid_state(cls, pool_address: str, reason: str) -> "PoolUnavailable":
        return cls(
            f"Pool has invalid state: {reason}",
            pool_address=pool_address,
            code=ErrorCode.POOL_INVALID_STATE,
        )


class PositionNotFound(UniswapPluginError):
    """
    Position not found or has no liquidity left
    """

    def __init__(
        self,
        message: str,
        position_id: Optional[str] = None,
        code: ErrorCode = ErrorCode.POSITION_NOT_FOUND,
    ):
        super().__init__(
            message,
            code,
            recoverable=False,
            details={"position_id": position_id},
        )
        self.position_id = position_id

    @classmethod
    def not_found(cls, position_id) -> "PositionNotFound":
        return cls(f"Position {position_id} not found", position_id=str(position_id))

    @classmethod
    def empty(cls, position_id) -> "PositionNotFound":
        return cls(
            f"Position {position_id} has no liquidity",
            position_id=str(position_id),
            code=ErrorCode.POSITION_EMPTY,
        )


class TransactionError(UniswapPluginError):
    """
    Transaction submission or execution failure
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.TX_SEND_FAILED,
        recoverable: bool = False,
        tx_hash: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(
            message,
            code,
            recoverable=recoverable,
            original_error=original_error,
            details={"tx_hash": tx_hash} if tx_hash else None,
        )
        self.tx_hash = tx_hash

    @classmethod
    def send_failed(cls, function_name: str, error: str) -> "TransactionError":
        return cls(f"Failed to send {function_name}: {error}", ErrorCode.TX_SEND_FAILED)

    @classmethod
    def reverted(cls, tx_hash: str) -> "TransactionError":
        return cls(f"Transaction reverted: {tx_hash}", ErrorCode.TX_REVERTED, tx_hash=tx_hash)

    @classmethod
    def confirmation_failed(cls, tx_hash: str, error: Exception = None) -> "TransactionError":
        return cls(
            f"Failed to confirm transaction {tx_hash}",
            ErrorCode.TX_CONFIRMATION_FAILED,
            recoverable=True,
            tx_hash=tx_hash,
            original_error=error,
        )

    @classmethod
    def approval_failed(cls, token_address: str, error: str) -> "TransactionError":
        return cls(f"Approval of {token_address} failed: {error}", ErrorCode.TX_APPROVAL_FAILED)


class WalletError(UniswapPluginError):
    """
    Wallet client errors
    """

    def __init__(self, message: str, code: ErrorCode = ErrorCode.WALLET_NOT_CONFIGURED):
        super().__init__(message, code, recoverable=False)

    @classmethod
    def not_configured(cls) -> "WalletError":
        return cls(
            "No wallet configured. Set EVM_PRIVATE_KEY in environment.",
            ErrorCode.WALLET_NOT_CONFIGURED,
        )

    @classmethod
    def chain_id_required(cls) -> "WalletError":
        return cls("Chain ID is required", ErrorCode.WALLET_CHAIN_ID_MISSING)

    @classmethod
    def creation_failed(cls, status_code: int, body: str) -> "WalletError":
        return cls(f"Wallet API error {status_code}: {body[:200]}", ErrorCode.WALLET_CREATION_FAILED)


class ConfigurationError(UniswapPluginError):
    """
    Configuration error - not recoverable without fix
    """

    def __init__(self, message: str, param: Optional[str] = None, code: ErrorCode = ErrorCode.CONFIG_INVALID):
        super().__init__(
            message,
            code,
            recoverable=False,
            details={"param": param} if param else None,
        )
        self.param = param

    @classmethod
    def missing(cls, param: str) -> "ConfigurationError":
        return cls(f"Missing required configuration: {param}", param=param, code=ErrorCode.CONFIG_MISSING)

    @classmethod
    def invalid(cls, param: str, reason: str) -> "ConfigurationError":
        return cls(f"Invalid configuration for {param}: {reason}", param=param, code=ErrorCode.CONFIG_INVALID)

    @classmethod
    def network_id_required(cls) -> "ConfigurationError":
        return cls("Network ID is required", param="chain.id", code=ErrorCode.CONFIG_MISSING)


class ParameterError(UniswapPluginError):
    """
    Tool arguments failed validation
    """

    def __init__(self, message: str, tool_name: Optional[str] = None, original_error: Optional[Exception] = None):
        super().__init__(
            message,
            ErrorCode.INVALID_PARAMETERS,
            recoverable=False,
            original_error=original_error,
            details={"tool": tool_name} if tool_name else None,
        )
        self.tool_name = tool_name

    @classmethod
    def invalid(cls, tool_name: str, error: Exception) -> "ParameterError":
        return cls(f"Invalid parameters for {tool_name}: {error}", tool_name=tool_name, original_error=error)

    @classmethod
    def invalid_ticks(cls, tick_lower: int, tick_upper: int, fee: int, error: Exception) -> "ParameterError":
        return cls(f"Invalid tick range [{tick_lower}, {tick_upper}] for fee tier {fee}: {error}", original_error=error)
