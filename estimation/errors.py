import enum
import re
from typing import Optional

from web3.exceptions import ContractLogicError


class UnsupportedChainError(Exception):
    """The chain can't be served by the estimator that was asked for."""


class ZeroGasPriceError(Exception):
    """The effective gas price of the UserOp resolved to 0."""


class ExecutionError(Exception):
    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class ContractCallExecutionError(ExecutionError):
    pass


class TransactionExecutionError(ExecutionError):
    pass


class NonceTooLowError(Exception):
    pattern = re.compile(
        r"nonce too low|transaction already imported|already known"
    )


class FeeCapTooLowError(Exception):
    pattern = re.compile(
        r"max fee per gas less than block base fee"
        r"|fee cap less than block base fee"
        r"|transaction is outdated"
    )


class InsufficientFundsError(Exception):
    pattern = re.compile(r"insufficient funds")


class IntrinsicGasTooLowError(Exception):
    pattern = re.compile(r"intrinsic gas too low")


class ContractFunctionRevertedError(Exception):
    pattern = re.compile(r"execution reverted")


class EstimateGasExecutionError(Exception):
    pattern = re.compile(r"gas required exceeds allowance")


class ExecutionErrorKind(enum.Enum):
    NONCE_TOO_LOW = "nonce_too_low"
    FEE_CAP_TOO_LOW = "fee_cap_too_low"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    INTRINSIC_GAS_TOO_LOW = "intrinsic_gas_too_low"
    CONTRACT_FUNCTION_REVERTED = "contract_function_reverted"
    ESTIMATE_GAS_EXECUTION_FAILED = "estimate_gas_execution_failed"
    UNRECOGNIZED = "unrecognized"


CAUSE_KINDS = {
    NonceTooLowError: ExecutionErrorKind.NONCE_TOO_LOW,
    FeeCapTooLowError: ExecutionErrorKind.FEE_CAP_TOO_LOW,
    InsufficientFundsError: ExecutionErrorKind.INSUFFICIENT_FUNDS,
    IntrinsicGasTooLowError: ExecutionErrorKind.INTRINSIC_GAS_TOO_LOW,
    ContractFunctionRevertedError: ExecutionErrorKind.CONTRACT_FUNCTION_REVERTED,
    EstimateGasExecutionError: ExecutionErrorKind.ESTIMATE_GAS_EXECUTION_FAILED,
}


def parse_error(err: BaseException) -> ExecutionErrorKind:
    """Classify a failed contract call or transaction for retry decisions.

    Only `ContractCallExecutionError` and `TransactionExecutionError` are
    unwrapped; anything else, and any cause outside the known kinds, is
    `UNRECOGNIZED`.
    """
    if not isinstance(
        err, (ContractCallExecutionError, TransactionExecutionError)
    ):
        return ExecutionErrorKind.UNRECOGNIZED

    return CAUSE_KINDS.get(type(err.cause), ExecutionErrorKind.UNRECOGNIZED)


def wrap_rpc_error(
    err: Exception,
    outer: type[ExecutionError],
    default_cause: Optional[type[Exception]] = None,
) -> ExecutionError:
    message = str(err)
    cause = None
    if isinstance(err, ContractLogicError):
        cause = ContractFunctionRevertedError(message)
    else:
        lowered = message.lower()
        for cause_type in CAUSE_KINDS:
            if cause_type.pattern.search(lowered):
                cause = cause_type(message)
                break

    if cause is None:
        cause = default_cause(message) if default_cause else err
    if cause is not err:
        cause.__cause__ = err

    return outer(message, cause=cause)
