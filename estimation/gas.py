import dataclasses
import enum
import math
from types import MappingProxyType
from typing import Optional

import rlp
from pydantic import BaseModel
from web3 import AsyncWeb3, Web3

import app.constants as constants
import estimation.web3
from app.config import settings
from estimation.errors import UnsupportedChainError, ZeroGasPriceError
from estimation.user_op import UserOp, encode_handle_ops_call, to_worst_case


@dataclasses.dataclass(frozen=True)
class GasOverheads:
    # flat overhead of the whole handleOps bundle
    fixed: float = 21000
    # per-op overhead, on top of the bundle share of `fixed`
    per_user_op: float = 18300
    # per 32-byte word of the encoded op
    per_user_op_word: float = 4
    zero_byte: float = 4
    non_zero_byte: float = 16
    # expected number of ops per bundle, splits `fixed` between them
    bundle_size: float = 1
    # expected signature length while the op is still unsigned
    sig_size: int = 65

    def merge(self, overrides: Optional[dict] = None) -> "GasOverheads":
        return dataclasses.replace(self, **(overrides or {}))


DEFAULT_GAS_OVERHEADS = GasOverheads()


class ExecutionResult(BaseModel):
    pre_op_gas: int
    paid: int


class ChainStrategy(enum.Enum):
    DOUBLE = "double"
    OPTIMISM = "optimism"
    ARBITRUM = "arbitrum"
    DEFAULT = "default"


CHAIN_STRATEGIES = MappingProxyType(
    {
        **{
            chain_id: ChainStrategy.DOUBLE
            for chain_id in constants.DOUBLE_COST_CHAIN_IDS
        },
        **{
            chain_id: ChainStrategy.OPTIMISM
            for chain_id in constants.OPTIMISM_CHAIN_IDS
        },
        constants.ARBITRUM_CHAIN_ID: ChainStrategy.ARBITRUM,
    }
)


def get_chain_strategy(chain_id: int) -> ChainStrategy:
    return CHAIN_STRATEGIES.get(chain_id, ChainStrategy.DEFAULT)


def calc_default_pre_verification_gas(
    user_op: UserOp, overheads: Optional[dict] = None
) -> int:
    """Gas for posting the op as calldata plus its share of fixed overheads.

    The op is sized in its worst-case form, so every field that may still
    change before submission counts as non-zero bytes. An empty signature is
    sized as `sig_size` bytes.
    """
    ov = DEFAULT_GAS_OVERHEADS.merge(overheads)
    if not user_op.signature:
        user_op = user_op.model_copy(
            update={"signature": b"\x01" * int(ov.sig_size)}
        )

    packed = to_worst_case(user_op.pack()).encode()
    length_in_words = (len(packed) + 31) // 32
    call_data_cost = sum(
        ov.zero_byte if byte == 0 else ov.non_zero_byte for byte in packed
    )

    # round half up
    return math.floor(
        call_data_cost
        + ov.fixed / ov.bundle_size
        + ov.per_user_op
        + ov.per_user_op_word * length_in_words
        + 0.5
    )


async def calc_pre_verification_gas(
    w3: AsyncWeb3,
    user_op: UserOp,
    entry_point: str,
    chain_id: int,
    logger,
    overheads: Optional[dict] = None,
) -> int:
    pre_verification_gas = calc_default_pre_verification_gas(
        user_op, overheads
    )
    strategy = get_chain_strategy(chain_id)
    logger = logger.bind(chain_id=chain_id, strategy=strategy.value)
    logger.debug("static pre-verification gas", gas=pre_verification_gas)

    if strategy is ChainStrategy.DOUBLE:
        return pre_verification_gas * 2
    if strategy is ChainStrategy.OPTIMISM:
        return await calc_optimism_pre_verification_gas(
            w3, user_op, entry_point, pre_verification_gas, chain_id, logger
        )
    if strategy is ChainStrategy.ARBITRUM:
        return await calc_arbitrum_pre_verification_gas(
            w3, user_op, entry_point, pre_verification_gas, chain_id
        )

    return pre_verification_gas


def serialize_worst_case_transaction(
    entry_point: str, chain_id: int, data: bytes
) -> bytes:
    """RLP-encode a signed legacy (EIP-155) transaction calling `entry_point`.

    Gas limit and gas price take their largest 64-bit values so the encoding
    is as long as a real bundle transaction can get. The signature is a fixed
    placeholder: the result is only ever measured, never broadcast.
    """
    signature = constants.WORST_CASE_TX_SIGNATURE
    v = chain_id * 2 + 35 + signature["v"] - 27
    return rlp.encode(
        [
            constants.WORST_CASE_TX_NONCE,
            constants.MAX_UINT64,  # gas price
            constants.MAX_UINT64,  # gas limit
            Web3.to_bytes(hexstr=entry_point),
            0,  # value
            data,
            v,
            signature["r"],
            signature["s"],
        ]
    )


def build_worst_case_transaction(
    user_op: UserOp, entry_point: str, chain_id: int
) -> bytes:
    data = encode_handle_ops_call([to_worst_case(user_op.pack())], entry_point)
    return serialize_worst_case_transaction(entry_point, chain_id, data)


async def calc_optimism_pre_verification_gas(
    w3: AsyncWeb3,
    user_op: UserOp,
    entry_point: str,
    static_fee: int,
    chain_id: int,
    logger,
) -> int:
    serialized_tx = build_worst_case_transaction(
        user_op, entry_point, chain_id
    )

    latest_block = await estimation.web3.get_latest_block(w3)
    base_fee = latest_block.get("baseFeePerGas")
    if base_fee is None:
        raise UnsupportedChainError(
            f"The latest block of chain {chain_id} does not have "
            "'baseFeePerGas'."
        )

    l1_fee = await estimation.web3.call_contract(
        w3,
        constants.OPTIMISM_GAS_PRICE_ORACLE,
        constants.GET_L1_FEE_ABI,
        "getL1Fee",
        [serialized_tx],
    )
    gas_price = await estimation.web3.get_gas_price(
        w3, chain_id, settings.optimism_fast_gas_price, logger
    )
    l2_price = min(
        gas_price.max_fee_per_gas,
        base_fee + gas_price.max_priority_fee_per_gas,
    )
    logger.debug(
        "l1 data fee", l1_fee=l1_fee, l2_price=l2_price, base_fee=base_fee
    )
    if l2_price == 0:
        raise ZeroGasPriceError(
            f"The L2 gas price of chain {chain_id} resolved to 0."
        )

    return static_fee + l1_fee // l2_price


async def calc_arbitrum_pre_verification_gas(
    w3: AsyncWeb3,
    user_op: UserOp,
    entry_point: str,
    static_fee: int,
    chain_id: Optional[int] = None,
) -> int:
    serialized_tx = build_worst_case_transaction(
        user_op, entry_point, chain_id or constants.ARBITRUM_FALLBACK_CHAIN_ID
    )

    # (gasEstimateForL1, baseFee, l1BaseFeeEstimate)
    gas_estimate_for_l1, _, _ = await estimation.web3.call_contract(
        w3,
        constants.ARBITRUM_NODE_INTERFACE,
        constants.GAS_ESTIMATE_L1_COMPONENT_ABI,
        "gasEstimateL1Component",
        [entry_point, False, serialized_tx],
    )

    return static_fee + gas_estimate_for_l1


async def calc_verification_gas_and_call_gas_limit(
    w3: AsyncWeb3,
    user_op: UserOp,
    execution_result: ExecutionResult,
    chain_id: int,
) -> tuple[int, int]:
    verification_gas_limit = (
        (execution_result.pre_op_gas - user_op.pre_verification_gas) * 3 // 2
    )

    if user_op.max_priority_fee_per_gas == user_op.max_fee_per_gas:
        gas_price = user_op.max_fee_per_gas
    else:
        base_fee = await estimation.web3.get_base_fee(w3)
        gas_price = min(
            user_op.max_fee_per_gas,
            user_op.max_priority_fee_per_gas + base_fee,
        )

    if gas_price == 0:
        raise ZeroGasPriceError(
            "The gas price of the UserOp resolved to 0, set "
            "'max_fee_per_gas' and 'max_priority_fee_per_gas' to derive "
            "'call_gas_limit' from the execution result."
        )

    call_gas_limit = max(
        execution_result.paid // gas_price
        - execution_result.pre_op_gas
        + constants.INTRINSIC_GAS
        + constants.CALL_GAS_LIMIT_BUFFER,
        constants.MIN_CALL_GAS_LIMIT,
    )
    if chain_id in constants.BASE_CHAIN_IDS:
        call_gas_limit = (
            call_gas_limit * settings.call_gas_limit_markup_percent // 100
        )

    return verification_gas_limit, call_gas_limit
