from typing import NamedTuple, Optional

from web3 import AsyncWeb3
from web3.exceptions import Web3Exception
from web3.types import BlockData

from app.config import settings
from estimation.errors import (
    ContractCallExecutionError,
    EstimateGasExecutionError,
    TransactionExecutionError,
    wrap_rpc_error,
)


class GasPrice(NamedTuple):
    max_fee_per_gas: int
    max_priority_fee_per_gas: int


def get_w3(uri: Optional[str] = None) -> AsyncWeb3:
    return AsyncWeb3(
        AsyncWeb3.AsyncHTTPProvider(uri or settings.rpc_endpoint_uri)
    )


w3 = get_w3()


async def get_chain_id(w3: AsyncWeb3) -> int:
    if settings.chain_id is not None:
        return settings.chain_id

    return await w3.eth.chain_id


async def get_latest_block(w3: AsyncWeb3) -> BlockData:
    return await w3.eth.get_block("latest")


async def get_base_fee(w3: AsyncWeb3) -> int:
    latest_block = await get_latest_block(w3)
    return latest_block.get("baseFeePerGas") or 0


async def call_contract(
    w3: AsyncWeb3, address: str, abi: list, function: str, args: list
):
    contract = w3.eth.contract(address=address, abi=abi)
    try:
        return await getattr(contract.functions, function)(*args).call()
    except (Web3Exception, ValueError) as e:
        raise wrap_rpc_error(e, ContractCallExecutionError) from e


async def estimate_gas(w3: AsyncWeb3, from_: str, to: str, data: bytes) -> int:
    try:
        return await w3.eth.estimate_gas(
            {"from": from_, "to": to, "data": data}
        )
    except (Web3Exception, ValueError) as e:
        raise wrap_rpc_error(
            e, TransactionExecutionError, EstimateGasExecutionError
        ) from e


async def get_gas_price(
    w3: AsyncWeb3, chain_id: int, fast: bool, logger
) -> GasPrice:
    base_fee = await get_base_fee(w3)
    max_priority_fee_per_gas = await w3.eth.max_priority_fee
    max_fee_per_gas = 2 * base_fee + max_priority_fee_per_gas
    if fast:
        max_priority_fee_per_gas = (
            max_priority_fee_per_gas * settings.fast_gas_price_percent // 100
        )
        max_fee_per_gas = (
            max_fee_per_gas * settings.fast_gas_price_percent // 100
        )

    logger.debug(
        "gas price",
        chain_id=chain_id,
        fast=fast,
        base_fee=base_fee,
        max_fee_per_gas=max_fee_per_gas,
        max_priority_fee_per_gas=max_priority_fee_per_gas,
    )
    return GasPrice(max_fee_per_gas, max_priority_fee_per_gas)
