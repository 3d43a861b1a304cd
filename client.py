import asyncio
from typing import Optional

import typer
from httpx import AsyncClient

from estimation.client import AppClient, get_rpc_uri

cli = typer.Typer()


@cli.command(help="Estimate gas parameters for the UserOp")
def estimate_user_op(
    host: str = typer.Argument(..., help="Estimator RPC URL"),
    entry_point: str = typer.Argument(..., help="The entry point address"),
    sender: str = typer.Argument(..., help="The account making the operation"),
    nonce: str = typer.Argument(
        ...,
        help="Anti-replay parameter; also used as the salt for first-time "
        "account creation",
    ),
    call_data: str = typer.Argument(
        ...,
        help="The data to pass to the sender during the main execution call",
    ),
    init_code: str = typer.Option(
        "0x",
        help="The initCode of the account (needed if and only if the account "
        "is not yet on-chain and needs to be created)",
    ),
    call_gas_limit: str = typer.Option(
        "0x0", help="The amount of gas to allocate the main execution call"
    ),
    verification_gas_limit: str = typer.Option(
        "0x0", help="The amount of gas to allocate for the verification step"
    ),
    max_fee_per_gas: str = typer.Option(
        "0x0", help="Maximum fee per gas (similar to EIP-1559 max_fee_per_gas)"
    ),
    max_priority_fee_per_gas: str = typer.Option(
        "0x0",
        help="Maximum priority fee per gas "
        "(similar to EIP-1559 max_priority_fee_per_gas)",
    ),
    paymaster: Optional[str] = typer.Option(
        None, help="Address of the paymaster sponsoring the operation"
    ),
    paymaster_verification_gas_limit: str = typer.Option(
        "0x0", help="The amount of gas to allocate for the paymaster validation"
    ),
    paymaster_post_op_gas_limit: str = typer.Option(
        "0x0", help="The amount of gas to allocate for the paymaster post-op"
    ),
    paymaster_data: str = typer.Option(
        "0x", help="Extra data to send to the paymaster"
    ),
    signature: str = typer.Option(
        "0x",
        help="Data passed into the account along with the nonce during the "
        "verification step (a placeholder is sized in when empty)",
    ),
    pre_op_gas: Optional[str] = typer.Option(
        None, help="'preOpGas' from a dry-run of the UserOp"
    ),
    paid: Optional[str] = typer.Option(
        None, help="'paid' from a dry-run of the UserOp"
    ),
):
    user_op = {
        "sender": sender,
        "nonce": nonce,
        "init_code": init_code,
        "call_data": call_data,
        "call_gas_limit": call_gas_limit,
        "verification_gas_limit": verification_gas_limit,
        "max_fee_per_gas": max_fee_per_gas,
        "max_priority_fee_per_gas": max_priority_fee_per_gas,
        "paymaster_verification_gas_limit": paymaster_verification_gas_limit,
        "paymaster_post_op_gas_limit": paymaster_post_op_gas_limit,
        "paymaster_data": paymaster_data,
        "signature": signature,
    }
    if paymaster:
        user_op["paymaster"] = paymaster

    request = {"user_op": user_op, "entry_point": entry_point}
    if pre_op_gas is not None and paid is not None:
        request["execution_result"] = {"pre_op_gas": pre_op_gas, "paid": paid}

    response = asyncio.run(_estimate_user_op(host, request))
    print(response)


async def _estimate_user_op(host, request):
    async with AsyncClient(base_url=get_rpc_uri(host)) as client:
        return await AppClient(client).estimate_user_op(request)


@cli.command(help="Get a list of supported entry points")
def supported_entry_points(
    host: str = typer.Argument(..., help="Estimator RPC URL")
):
    response = asyncio.run(_supported_entry_points(host))
    print(response)


async def _supported_entry_points(host):
    async with AsyncClient(base_url=get_rpc_uri(host)) as client:
        return await AppClient(client).supported_entry_points()


if __name__ == "__main__":
    cli()
