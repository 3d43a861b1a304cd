from unittest.mock import AsyncMock, patch

import pytest

from app.config import settings
from estimation.errors import ZeroGasPriceError
from estimation.gas import (
    ExecutionResult,
    calc_verification_gas_and_call_gas_limit,
)


@pytest.fixture(scope="function")
def estimated_user_op(user_op):
    return user_op.model_copy(update={"pre_verification_gas": 40000})


@pytest.mark.asyncio
async def test_derives_limits_with_equal_fees(w3, estimated_user_op):
    execution_result = ExecutionResult(pre_op_gas=100000, paid=10_000_000)
    with patch(
        "estimation.web3.get_base_fee", new_callable=AsyncMock
    ) as get_base_fee:
        (
            verification_gas_limit,
            call_gas_limit,
        ) = await calc_verification_gas_and_call_gas_limit(
            w3, estimated_user_op, execution_result, 1
        )

    assert verification_gas_limit == 90000
    assert call_gas_limit == 71000
    get_base_fee.assert_not_awaited()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "base_fee, gas_price", [(50, 60), (500, 200), (0, 10)]
)
async def test_uses_base_fee_when_fees_differ(
    w3, estimated_user_op, base_fee, gas_price
):
    user_op = estimated_user_op.model_copy(
        update={"max_fee_per_gas": 200, "max_priority_fee_per_gas": 10}
    )
    execution_result = ExecutionResult(pre_op_gas=100000, paid=3_000_000)
    with patch(
        "estimation.web3.get_base_fee",
        new_callable=AsyncMock,
        return_value=base_fee,
    ):
        _, call_gas_limit = await calc_verification_gas_and_call_gas_limit(
            w3, user_op, execution_result, 1
        )

    assert call_gas_limit == max(
        3_000_000 // gas_price - 100000 + 71000, 9000
    )


@pytest.mark.asyncio
async def test_keeps_minimum_call_gas_limit(w3, estimated_user_op):
    execution_result = ExecutionResult(pre_op_gas=100000, paid=100)
    _, call_gas_limit = await calc_verification_gas_and_call_gas_limit(
        w3, estimated_user_op, execution_result, 1
    )

    assert call_gas_limit == 9000


@pytest.mark.asyncio
@pytest.mark.parametrize("chain_id", [8453, 84531, 84532])
async def test_marks_up_call_gas_limit_on_base(
    w3, estimated_user_op, chain_id
):
    execution_result = ExecutionResult(pre_op_gas=100000, paid=10_000_000)
    (
        verification_gas_limit,
        call_gas_limit,
    ) = await calc_verification_gas_and_call_gas_limit(
        w3, estimated_user_op, execution_result, chain_id
    )

    assert verification_gas_limit == 90000
    assert call_gas_limit == 71000 * 110 // 100


@pytest.mark.asyncio
async def test_uses_configured_markup(
    w3, estimated_user_op, monkeypatch
):
    monkeypatch.setattr(settings, "call_gas_limit_markup_percent", 125)
    execution_result = ExecutionResult(pre_op_gas=100000, paid=10_000_000)
    _, call_gas_limit = await calc_verification_gas_and_call_gas_limit(
        w3, estimated_user_op, execution_result, 8453
    )

    assert call_gas_limit == 71000 * 125 // 100


@pytest.mark.asyncio
async def test_does_not_mark_up_other_optimism_chains(w3, estimated_user_op):
    execution_result = ExecutionResult(pre_op_gas=100000, paid=10_000_000)
    _, call_gas_limit = await calc_verification_gas_and_call_gas_limit(
        w3, estimated_user_op, execution_result, 10
    )

    assert call_gas_limit == 71000


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "max_fee_per_gas, max_priority_fee_per_gas", [(0, 0), (100, 0)]
)
async def test_rejects_zero_gas_price(
    w3, estimated_user_op, max_fee_per_gas, max_priority_fee_per_gas
):
    user_op = estimated_user_op.model_copy(
        update={
            "max_fee_per_gas": max_fee_per_gas,
            "max_priority_fee_per_gas": max_priority_fee_per_gas,
        }
    )
    execution_result = ExecutionResult(pre_op_gas=100000, paid=10_000_000)
    with patch(
        "estimation.web3.get_base_fee", new_callable=AsyncMock, return_value=0
    ):
        with pytest.raises(ZeroGasPriceError):
            await calc_verification_gas_and_call_gas_limit(
                w3, user_op, execution_result, 1
            )
