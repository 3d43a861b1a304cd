from typing import Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, field_validator

import estimation.gas
import estimation.user_op
import estimation.web3
from app.config import settings
from app.logging_config import get_logger, setup_logging
from app.validation import (
    validate_address,
    validate_bytes,
    validate_entry_point,
    validate_optional_address,
    validate_uint,
)
from estimation.errors import (
    ExecutionError,
    UnsupportedChainError,
    ZeroGasPriceError,
    parse_error,
)


class UserOp(estimation.user_op.UserOp):
    validate_sender = field_validator("sender", mode="before")(
        validate_address
    )
    validate_paymaster = field_validator("paymaster", mode="before")(
        validate_optional_address
    )
    bytes_ = field_validator(*estimation.user_op.BYTES_FIELDS, mode="before")(
        validate_bytes
    )

    @field_validator(*estimation.user_op.UINT256_FIELDS, mode="before")
    def hex_uint256(cls, v):
        return validate_uint(v, 256)

    @field_validator(*estimation.user_op.UINT128_FIELDS, mode="before")
    def hex_uint128(cls, v):
        return validate_uint(v, 128)


class ExecutionResult(estimation.gas.ExecutionResult):
    @field_validator("pre_op_gas", "paid", mode="before")
    def hex_uint256(cls, v):
        return validate_uint(v, 256)


class EstimateRequest(BaseModel):
    user_op: UserOp
    entry_point: str
    execution_result: Optional[ExecutionResult] = None

    validate_entry_point_address = field_validator(
        "entry_point", mode="before"
    )(validate_address)
    supported_entry_point = field_validator("entry_point")(
        validate_entry_point
    )


class UserOpGasEstimation(BaseModel):
    pre_verification_gas: int
    verification_gas_limit: Optional[int] = None
    call_gas_limit: int


setup_logging()
logger = get_logger("app")
app = FastAPI()


@app.post(
    "/api/eth_estimateUserOperationGas", response_model=UserOpGasEstimation
)
async def estimate_user_op(request: EstimateRequest):
    w3 = estimation.web3.w3
    chain_id = await estimation.web3.get_chain_id(w3)
    request_logger = logger.bind(
        chain_id=chain_id,
        entry_point=request.entry_point,
        sender=request.user_op.sender,
    )

    try:
        pre_verification_gas = await estimation.gas.calc_pre_verification_gas(
            w3,
            request.user_op,
            request.entry_point,
            chain_id,
            request_logger,
            settings.gas_overheads,
        )
        user_op = request.user_op.model_copy(
            update={"pre_verification_gas": pre_verification_gas}
        )

        verification_gas_limit = None
        if request.execution_result:
            if request.execution_result.pre_op_gas < pre_verification_gas:
                raise HTTPException(
                    status_code=422,
                    detail="'pre_op_gas' is below the estimated "
                    f"'pre_verification_gas' ({pre_verification_gas}), "
                    "simulate the UserOp with it first.",
                )
            (
                verification_gas_limit,
                call_gas_limit,
            ) = await estimation.gas.calc_verification_gas_and_call_gas_limit(
                w3, user_op, request.execution_result, chain_id
            )
        else:
            call_gas_limit = await estimation.web3.estimate_gas(
                w3,
                from_=request.entry_point,
                to=user_op.sender,
                data=user_op.call_data,
            )
    except (UnsupportedChainError, ZeroGasPriceError) as e:
        raise HTTPException(status_code=422, detail=str(e))
    except ExecutionError as e:
        kind = parse_error(e)
        request_logger.warning(
            "user op estimation failed", kind=kind.value, error=str(e)
        )
        raise HTTPException(
            status_code=422,
            detail=f"The estimation of the UserOp has failed with an error "
            f"({kind.value}): {e}",
        )

    request_logger.info(
        "user op estimated",
        pre_verification_gas=pre_verification_gas,
        verification_gas_limit=verification_gas_limit,
        call_gas_limit=call_gas_limit,
    )
    return UserOpGasEstimation(
        pre_verification_gas=pre_verification_gas,
        verification_gas_limit=verification_gas_limit,
        call_gas_limit=call_gas_limit,
    )


@app.post("/api/eth_supportedEntryPoints")
async def supported_entry_points():
    return settings.supported_entry_points
