from typing import Optional

import eth_abi
from pydantic import BaseModel, ConfigDict, field_validator
from web3 import Web3

import app.constants as constants

UINT128_FIELDS = (
    "call_gas_limit",
    "verification_gas_limit",
    "max_fee_per_gas",
    "max_priority_fee_per_gas",
    "paymaster_verification_gas_limit",
    "paymaster_post_op_gas_limit",
)
UINT256_FIELDS = ("nonce", "pre_verification_gas")
BYTES_FIELDS = ("init_code", "call_data", "paymaster_data", "signature")


class UserOp(BaseModel):
    sender: str
    nonce: int
    init_code: bytes = b""
    call_data: bytes
    call_gas_limit: int = 0
    verification_gas_limit: int = 0
    pre_verification_gas: int = 0
    max_fee_per_gas: int = 0
    max_priority_fee_per_gas: int = 0
    paymaster: Optional[str] = None
    paymaster_verification_gas_limit: int = 0
    paymaster_post_op_gas_limit: int = 0
    paymaster_data: bytes = b""
    signature: bytes = b""

    @field_validator("sender")
    def checksum_address(cls, v):
        return Web3.to_checksum_address(v)

    @field_validator("paymaster")
    def optional_checksum_address(cls, v):
        return Web3.to_checksum_address(v) if v else None

    @field_validator(*UINT128_FIELDS)
    def uint128(cls, v):
        if not 0 <= v <= constants.MAX_UINT128:
            raise ValueError("Must be in range [0, 2**128).")
        return v

    @field_validator(*UINT256_FIELDS)
    def uint256(cls, v):
        if not 0 <= v <= constants.MAX_UINT256:
            raise ValueError("Must be in range [0, 2**256).")
        return v

    def pack(self) -> "PackedUserOp":
        paymaster_and_data = b""
        if self.paymaster:
            paymaster_and_data = (
                Web3.to_bytes(hexstr=self.paymaster)
                + self.paymaster_verification_gas_limit.to_bytes(16, "big")
                + self.paymaster_post_op_gas_limit.to_bytes(16, "big")
                + self.paymaster_data
            )

        return PackedUserOp(
            sender=self.sender,
            nonce=self.nonce,
            init_code=self.init_code,
            call_data=self.call_data,
            account_gas_limits=self.verification_gas_limit.to_bytes(16, "big")
            + self.call_gas_limit.to_bytes(16, "big"),
            pre_verification_gas=self.pre_verification_gas,
            gas_fees=self.max_priority_fee_per_gas.to_bytes(16, "big")
            + self.max_fee_per_gas.to_bytes(16, "big"),
            paymaster_and_data=paymaster_and_data,
            signature=self.signature,
        )


class PackedUserOp(BaseModel):
    """The fixed-shape operation the entry point consumes."""

    model_config = ConfigDict(frozen=True)

    sender: str
    nonce: int
    init_code: bytes
    call_data: bytes
    account_gas_limits: bytes
    pre_verification_gas: int
    gas_fees: bytes
    paymaster_and_data: bytes
    signature: bytes

    def encode(self) -> bytes:
        return eth_abi.encode(
            list(constants.PACKED_USER_OP_TYPES), self.values()
        )

    def values(self) -> list:
        return [
            self.sender,
            self.nonce,
            self.init_code,
            self.call_data,
            self.account_gas_limits,
            self.pre_verification_gas,
            self.gas_fees,
            self.paymaster_and_data,
            self.signature,
        ]


def to_worst_case(packed_user_op: PackedUserOp) -> PackedUserOp:
    """Fill every field unknown at estimation time with 0xff bytes.

    Sender, init code and call data are kept. The result is used for sizing
    only and is never submitted.
    """
    return packed_user_op.model_copy(
        update={
            "nonce": constants.MAX_UINT256,
            "account_gas_limits": b"\xff" * 32,
            "pre_verification_gas": constants.MAX_UINT256,
            "gas_fees": b"\xff" * 32,
            "paymaster_and_data": b"\xff"
            * len(packed_user_op.paymaster_and_data),
            "signature": b"\xff" * len(packed_user_op.signature),
        }
    )


def encode_handle_ops_call(
    packed_user_ops: list[PackedUserOp], beneficiary: str
) -> bytes:
    selector = bytes(Web3.keccak(text=constants.HANDLE_OPS_SIGNATURE)[:4])
    params = eth_abi.encode(
        [f"({','.join(constants.PACKED_USER_OP_TYPES)})[]", "address"],
        [[op.values() for op in packed_user_ops], beneficiary],
    )
    return selector + params
