import re

from fastapi import HTTPException
from web3 import Web3

from app.config import settings


def validate_hex(v):
    if not (isinstance(v, str) and re.fullmatch(r"0x[0-9a-fA-F]*", v)):
        raise HTTPException(status_code=422, detail="Not a hex value.")

    return v


def validate_address(v):
    v = validate_hex(v)
    if not is_address(v):
        raise HTTPException(
            status_code=422, detail="Must be an Ethereum address."
        )

    return Web3.to_checksum_address(v)


def validate_optional_address(v):
    if v is None or v == "0x":
        return None

    return validate_address(v)


def validate_uint(v, bits: int):
    validate_hex(v)
    if v == "0x":
        return 0

    v = int(v, 16)
    if not 0 <= v < 2**bits:
        raise HTTPException(
            status_code=422, detail=f"Must be in range [0, 2**{bits})."
        )
    return v


def validate_bytes(v):
    if v == "0x":
        return b""

    validate_hex(v)
    if not (len(v) % 2 == 0):
        raise HTTPException(status_code=422, detail="Incorrect bytes string.")
    return bytes.fromhex(v[2:])


def validate_entry_point(v):
    if v.lower() not in map(str.lower, settings.supported_entry_points):
        raise HTTPException(
            status_code=422, detail="The EntryPoint is not supported."
        )

    return v


def is_address(s) -> bool:
    return bool(re.match(r"^(0x)[0-9a-f]{40}$", s, flags=re.IGNORECASE))
