from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    rpc_endpoint_uri: str = "http://localhost:8545"
    chain_id: Optional[int] = None
    supported_entry_points: list[str] = [
        "0x0000000071727De22E5E9d8BAf0edAc6f37da032",
    ]
    log_level: str = "info"
    log_json: bool = False
    optimism_fast_gas_price: bool = True
    fast_gas_price_percent: int = 110
    call_gas_limit_markup_percent: int = 110
    gas_overheads: dict[str, float] = {}


settings = Settings()
