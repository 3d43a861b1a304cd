from typing import Optional
from urllib.parse import urlparse, urlunparse

from httpx import AsyncClient

from estimation.gas import ExecutionResult
from estimation.user_op import UserOp


class AppClient:
    def __init__(self, client: AsyncClient):
        self.client = client

    async def estimate_user_op(self, request: dict, **kwargs) -> dict:
        return await self._make_request(
            "eth_estimateUserOperationGas", json=request, **kwargs
        )

    async def supported_entry_points(self, **kwargs) -> list:
        return await self._make_request(
            "eth_supportedEntryPoints", json={}, **kwargs
        )

    async def _make_request(self, method: str, json: dict, **kwargs):
        response = await self.client.post(f"/api/{method}", json=json)
        return response.json()


class EstimateRequest:
    def __init__(
        self,
        entry_point_address: str,
        user_op: UserOp,
        execution_result: Optional[ExecutionResult] = None,
    ):
        self.entry_point = entry_point_address
        self.user_op = user_op
        self.execution_result = execution_result

    def json(self) -> dict:
        request = {
            "user_op": {
                k: self._to_hex(v)
                for k, v in self.user_op.model_dump().items()
                if v is not None
            },
            "entry_point": self.entry_point,
        }
        if self.execution_result is not None:
            request["execution_result"] = {
                k: self._to_hex(v)
                for k, v in self.execution_result.model_dump().items()
            }

        return request

    @classmethod
    def _to_hex(cls, v) -> str:
        if isinstance(v, str):
            return v
        if isinstance(v, int):
            return hex(v)
        if isinstance(v, bytes):
            return "0x" + bytes.hex(v)


def get_rpc_uri(uri: str, port: int = 8545) -> str:
    parsed = urlparse(uri)
    if not parsed.scheme or not parsed.netloc:
        raise ValueError("Invalid URI")

    host = parsed.netloc.split(":")[0]
    return urlunparse(
        (
            parsed.scheme,
            f"{host}:{port}",
            parsed.path,
            parsed.params,
            parsed.query,
            parsed.fragment,
        )
    )
