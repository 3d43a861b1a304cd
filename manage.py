import json
from pathlib import Path
from typing import Optional

import typer
import uvicorn

import estimation.gas
from app.config import settings
from app.main import UserOp

cli = typer.Typer()


@cli.command(help="Run the app server")
def runserver(workers: int = 8, port: int = 8545):
    uvicorn.run("app.main:app", host="0.0.0.0", port=port, workers=workers)


@cli.command(
    help="Print the chain-independent preVerificationGas of a UserOp read "
    "from a JSON file with hex-encoded fields"
)
def pre_verification_gas(
    path: Path = typer.Argument(..., help="Path to the UserOp JSON file"),
    bundle_size: Optional[int] = typer.Option(
        None, help="Expected number of UserOps per bundle"
    ),
):
    with open(path, "r") as f:
        user_op = UserOp(**json.load(f))

    overheads = dict(settings.gas_overheads)
    if bundle_size:
        overheads["bundle_size"] = bundle_size

    print(
        estimation.gas.calc_default_pre_verification_gas(user_op, overheads)
    )


if __name__ == "__main__":
    cli()
