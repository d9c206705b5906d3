import logging
import traceback
from collections.abc import Sequence
from typing import Protocol, Self

from pytoniq_core import Address, Cell
from tonlib import TonlibClient, TonlibError
from tonlib import api

from .actions import InternalMessage
from .config import TonlibConfig
from .errors import NetworkError

logger = logging.getLogger(__name__)

type StackValue = int | Cell


class Provider(Protocol):
    async def run_get_method(
        self, address: Address, method: str, stack: Sequence[int] = ()
    ) -> list[StackValue]: ...

    async def send_message(self, boc: bytes) -> None: ...

    async def get_balance(self, address: Address) -> int: ...


class Sender(Protocol):
    """Anything able to deliver an internal message, usually another wallet."""

    async def send(self, message: InternalMessage, mode: int) -> None: ...


def _to_stack_entry(value: int) -> api.tvm_StackEntry:
    return api.tvm_stackEntryNumber(number=api.tvm_numberDecimal(number=str(value)))


def _from_stack_entry(entry: api.tvm_StackEntry) -> StackValue:
    match entry:
        case api.tvm_stackEntryNumber(number=api.tvm_numberDecimal(number=number)):
            return int(number)
        case api.tvm_stackEntryCell(cell=api.tvm_cell(bytes=boc)):
            return Cell.one_from_boc(boc)
        case api.tvm_stackEntrySlice(slice=api.tvm_slice(bytes=boc)):
            return Cell.one_from_boc(boc)
        case _:
            raise NetworkError(0, f"Unsupported stack entry {entry.tl_type}")


class TonlibProvider:
    def __init__(self, client: TonlibClient):
        self._client: TonlibClient = client

    @classmethod
    def from_config(cls, config: TonlibConfig) -> Self:
        return cls(
            TonlibClient(
                config.load_global_config(),
                config.cdll_path,
                ls_index=config.ls_index,
                verbosity_level=config.verbosity_level,
                receive_timeout=config.receive_timeout,
            )
        )

    async def __aenter__(self):
        await self._client.init()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: traceback.TracebackException | None,
    ):
        await self._client.aclose()

    async def run_get_method(
        self, address: Address, method: str, stack: Sequence[int] = ()
    ) -> list[StackValue]:
        try:
            smc = await self._client.smc_load(address.to_str())
            try:
                result = await self._client.smc_run_get_method(
                    smc.id, method, [_to_stack_entry(value) for value in stack]
                )
            finally:
                _ = await self._client.smc_forget(smc.id)
        except TonlibError as e:
            raise NetworkError(e.code, str(e)) from e

        logger.debug(f"{method} on {address.to_str()}: exit code {result.exit_code}")
        if result.exit_code not in (0, 1):
            raise NetworkError(result.exit_code, f"Get method {method} failed")
        return [_from_stack_entry(entry) for entry in result.stack]

    async def send_message(self, boc: bytes) -> None:
        try:
            _ = await self._client.raw_send_message(boc)
        except TonlibError as e:
            raise NetworkError(e.code, str(e)) from e

    async def get_balance(self, address: Address) -> int:
        try:
            state = await self._client.raw_get_account_state(address.to_str())
        except TonlibError as e:
            raise NetworkError(e.code, str(e)) from e
        return state.balance
