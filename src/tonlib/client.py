import asyncio
import json
import logging
import traceback
from pathlib import Path

import pydantic

from . import api
from .tonlibjson import JSONObject, TonLib, TonlibJsonCDLL

logger = logging.getLogger(__name__)


class TonlibClient:
    def __init__(
        self,
        global_config: JSONObject,
        cdll_path: Path,
        ls_index: int = 0,
        loop: asyncio.AbstractEventLoop | None = None,
        verbosity_level: int = 0,
        receive_timeout: float = 1.0,
    ):
        self.ls_index: int = ls_index
        self._global_config: JSONObject = global_config
        self._cdll_path: Path = cdll_path
        self._loop: asyncio.AbstractEventLoop | None = loop
        self._verbosity_level: int = verbosity_level
        self._receive_timeout: float = receive_timeout
        self._tonlib_wrapper: TonLib | None = None

    @property
    def local_config(self) -> JSONObject:
        local = dict(self._global_config)
        liteservers = local.get("liteservers")
        if isinstance(liteservers, list) and liteservers:
            local["liteservers"] = [liteservers[self.ls_index]]
        return local

    def _create_wrapper(self, loop: asyncio.AbstractEventLoop) -> TonLib:
        return TonLib(
            TonlibJsonCDLL(self._cdll_path),
            loop,
            receive_timeout=self._receive_timeout,
            verbosity_level=self._verbosity_level,
        )

    async def init(self) -> None:
        if self._tonlib_wrapper:
            logger.warning("init is already done")
            return
        self._tonlib_wrapper = self._create_wrapper(self._loop or asyncio.get_running_loop())

        request = api.init(
            options=api.options(
                config=api.config(
                    config=json.dumps(self.local_config),
                    blockchain_name="",
                    use_callbacks_for_network=False,
                    ignore_cache=False,
                ),
                keystore_type=api.keyStoreTypeInMemory(),
            )
        )
        _ = await self._execute(request, api.options_info)

        logger.info(f"TonLib #{self.ls_index:03d} inited successfully")

    async def aclose(self):
        if self._tonlib_wrapper is not None:
            await self._tonlib_wrapper.aclose()
            self._tonlib_wrapper = None

    async def __aenter__(self):
        await self.init()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: traceback.TracebackException | None,
    ):
        await self.aclose()

    async def _execute[T: pydantic.BaseModel](
        self, request: pydantic.BaseModel, result_type: type[T]
    ) -> T:
        assert self._tonlib_wrapper is not None, "TonlibClient is not initialized"
        return result_type.model_validate(await self._tonlib_wrapper.execute(request))

    async def raw_send_message(self, serialized_boc: bytes) -> api.ok:
        return await self._execute(api.raw_sendMessage(body=serialized_boc), api.ok)

    async def raw_get_account_state(self, account_address: str) -> api.raw_fullAccountState:
        request = api.raw_getAccountState(
            account_address=api.accountAddress(account_address=account_address)
        )
        return await self._execute(request, api.raw_fullAccountState)

    async def smc_load(self, account_address: str) -> api.smc_info:
        request = api.smc_load(account_address=api.accountAddress(account_address=account_address))
        return await self._execute(request, api.smc_info)

    async def smc_run_get_method(
        self, smc_id: int, method: str, stack: list[api.tvm_StackEntry]
    ) -> api.smc_runResult:
        request = api.smc_runGetMethod(
            id=smc_id, method=api.smc_methodIdName(name=method), stack=stack
        )
        return await self._execute(request, api.smc_runResult)

    async def smc_forget(self, smc_id: int) -> api.ok:
        return await self._execute(api.smc_forget(id=smc_id), api.ok)
