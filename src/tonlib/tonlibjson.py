import asyncio
import ctypes
import json
import logging
import typing
from enum import Enum, auto
from pathlib import Path
from typing import Callable, cast, final, override

import pydantic

from . import api

type JSONSerializable = (
    None
    | bool
    | int
    | float
    | str
    | list["JSONSerializable"]
    | dict[str, "JSONSerializable"]
)
type JSONObject = dict[str, JSONSerializable]

logger = logging.getLogger(__name__)


class TonlibError(Exception):
    def __init__(self, result: api.error):
        super().__init__(result.message)
        self.result: api.error = result

    @property
    def code(self) -> int:
        return self.result.code

    @override
    def __str__(self):
        return self.result.message


@final
class TonlibJsonCDLL:
    def __init__(self, cdll_path: Path):
        tonlib = ctypes.CDLL(cdll_path)

        set_verbosity_level = tonlib.tonlib_client_set_verbosity_level
        set_verbosity_level.restype = None
        set_verbosity_level.argtypes = [ctypes.c_int]
        self.set_verbosity_level = cast(Callable[[int], None], set_verbosity_level)

        create = tonlib.tonlib_client_json_create
        create.restype = ctypes.c_void_p
        create.argtypes = []
        self.create = cast(Callable[[], int], create)

        send = tonlib.tonlib_client_json_send
        send.restype = None
        send.argtypes = [ctypes.c_void_p, ctypes.c_char_p]
        self.send = cast(Callable[[int, bytes], None], send)

        receive = tonlib.tonlib_client_json_receive
        receive.restype = ctypes.c_char_p
        receive.argtypes = [ctypes.c_void_p, ctypes.c_double]
        self.receive = cast(Callable[[int, float], bytes | None], receive)

        destroy = tonlib.tonlib_client_json_destroy
        destroy.restype = None
        destroy.argtypes = [ctypes.c_void_p]
        self.destroy = cast(Callable[[int], None], destroy)


class _Status(Enum):
    RUNNING = auto()
    FINISHED = auto()
    CRASHED = auto()


class TonLib:
    """
    Asynchronous wrapper over a single ``tonlib_client_json`` instance.

    Requests are tagged with ``@extra`` and answered through futures; a
    background task polls the native client from an executor thread.
    """

    def __init__(
        self,
        cdll: TonlibJsonCDLL,
        loop: asyncio.AbstractEventLoop,
        receive_timeout: float = 1.0,
        verbosity_level: int = 0,
    ):
        self._cdll: TonlibJsonCDLL = cdll
        self._cdll.set_verbosity_level(verbosity_level)
        self._client: int = self._cdll.create()

        # `tonlib_client_json_receive` cannot be interrupted, so it is polled with a timeout.
        self._receive_timeout: float = receive_timeout

        self._request_id: int = 0
        self._futures: dict[str, asyncio.Future[JSONObject]] = {}
        self._loop: asyncio.AbstractEventLoop = loop
        self._state: _Status = _Status.RUNNING

        self._work_notification: asyncio.Event = asyncio.Event()
        self._reader: asyncio.Task[None] = self._loop.create_task(self._read_results())

    def __del__(self):
        assert self._client == 0, (
            "TonLib client not destroyed. Call 'aclose' before destroying the object."
        )

    @property
    def is_running(self) -> bool:
        return self._state == _Status.RUNNING

    async def execute(self, query: pydantic.BaseModel) -> JSONObject:
        assert self.is_running, f"TonLib failed with state: {self._state}"

        request_id = str(self._request_id)
        self._request_id += 1

        request = cast(JSONObject, query.model_dump(mode="json", by_alias=True))
        request["@extra"] = request_id

        future: asyncio.Future[JSONObject] = self._loop.create_future()
        future.add_done_callback(lambda _: self._futures.pop(request_id, None))
        self._futures[request_id] = future

        self._cdll.send(self._client, json.dumps(request).encode("utf-8"))
        self._work_notification.set()
        return await future

    def _receive(self) -> JSONObject | None:
        raw = self._cdll.receive(self._client, self._receive_timeout)
        if raw is None:
            return None
        return typing.cast(JSONObject, json.loads(raw.decode("utf-8")))

    def _resolve(self, result: JSONObject):
        request_id = result.get("@extra")
        future = self._futures.get(request_id) if isinstance(request_id, str) else None
        if future is None or future.done():
            logger.debug(f"Dropping unsolicited tonlib result {result.get('@type')}")
            return

        if result.get("@type") == "error":
            future.set_exception(TonlibError(api.error.model_validate(result)))
        else:
            future.set_result(result)

    async def _read_results(self):
        try:
            while True:
                if not self._futures:
                    _ = await self._work_notification.wait()
                self._work_notification.clear()

                if not self.is_running:
                    break

                result = await self._loop.run_in_executor(None, self._receive)
                if result is not None:
                    self._resolve(result)
        except Exception as e:
            logger.error("TonLib background task failed", exc_info=True)
            self._state = _Status.CRASHED
            for f in self._futures.values():
                if not f.done():
                    f.set_exception(e)

    async def aclose(self):
        try:
            if self._state == _Status.RUNNING:
                self._state = _Status.FINISHED
            self._work_notification.set()
            await self._reader
            for f in list(self._futures.values()):
                if not f.done():
                    f.set_exception(asyncio.CancelledError())
        finally:
            if self._client != 0:
                self._cdll.destroy(self._client)
                self._client = 0
