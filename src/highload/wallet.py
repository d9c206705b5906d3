import logging
from collections.abc import Sequence
from dataclasses import dataclass
from functools import cache
from typing import Self, final

from pytoniq_core import Address, Cell, StateInit, begin_cell

from .actions import InternalMessage, OutAction, SendMode
from .batcher import InternalTransferBody, batch_send_mode, internal_transfer, pack_actions
from .config import DEFAULT_SUBWALLET_ID, DEFAULT_TIMEOUT, WalletConfig
from .envelope import (
    SUBWALLET_ID_SIZE,
    TIMEOUT_SIZE,
    TIMESTAMP_SIZE,
    ExternalMessageBody,
    SignedExternalEnvelope,
    external_message,
    sign,
)
from .errors import NetworkError, check_uint
from .provider import Provider, Sender, StackValue
from .query_id import QueryId

logger = logging.getLogger(__name__)

HIGHLOAD_V3_CODE_BOC = (
    "b5ee9c7241021001000228000114ff00f4a413f4bcf2c80b01020120020d02014803040078d020d74bc00101"
    "c060b0915be101d0d3030171b0915be0fa4030f828c705b39130e0d31f018210ae42e5a4ba9d8040d721d74c"
    "f82a01ed55fb04e030020120050a02027306070011adce76a2686b85ffc00201200809001aabb6ed44d08101"
    "22d721d70b3f0018aa3bed44d08307d721d70b1f0201200b0c001bb9a6eed44d0810162d721d70b15800e5b8"
    "bf2eda2edfb21ab09028409b0ed44d0810120d721f404f404d33fd315d1058e1bf82325a15210b99f326df82"
    "305aa0015a112b992306dde923033e2923033e25230800df40f6fa19ed021d721d70a00955f037fdb31e0913"
    "0e259800df40f6fa19cd001d721d70a00937fdb31e0915be270801f6f2d48308d718d121f900ed44d0d3ffd3"
    "1ff404f404d33fd315d1f82321a15220b98e12336df82324aa00a112b9926d32de58f82301de541675f910f2"
    "a106d0d31fd4d307d30cd309d33fd315d15168baf2a2515abaf2a6f8232aa15250bcf2a304f823bbf2a35304"
    "800df40f6fa199d024d721d70a00f2649130e20e01fe5309800df40f6fa18e13d05004d718d20001f264c858"
    "cf16cf8301cf168e1030c824cf40cf8384095005a1a514cf40e2f800c94039800df41704c8cbff13cb1ff400"
    "12f40012cb3f12cb15c9ed54f80f21d0d30001f265d3020171b0925f03e0fa4001d70b01c000f2a5fa4031fa"
    "0031f401fa0031fa00318060d721d300010f0020f265d2000193d431d19130e272b1fb00b585bf03"
)


@cache
def wallet_code() -> Cell:
    return Cell.one_from_boc(bytes.fromhex(HIGHLOAD_V3_CODE_BOC))


@dataclass(frozen=True)
class WalletIdentity:
    workchain: int
    public_key: bytes
    subwallet_id: int = DEFAULT_SUBWALLET_ID
    timeout: int = DEFAULT_TIMEOUT

    def __post_init__(self):
        if len(self.public_key) != 32:
            raise ValueError(f"Public key must be 32 bytes, got {len(self.public_key)}")
        _ = check_uint("subwallet_id", self.subwallet_id, SUBWALLET_ID_SIZE)
        _ = check_uint("timeout", self.timeout, TIMEOUT_SIZE)

    def data_cell(self) -> Cell:
        """
        Initial persistent data of the contract:

            public_key:bits256 subwallet_id:uint32 old_queries:(Maybe ^Cell)
            queries:(Maybe ^Cell) last_clean_time:uint64 timeout:uint22
        """
        return (
            begin_cell()
            .store_bytes(self.public_key)
            .store_uint(self.subwallet_id, SUBWALLET_ID_SIZE)
            .store_uint(0, 1 + 1 + TIMESTAMP_SIZE)
            .store_uint(self.timeout, TIMEOUT_SIZE)
            .end_cell()
        )


def _stack_int(stack: list[StackValue], method: str) -> int:
    if not stack or not isinstance(stack[0], int):
        raise NetworkError(0, f"Get method {method} did not return an integer")
    return stack[0]


@final
class HighloadWalletV3:
    def __init__(self, identity: WalletIdentity):
        self.identity: WalletIdentity = identity
        self.state_init: StateInit = StateInit(code=wallet_code(), data=identity.data_cell())
        self.address: Address = Address((identity.workchain, self.state_init.serialize().hash))

    @property
    def workchain(self) -> int:
        return self.identity.workchain

    @property
    def public_key(self) -> bytes:
        return self.identity.public_key

    @property
    def subwallet_id(self) -> int:
        return self.identity.subwallet_id

    @property
    def timeout(self) -> int:
        return self.identity.timeout

    @classmethod
    def create(
        cls,
        workchain: int,
        public_key: bytes,
        subwallet_id: int | None = None,
        timeout: int | None = None,
    ) -> Self:
        return cls(
            WalletIdentity(
                workchain=workchain,
                public_key=public_key,
                subwallet_id=subwallet_id or DEFAULT_SUBWALLET_ID,
                timeout=timeout if timeout and timeout > 0 else DEFAULT_TIMEOUT,
            )
        )

    @classmethod
    def from_config(cls, config: WalletConfig) -> Self:
        return cls.create(config.workchain, config.public_key, config.subwallet_id, config.timeout)

    @classmethod
    async def from_address(
        cls,
        provider: Provider,
        address: Address,
        subwallet_id: int | None = None,
        timeout: int | None = None,
    ) -> Self:
        stack = await provider.run_get_method(address, "get_public_key")
        public_key = _stack_int(stack, "get_public_key").to_bytes(32, "big")
        wallet = cls.create(address.wc, public_key, subwallet_id, timeout)
        if wallet.address != address:
            logger.warning(
                f"Derived address {wallet.address.to_str()} differs from {address.to_str()}, "
                + "subwallet id or timeout do not match the deployed contract"
            )
        return wallet

    @staticmethod
    def generate_query_id(query_id: int | QueryId) -> QueryId:
        return QueryId.from_int(query_id)

    @staticmethod
    def create_internal_transfer_body(
        actions: Sequence[OutAction] | Cell, query_id: int | QueryId
    ) -> Cell:
        return InternalTransferBody(QueryId.from_int(query_id), actions).to_cell()

    def create_internal_transfer(
        self, actions: Sequence[OutAction] | Cell, query_id: int | QueryId, value: int
    ) -> InternalMessage:
        return internal_transfer(self.address, actions, QueryId.from_int(query_id), value)

    def pack_actions(
        self, actions: Sequence[OutAction], value: int, query_id: int | QueryId
    ) -> InternalMessage:
        return pack_actions(self.address, actions, value, QueryId.from_int(query_id))

    def create_external_message(
        self,
        secret_key: bytes,
        message: InternalMessage | Cell,
        mode: int,
        query_id: int | QueryId,
        created_at: int | None = None,
        subwallet_id: int | None = None,
        timeout: int | None = None,
    ) -> SignedExternalEnvelope:
        if isinstance(message, InternalMessage):
            message = message.to_cell()
        body = ExternalMessageBody.build(
            query_id=query_id,
            timeout=self.timeout if timeout is None else timeout,
            subwallet_id=self.subwallet_id if subwallet_id is None else subwallet_id,
            mode=mode,
            message=message,
            created_at=created_at,
        )
        return sign(body, secret_key)

    async def send(
        self,
        provider: Provider,
        message: SignedExternalEnvelope | Cell,
        with_state_init: bool = False,
    ) -> None:
        if isinstance(message, SignedExternalEnvelope):
            message = message.to_cell()
        init = self.state_init if with_state_init else None
        await provider.send_message(external_message(self.address, message, init).to_boc())

    async def send_external_message(
        self,
        provider: Provider,
        secret_key: bytes,
        message: InternalMessage | Cell,
        mode: int,
        query_id: int | QueryId,
        created_at: int | None = None,
        subwallet_id: int | None = None,
        timeout: int | None = None,
        with_state_init: bool = False,
    ) -> SignedExternalEnvelope:
        envelope = self.create_external_message(
            secret_key, message, mode, query_id, created_at, subwallet_id, timeout
        )
        await self.send(provider, envelope, with_state_init)
        logger.info(
            f"Sent external message to {self.address.to_str()} "
            + f"query_id={envelope.body.query_id.to_packed()} mode={mode}"
        )
        return envelope

    async def send_batch(
        self,
        provider: Provider,
        secret_key: bytes,
        messages: Sequence[OutAction],
        query_id: int | QueryId,
        subwallet_id: int | None = None,
        timeout: int | None = None,
        created_at: int | None = None,
        value: int = 0,
        with_state_init: bool = False,
    ) -> SignedExternalEnvelope:
        logger.info(f"Sending batch of {len(messages)} actions, value={value}")
        return await self.send_external_message(
            provider,
            secret_key,
            message=self.pack_actions(messages, value, query_id),
            mode=batch_send_mode(value),
            query_id=query_id,
            created_at=created_at,
            subwallet_id=subwallet_id,
            timeout=timeout,
            with_state_init=with_state_init,
        )

    async def send_deploy(self, sender: Sender, value: int) -> None:
        message = InternalMessage(dest=self.address, value=value, bounce=False, init=self.state_init)
        await sender.send(message, SendMode.PAY_GAS_SEPARATELY)
        logger.info(f"Deploy message sent to {self.address.to_str()} with {value} nanotons")

    async def get_balance(self, provider: Provider) -> int:
        return await provider.get_balance(self.address)

    async def get_public_key(self, provider: Provider) -> bytes:
        stack = await provider.run_get_method(self.address, "get_public_key")
        return _stack_int(stack, "get_public_key").to_bytes(32, "big")

    async def get_timeout(self, provider: Provider) -> int:
        stack = await provider.run_get_method(self.address, "get_timeout")
        return _stack_int(stack, "get_timeout")

    async def get_last_clean_time(self, provider: Provider) -> int:
        stack = await provider.run_get_method(self.address, "get_last_clean_time")
        return _stack_int(stack, "get_last_clean_time")

    async def get_processed(
        self, provider: Provider, query_id: int | QueryId, need_clean: bool = True
    ) -> bool:
        query_id = QueryId.from_int(query_id)
        stack = await provider.run_get_method(
            self.address, "processed?", [query_id.to_wide(), -1 if need_clean else 0]
        )
        return _stack_int(stack, "processed?") != 0
