"""
Signed external messages accepted by the highload v3 wallet.

    msg_inner$_ subwallet_id:uint32 message:^Cell mode:uint8 query_id:uint23
                created_at:uint64 timeout:uint22 = MsgInner;
    msg_body$_ signature:bits512 inner:^MsgInner = ExternalInMsgBody;
"""

import time
from dataclasses import dataclass
from typing import Self

from nacl.signing import SigningKey, VerifyKey
from pytoniq_core import Address, Cell, StateInit, begin_cell

from .actions import load_message_tail, store_message_tail
from .errors import check_uint
from .query_id import QUERY_ID_SIZE, QueryId

SUBWALLET_ID_SIZE = 32
MODE_SIZE = 8
TIMESTAMP_SIZE = 64
TIMEOUT_SIZE = 22
SIGNATURE_SIZE = 64


@dataclass(frozen=True)
class ExternalMessageBody:
    subwallet_id: int
    message: Cell
    mode: int
    query_id: QueryId
    created_at: int
    timeout: int

    def __post_init__(self):
        _ = check_uint("subwallet_id", self.subwallet_id, SUBWALLET_ID_SIZE)
        _ = check_uint("mode", self.mode, MODE_SIZE)
        _ = check_uint("created_at", self.created_at, TIMESTAMP_SIZE)
        _ = check_uint("timeout", self.timeout, TIMEOUT_SIZE)

    @classmethod
    def build(
        cls,
        query_id: QueryId | int,
        timeout: int,
        subwallet_id: int,
        mode: int,
        message: Cell,
        created_at: int | None = None,
    ) -> Self:
        if created_at is None:
            created_at = int(time.time())
        return cls(
            subwallet_id=subwallet_id,
            message=message,
            mode=mode,
            query_id=QueryId.from_int(query_id),
            created_at=created_at,
            timeout=timeout,
        )

    def to_cell(self) -> Cell:
        return (
            begin_cell()
            .store_uint(self.subwallet_id, SUBWALLET_ID_SIZE)
            .store_ref(self.message)
            .store_uint(self.mode, MODE_SIZE)
            .store_uint(self.query_id.to_packed(), QUERY_ID_SIZE)
            .store_uint(self.created_at, TIMESTAMP_SIZE)
            .store_uint(self.timeout, TIMEOUT_SIZE)
            .end_cell()
        )

    @classmethod
    def from_cell(cls, cell: Cell) -> Self:
        cs = cell.begin_parse()
        subwallet_id = cs.load_uint(SUBWALLET_ID_SIZE)
        message = cs.load_ref()
        mode = cs.load_uint(MODE_SIZE)
        query_id = QueryId.from_packed(cs.load_uint(QUERY_ID_SIZE))
        return cls(
            subwallet_id=subwallet_id,
            message=message,
            mode=mode,
            query_id=query_id,
            created_at=cs.load_uint(TIMESTAMP_SIZE),
            timeout=cs.load_uint(TIMEOUT_SIZE),
        )


def _signing_key(secret_key: bytes) -> SigningKey:
    # 64-byte keys are seed || public key, as produced by nacl and ton-crypto
    if len(secret_key) == 64:
        secret_key = secret_key[:32]
    return SigningKey(secret_key)


@dataclass(frozen=True)
class SignedExternalEnvelope:
    signature: bytes
    body: ExternalMessageBody

    def to_cell(self) -> Cell:
        return begin_cell().store_bytes(self.signature).store_ref(self.body.to_cell()).end_cell()

    def to_boc(self) -> bytes:
        return self.to_cell().to_boc()

    @classmethod
    def from_cell(cls, cell: Cell) -> Self:
        cs = cell.begin_parse()
        signature = cs.load_bytes(SIGNATURE_SIZE)
        return cls(signature, ExternalMessageBody.from_cell(cs.load_ref()))

    def verify(self, public_key: bytes) -> bool:
        """Raises ``nacl.exceptions.BadSignatureError`` on mismatch."""
        _ = VerifyKey(public_key).verify(self.body.to_cell().hash, self.signature)
        return True


def sign(body: ExternalMessageBody, secret_key: bytes) -> SignedExternalEnvelope:
    signed = _signing_key(secret_key).sign(body.to_cell().hash)
    return SignedExternalEnvelope(signed.signature, body)


def external_message(dest: Address, body: Cell, init: StateInit | None = None) -> Cell:
    """Wrap ``body`` into an inbound external message addressed to ``dest``."""
    head = (
        begin_cell()
        .store_uint(0b10, 2)
        .store_uint(0, 2)
        .store_address(dest)
        .store_coins(0)
    )
    return store_message_tail(head, init, body)


def parse_external_message(cell: Cell) -> tuple[Address, StateInit | None, Cell]:
    cs = cell.begin_parse()
    if cs.load_uint(2) != 0b10:
        raise ValueError("Not an inbound external message")
    _ = cs.load_uint(2)
    dest = cs.load_address()
    _ = cs.load_coins()
    init, body = load_message_tail(cs)
    return dest, init, body
