import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Self

from pytoniq_core import Address, Cell, begin_cell

from .actions import (
    InternalMessage,
    OutAction,
    SendMessage,
    SendMode,
    load_out_list,
    store_out_list,
)
from .errors import TooManyActions
from .query_id import WIDE_QUERY_ID_SIZE, QueryId

logger = logging.getLogger(__name__)

OPCODE_INTERNAL_TRANSFER = 0xAE42E5A4
MAX_ACTIONS = 254
ACTIONS_PER_LINK = MAX_ACTIONS - 1


def batch_send_mode(value: int) -> SendMode:
    """Funded batches pay fees per message, empty ones forward the whole balance."""
    if value > 0:
        return SendMode.PAY_GAS_SEPARATELY
    return SendMode.CARRY_ALL_REMAINING_BALANCE


@dataclass(frozen=True)
class InternalTransferBody:
    """
    internal_transfer#ae42e5a4 query_id:uint64 actions:^OutList = InternalMsgBody;
    """

    query_id: QueryId
    actions: Sequence[OutAction] | Cell

    def actions_cell(self) -> Cell:
        if isinstance(self.actions, Cell):
            return self.actions
        if len(self.actions) > MAX_ACTIONS:
            raise TooManyActions(len(self.actions), MAX_ACTIONS)
        return store_out_list(self.actions)

    def to_cell(self) -> Cell:
        return (
            begin_cell()
            .store_uint(OPCODE_INTERNAL_TRANSFER, 32)
            .store_uint(self.query_id.to_wide(), WIDE_QUERY_ID_SIZE)
            .store_ref(self.actions_cell())
            .end_cell()
        )

    @classmethod
    def from_cell(cls, cell: Cell) -> Self:
        cs = cell.begin_parse()
        opcode = cs.load_uint(32)
        if opcode != OPCODE_INTERNAL_TRANSFER:
            raise ValueError(f"Unexpected opcode {opcode:#010x}")
        query_id = QueryId.from_wide(cs.load_uint(WIDE_QUERY_ID_SIZE))
        return cls(query_id, load_out_list(cs.load_ref()))


def internal_transfer(
    wallet: Address, actions: Sequence[OutAction] | Cell, query_id: QueryId, value: int
) -> InternalMessage:
    return InternalMessage(
        dest=wallet,
        value=value,
        body=InternalTransferBody(query_id, actions).to_cell(),
    )


def pack_actions(
    wallet: Address, actions: Sequence[OutAction], value: int, query_id: QueryId
) -> InternalMessage:
    """
    Pack any number of actions into a chain of internal transfers to ``wallet``.

    Each link holds at most ``MAX_ACTIONS`` actions. When the list is longer, a
    link keeps ``ACTIONS_PER_LINK`` of them and sends the rest to the wallet
    itself as its last action. The chain is built from the tail so that the
    depth does not depend on the Python call stack.
    """
    mode = batch_send_mode(value)
    starts = [0]
    while len(actions) - starts[-1] > MAX_ACTIONS:
        starts.append(starts[-1] + ACTIONS_PER_LINK)

    message = internal_transfer(wallet, actions[starts[-1] :], query_id, value)
    for start in reversed(starts[:-1]):
        batch = [*actions[start : start + ACTIONS_PER_LINK], SendMessage.internal(mode, message)]
        message = internal_transfer(wallet, batch, query_id, value)

    logger.debug(f"Packed {len(actions)} actions into {len(starts)} internal transfers")
    return message


def _continuation(action: OutAction, wallet: Address) -> InternalMessage | None:
    if not isinstance(action, SendMessage) or action.message.begin_parse().preload_uint(1) != 0:
        return None
    nested = InternalMessage.from_cell(action.message)
    if nested.dest != wallet or len(nested.body.bits) < 32:
        return None
    if nested.body.begin_parse().preload_uint(32) != OPCODE_INTERNAL_TRANSFER:
        return None
    return nested


def unpack_actions(message: InternalMessage) -> list[OutAction]:
    """Flatten a chain built by ``pack_actions`` back into its actions.

    A node holding exactly 254 actions whose last one is an internal transfer
    sent to ``message.dest`` itself is always followed as a continuation. A
    caller's own self-addressed internal transfer in that position is therefore
    indistinguishable from a link and gets expanded.
    """
    result: list[OutAction] = []
    while True:
        actions = list(InternalTransferBody.from_cell(message.body).actions)
        nested = _continuation(actions[-1], message.dest) if len(actions) == MAX_ACTIONS else None
        if nested is None:
            result.extend(actions)
            return result
        result.extend(actions[:-1])
        message = nested
