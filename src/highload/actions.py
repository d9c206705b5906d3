"""
Outbound actions and the relaxed internal messages they carry.

    action_send_msg#0ec3c86d mode:uint8 out_msg:^(MessageRelaxed Any) = OutAction;
    out_list_empty$_ = OutList 0;
    out_list$_ {n:#} prev:^(OutList n) action:OutAction = OutList (n + 1);

Only ``action_send_msg`` is interpreted. Every other action kind is kept as a
``RawAction`` and stored back bit for bit.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import IntFlag
from typing import Self

from pytoniq_core import Address, Builder, Cell, Slice, StateInit, begin_cell

from .errors import check_uint

ACTION_SEND_MSG_TAG = 0x0EC3C86D
MAX_CELL_BITS = 1023
MAX_CELL_REFS = 4


class SendMode(IntFlag):
    CARRY_ALL_REMAINING_BALANCE = 128
    CARRY_ALL_REMAINING_INCOMING_VALUE = 64
    DESTROY_ACCOUNT_IF_ZERO = 32
    PAY_GAS_SEPARATELY = 1
    IGNORE_ERRORS = 2
    NONE = 0


def _load_either_ref(cs: Slice) -> Cell:
    if cs.load_uint(1):
        return cs.load_ref()
    return begin_cell().store_slice(cs).end_cell()


def store_message_tail(head: Builder, init: StateInit | None, body: Cell) -> Cell:
    if init is None:
        head = head.store_uint(0, 1)
    else:
        head = head.store_uint(1, 1)
        init_cell = init.serialize()
        # the body does not count here, it moves to a ref on its own below
        if MAX_CELL_BITS - len(head.end_cell().bits) - 2 < len(init_cell.bits):
            head = head.store_uint(1, 1).store_ref(init_cell)
        else:
            head = head.store_uint(0, 1).store_cell(init_cell)

    head_cell = head.end_cell()
    builder = begin_cell().store_cell(head_cell)
    if (
        MAX_CELL_BITS - len(head_cell.bits) - 1 < len(body.bits)
        or len(head_cell.refs) + len(body.refs) > MAX_CELL_REFS
    ):
        return builder.store_uint(1, 1).store_ref(body).end_cell()
    return builder.store_uint(0, 1).store_cell(body).end_cell()


def load_message_tail(cs: Slice) -> tuple[StateInit | None, Cell]:
    init = None
    if cs.load_uint(1):
        init = StateInit.deserialize(cs.load_ref().begin_parse() if cs.load_uint(1) else cs)
    return init, _load_either_ref(cs)


@dataclass(frozen=True)
class InternalMessage:
    """Relaxed internal message, the payload of ``action_send_msg``."""

    dest: Address
    value: int
    body: Cell = field(default_factory=Cell.empty)
    bounce: bool = True
    init: StateInit | None = None
    ihr_disabled: bool = True
    extra_currencies: Cell | None = None

    def to_cell(self) -> Cell:
        head = (
            begin_cell()
            .store_uint(0, 1)
            .store_uint(int(self.ihr_disabled), 1)
            .store_uint(int(self.bounce), 1)
            .store_uint(0, 1)
            .store_uint(0, 2)
            .store_address(self.dest)
            .store_coins(self.value)
            .store_maybe_ref(self.extra_currencies)
            .store_coins(0)
            .store_coins(0)
            .store_uint(0, 64)
            .store_uint(0, 32)
        )
        return store_message_tail(head, self.init, self.body)

    @classmethod
    def from_cell(cls, cell: Cell) -> Self:
        cs = cell.begin_parse()
        if cs.load_uint(1) != 0:
            raise ValueError("Not an internal message")
        ihr_disabled = bool(cs.load_uint(1))
        bounce = bool(cs.load_uint(1))
        _ = cs.load_uint(1)
        _ = cs.load_address()
        dest = cs.load_address()
        value = cs.load_coins()
        extra_currencies = cs.load_maybe_ref()
        _ = cs.load_coins()
        _ = cs.load_coins()
        _ = cs.load_uint(64)
        _ = cs.load_uint(32)
        init, body = load_message_tail(cs)
        return cls(
            dest=dest,
            value=value or 0,
            body=body,
            bounce=bounce,
            init=init,
            ihr_disabled=ihr_disabled,
            extra_currencies=extra_currencies,
        )


@dataclass(frozen=True)
class SendMessage:
    mode: int
    message: Cell

    def __post_init__(self):
        _ = check_uint("mode", self.mode, 8)

    @classmethod
    def internal(cls, mode: int, message: InternalMessage) -> Self:
        return cls(mode, message.to_cell())

    def to_cell(self) -> Cell:
        return (
            begin_cell()
            .store_uint(ACTION_SEND_MSG_TAG, 32)
            .store_uint(self.mode, 8)
            .store_ref(self.message)
            .end_cell()
        )


@dataclass(frozen=True)
class RawAction:
    cell: Cell

    def to_cell(self) -> Cell:
        return self.cell


type OutAction = SendMessage | RawAction


def load_out_action(cs: Slice) -> OutAction:
    if cs.remaining_bits >= 32 and cs.preload_uint(32) == ACTION_SEND_MSG_TAG:
        _ = cs.load_uint(32)
        mode = cs.load_uint(8)
        return SendMessage(mode, cs.load_ref())
    return RawAction(begin_cell().store_slice(cs).end_cell())


def store_out_list(actions: Sequence[OutAction]) -> Cell:
    cell = Cell.empty()
    for action in actions:
        cell = begin_cell().store_ref(cell).store_cell(action.to_cell()).end_cell()
    return cell


def load_out_list(cell: Cell) -> list[OutAction]:
    actions: list[OutAction] = []
    while len(cell.bits) or cell.refs:
        cs = cell.begin_parse()
        cell = cs.load_ref()
        actions.append(load_out_action(cs))
    actions.reverse()
    return actions
