"""
Query identifiers of the highload v3 wallet.

The contract keeps, per shard, a bitmap of seen slots. A query id addresses one
bit of that bitmap: ``shard`` selects the bitmap and ``slot`` the bit inside
it. On the wire the pair is packed into 23 bits as ``shard * 1023 + slot``,
slot ``1023`` is never used so the packed range stays dense.

Internal transfer bodies and the ``processed?`` get method reserve 64 bits for
the same number; ``widen``/``narrow`` convert between the two widths.
"""

from dataclasses import dataclass
from typing import Self

from .errors import RangeError, check_uint

SHARD_SIZE = 13
SLOT_SIZE = 10
QUERY_ID_SIZE = SHARD_SIZE + SLOT_SIZE
WIDE_QUERY_ID_SIZE = 64

SLOTS_PER_SHARD = (1 << SLOT_SIZE) - 1
MAX_SHARD = (1 << SHARD_SIZE) - 1
MAX_SLOT = SLOTS_PER_SHARD - 1
MAX_PACKED = (MAX_SHARD + 1) * SLOTS_PER_SHARD - 1


def pack(shard: int, slot: int) -> int:
    if not 0 <= shard <= MAX_SHARD:
        raise RangeError("shard", shard, SHARD_SIZE)
    if not 0 <= slot <= MAX_SLOT:
        raise RangeError("slot", slot, SLOT_SIZE)
    return shard * SLOTS_PER_SHARD + slot


def unpack(packed: int) -> tuple[int, int]:
    if not 0 <= packed <= MAX_PACKED:
        raise RangeError("query_id", packed, QUERY_ID_SIZE)
    return divmod(packed, SLOTS_PER_SHARD)


def widen(packed: int) -> int:
    return check_uint("query_id", packed, QUERY_ID_SIZE)


def narrow(wide: int) -> int:
    _ = check_uint("query_id", wide, WIDE_QUERY_ID_SIZE)
    return check_uint("query_id", wide, QUERY_ID_SIZE)


@dataclass(frozen=True, order=True)
class QueryId:
    shard: int
    slot: int

    def __post_init__(self):
        _ = pack(self.shard, self.slot)

    @classmethod
    def from_packed(cls, packed: int) -> Self:
        shard, slot = unpack(packed)
        return cls(shard, slot)

    @classmethod
    def from_wide(cls, wide: int) -> Self:
        return cls.from_packed(narrow(wide))

    @classmethod
    def from_int(cls, value: "int | QueryId") -> "QueryId":
        if isinstance(value, QueryId):
            return value
        return cls.from_wide(value)

    def to_packed(self) -> int:
        return pack(self.shard, self.slot)

    def to_wide(self) -> int:
        return widen(self.to_packed())

    def __int__(self) -> int:
        return self.to_packed()
