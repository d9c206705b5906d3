from collections.abc import Sequence

import pytest
from nacl.signing import SigningKey
from pytoniq_core import Address, Cell, begin_cell

from highload import (
    DEFAULT_SUBWALLET_ID,
    DEFAULT_TIMEOUT,
    HighloadWalletV3,
    InternalMessage,
    InternalTransferBody,
    NetworkError,
    QueryId,
    RangeError,
    SendMessage,
    SendMode,
    SignedExternalEnvelope,
    WalletConfig,
    WalletIdentity,
    unpack_actions,
)
from highload.envelope import parse_external_message
from highload.provider import StackValue

SEED = b"\x05" * 32
PUBLIC_KEY = bytes(SigningKey(SEED).verify_key)
DEST = Address((0, b"\x99" * 32))


class FakeProvider:
    def __init__(self, results: dict[str, list[StackValue]] | None = None, balance: int = 0):
        self.results: dict[str, list[StackValue]] = results or {}
        self.balance: int = balance
        self.calls: list[tuple[Address, str, list[int]]] = []
        self.sent: list[bytes] = []

    async def run_get_method(
        self, address: Address, method: str, stack: Sequence[int] = ()
    ) -> list[StackValue]:
        self.calls.append((address, method, list(stack)))
        return self.results[method]

    async def send_message(self, boc: bytes) -> None:
        self.sent.append(boc)

    async def get_balance(self, address: Address) -> int:
        return self.balance


class FakeSender:
    def __init__(self):
        self.sent: list[tuple[InternalMessage, int]] = []

    async def send(self, message: InternalMessage, mode: int) -> None:
        self.sent.append((message, mode))


def make_actions(count: int) -> list[SendMessage]:
    return [
        SendMessage(SendMode.PAY_GAS_SEPARATELY, InternalMessage(dest=DEST, value=i).to_cell())
        for i in range(count)
    ]


def decode_sent(wallet: HighloadWalletV3, boc: bytes) -> SignedExternalEnvelope:
    dest, _, body = parse_external_message(Cell.one_from_boc(boc))
    assert dest == wallet.address
    return SignedExternalEnvelope.from_cell(body)


@pytest.fixture()
def wallet() -> HighloadWalletV3:
    return HighloadWalletV3.create(workchain=0, public_key=PUBLIC_KEY)


def test_create_defaults(wallet: HighloadWalletV3):
    assert wallet.subwallet_id == DEFAULT_SUBWALLET_ID == 0x10AD
    assert wallet.timeout == DEFAULT_TIMEOUT == 3600
    assert wallet.workchain == 0
    assert wallet.public_key == PUBLIC_KEY


@pytest.mark.parametrize("subwallet_id, timeout", [(None, None), (0, 0), (0, -5)])
def test_create_falls_back_to_defaults(subwallet_id: int | None, timeout: int | None):
    wallet = HighloadWalletV3.create(0, PUBLIC_KEY, subwallet_id, timeout)
    assert wallet.subwallet_id == 0x10AD
    assert wallet.timeout == 3600


def test_identity_validation():
    with pytest.raises(ValueError):
        _ = WalletIdentity(0, b"\x00" * 31)
    with pytest.raises(RangeError):
        _ = WalletIdentity(0, PUBLIC_KEY, subwallet_id=1 << 32)
    with pytest.raises(RangeError):
        _ = WalletIdentity(0, PUBLIC_KEY, timeout=1 << 22)


def test_deployment_data_layout(wallet: HighloadWalletV3):
    cs = wallet.identity.data_cell().begin_parse()
    assert cs.load_bytes(32) == PUBLIC_KEY
    assert cs.load_uint(32) == 0x10AD
    assert cs.load_uint(2) == 0
    assert cs.load_uint(64) == 0
    assert cs.load_uint(22) == 3600


def test_address_depends_on_identity(wallet: HighloadWalletV3):
    same = HighloadWalletV3.create(0, PUBLIC_KEY)
    other_subwallet = HighloadWalletV3.create(0, PUBLIC_KEY, subwallet_id=7)
    other_timeout = HighloadWalletV3.create(0, PUBLIC_KEY, timeout=60)
    masterchain = HighloadWalletV3.create(-1, PUBLIC_KEY)

    assert wallet.address == same.address
    assert wallet.address != other_subwallet.address
    assert wallet.address != other_timeout.address
    assert masterchain.address.wc == -1
    assert wallet.address.hash_part == wallet.state_init.serialize().hash


def test_from_config():
    config = WalletConfig(workchain=0, public_key=PUBLIC_KEY, subwallet_id=42, timeout=120)
    wallet = HighloadWalletV3.from_config(config)
    assert wallet.subwallet_id == 42
    assert wallet.timeout == 120


def test_generate_query_id():
    assert HighloadWalletV3.generate_query_id(1023 * 2 + 5) == QueryId(2, 5)


def test_create_internal_transfer(wallet: HighloadWalletV3):
    message = wallet.create_internal_transfer(make_actions(2), QueryId(0, 1), 10)
    assert message.dest == wallet.address
    assert message.value == 10
    body = InternalTransferBody.from_cell(message.body)
    assert body.query_id == QueryId(0, 1)
    assert len(body.actions) == 2


def test_create_external_message_uses_wallet_defaults(wallet: HighloadWalletV3):
    envelope = wallet.create_external_message(
        SEED, Cell.empty(), SendMode.PAY_GAS_SEPARATELY, QueryId(1, 2), created_at=100
    )
    assert envelope.body.subwallet_id == 0x10AD
    assert envelope.body.timeout == 3600
    assert envelope.body.created_at == 100
    assert envelope.verify(PUBLIC_KEY)


@pytest.mark.asyncio
async def test_send_batch_without_value(wallet: HighloadWalletV3):
    provider = FakeProvider()
    actions = make_actions(300)

    envelope = await wallet.send_batch(provider, SEED, actions, QueryId(4, 4), created_at=1000)

    assert len(provider.sent) == 1
    sent = decode_sent(wallet, provider.sent[0])
    assert sent.signature == envelope.signature
    assert sent.verify(PUBLIC_KEY)
    assert sent.body.mode == SendMode.CARRY_ALL_REMAINING_BALANCE
    assert sent.body.query_id == QueryId(4, 4)
    assert sent.body.created_at == 1000

    message = InternalMessage.from_cell(sent.body.message)
    assert message.dest == wallet.address
    assert message.value == 0
    assert len(unpack_actions(message)) == 300


@pytest.mark.asyncio
async def test_send_batch_with_value(wallet: HighloadWalletV3):
    provider = FakeProvider()

    _ = await wallet.send_batch(
        provider, SEED, make_actions(3), QueryId(0, 0), subwallet_id=9, timeout=30, value=5
    )

    sent = decode_sent(wallet, provider.sent[0])
    assert sent.body.mode == SendMode.PAY_GAS_SEPARATELY
    assert sent.body.subwallet_id == 9
    assert sent.body.timeout == 30
    assert InternalMessage.from_cell(sent.body.message).value == 5


@pytest.mark.asyncio
async def test_send_with_state_init(wallet: HighloadWalletV3):
    provider = FakeProvider()
    envelope = wallet.create_external_message(SEED, Cell.empty(), 1, 0, created_at=1)

    await wallet.send(provider, envelope, with_state_init=True)
    await wallet.send(provider, envelope.to_cell())

    _, init, body = parse_external_message(Cell.one_from_boc(provider.sent[0]))
    assert init is not None
    assert init.serialize().hash == wallet.state_init.serialize().hash
    assert body.hash == envelope.to_cell().hash

    _, init, _ = parse_external_message(Cell.one_from_boc(provider.sent[1]))
    assert init is None


@pytest.mark.asyncio
async def test_send_deploy(wallet: HighloadWalletV3):
    sender = FakeSender()

    await wallet.send_deploy(sender, 50_000_000)

    message, mode = sender.sent[0]
    assert mode == SendMode.PAY_GAS_SEPARATELY
    assert message.dest == wallet.address
    assert message.value == 50_000_000
    assert message.bounce is False
    assert message.init is wallet.state_init
    assert len(message.body.bits) == 0


@pytest.mark.asyncio
async def test_getters(wallet: HighloadWalletV3):
    provider = FakeProvider(
        {
            "get_public_key": [int.from_bytes(PUBLIC_KEY, "big")],
            "get_timeout": [3600],
            "get_last_clean_time": [1_700_000_000],
        },
        balance=123,
    )

    assert await wallet.get_public_key(provider) == PUBLIC_KEY
    assert await wallet.get_timeout(provider) == 3600
    assert await wallet.get_last_clean_time(provider) == 1_700_000_000
    assert await wallet.get_balance(provider) == 123
    assert [call[1] for call in provider.calls] == [
        "get_public_key",
        "get_timeout",
        "get_last_clean_time",
    ]
    assert all(call[0] == wallet.address and call[2] == [] for call in provider.calls)


@pytest.mark.asyncio
async def test_get_public_key_keeps_leading_zeros(wallet: HighloadWalletV3):
    provider = FakeProvider({"get_public_key": [1]})
    assert await wallet.get_public_key(provider) == b"\x00" * 31 + b"\x01"


@pytest.mark.asyncio
async def test_get_processed_passes_clean_flag(wallet: HighloadWalletV3):
    provider = FakeProvider({"processed?": [-1]})
    query_id = QueryId(100, 200)

    assert await wallet.get_processed(provider, query_id, need_clean=False)
    assert await wallet.get_processed(provider, query_id, need_clean=False)
    assert await wallet.get_processed(provider, query_id.to_wide())

    assert [call[2] for call in provider.calls] == [
        [query_id.to_wide(), 0],
        [query_id.to_wide(), 0],
        [query_id.to_wide(), -1],
    ]

    provider.results["processed?"] = [0]
    assert not await wallet.get_processed(provider, query_id)


@pytest.mark.asyncio
async def test_getter_rejects_non_integer_result(wallet: HighloadWalletV3):
    provider = FakeProvider({"get_timeout": [begin_cell().end_cell()]})
    with pytest.raises(NetworkError) as e:
        _ = await wallet.get_timeout(provider)
    assert e.value.code == 0

    provider.results["get_last_clean_time"] = []
    with pytest.raises(NetworkError):
        _ = await wallet.get_last_clean_time(provider)


@pytest.mark.asyncio
async def test_from_address(wallet: HighloadWalletV3):
    provider = FakeProvider({"get_public_key": [int.from_bytes(PUBLIC_KEY, "big")]})

    restored = await HighloadWalletV3.from_address(provider, wallet.address)

    assert restored.public_key == PUBLIC_KEY
    assert restored.address == wallet.address
    assert provider.calls[0][:2] == (wallet.address, "get_public_key")
