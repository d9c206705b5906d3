from .actions import InternalMessage, OutAction, RawAction, SendMessage, SendMode
from .batcher import InternalTransferBody, pack_actions, unpack_actions
from .config import DEFAULT_SUBWALLET_ID, DEFAULT_TIMEOUT, HighloadConfig, WalletConfig, load_config
from .envelope import ExternalMessageBody, SignedExternalEnvelope, sign
from .errors import NetworkError, RangeError, TooManyActions
from .provider import Provider, Sender, TonlibProvider
from .query_id import QueryId
from .wallet import HighloadWalletV3, WalletIdentity

__all__ = [
    "DEFAULT_SUBWALLET_ID",
    "DEFAULT_TIMEOUT",
    "ExternalMessageBody",
    "HighloadConfig",
    "HighloadWalletV3",
    "InternalMessage",
    "InternalTransferBody",
    "NetworkError",
    "OutAction",
    "Provider",
    "QueryId",
    "RangeError",
    "RawAction",
    "SendMessage",
    "SendMode",
    "Sender",
    "SignedExternalEnvelope",
    "TonlibProvider",
    "TooManyActions",
    "WalletConfig",
    "WalletIdentity",
    "load_config",
    "pack_actions",
    "sign",
    "unpack_actions",
]
