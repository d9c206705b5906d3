import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from highload import HighloadConfig, HighloadWalletV3, WalletConfig, load_config

PUBLIC_KEY_HEX = "ab" * 32


def write_config(path: Path, content: object) -> Path:
    file = path / "highload.json"
    _ = file.write_text(json.dumps(content))
    return file


def test_load_minimal_config(tmp_path: Path):
    config = load_config(write_config(tmp_path, {"wallet": {"public_key": PUBLIC_KEY_HEX}}))

    assert config.wallet.public_key == bytes.fromhex(PUBLIC_KEY_HEX)
    assert config.wallet.workchain == 0
    assert config.wallet.subwallet_id == 0x10AD
    assert config.wallet.timeout == 3600
    assert config.tonlib is None


def test_load_full_config(tmp_path: Path):
    global_config = tmp_path / "global.config.json"
    _ = global_config.write_text(json.dumps({"liteservers": [{"ip": 1, "port": 2}]}))
    content = {
        "wallet": {
            "workchain": -1,
            "public_key": "0x" + PUBLIC_KEY_HEX,
            "subwallet_id": 7,
            "timeout": 600,
        },
        "tonlib": {
            "global_config": str(global_config),
            "cdll_path": "/usr/lib/libtonlibjson.so",
            "ls_index": 0,
        },
    }

    config = load_config(write_config(tmp_path, content))

    assert config.wallet.workchain == -1
    assert config.wallet.subwallet_id == 7
    assert config.tonlib is not None
    assert config.tonlib.cdll_path == Path("/usr/lib/libtonlibjson.so")
    assert config.tonlib.load_global_config() == {"liteservers": [{"ip": 1, "port": 2}]}

    wallet = HighloadWalletV3.from_config(config.wallet)
    assert wallet.address.wc == -1
    assert wallet.timeout == 600


@pytest.mark.parametrize(
    "wallet",
    [
        {"public_key": "ab" * 31},
        {"public_key": PUBLIC_KEY_HEX, "timeout": 0},
        {"public_key": PUBLIC_KEY_HEX, "timeout": 1 << 22},
        {"public_key": PUBLIC_KEY_HEX, "subwallet_id": 1 << 32},
        {"public_key": PUBLIC_KEY_HEX, "subwallet_id": -1},
        {},
    ],
)
def test_invalid_wallet_config(wallet: dict[str, object]):
    with pytest.raises(ValidationError):
        _ = HighloadConfig.model_validate_json(json.dumps({"wallet": wallet}))


def test_wallet_config_accepts_raw_bytes():
    config = WalletConfig(public_key=b"\x01" * 32)
    assert config.public_key == b"\x01" * 32
