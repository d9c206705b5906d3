import json
from pathlib import Path
from typing import Annotated, cast

import pydantic
from pydantic import BaseModel, Field
from tonlib.tonlibjson import JSONObject

from .envelope import SUBWALLET_ID_SIZE, TIMEOUT_SIZE

DEFAULT_TIMEOUT = 60 * 60
DEFAULT_SUBWALLET_ID = 0x10AD


def _hex_bytes(value: object) -> object:
    if isinstance(value, str):
        return bytes.fromhex(value.removeprefix("0x"))
    return value


type PublicKey = Annotated[
    bytes, pydantic.BeforeValidator(_hex_bytes), Field(min_length=32, max_length=32)
]


class WalletConfig(BaseModel):
    workchain: int = 0
    public_key: PublicKey
    subwallet_id: int = Field(default=DEFAULT_SUBWALLET_ID, ge=0, lt=1 << SUBWALLET_ID_SIZE)
    timeout: int = Field(default=DEFAULT_TIMEOUT, gt=0, lt=1 << TIMEOUT_SIZE)


class TonlibConfig(BaseModel):
    global_config: Path
    cdll_path: Path
    ls_index: int = Field(default=0, ge=0)
    verbosity_level: int = 0
    receive_timeout: float = Field(default=1.0, gt=0)

    def load_global_config(self) -> JSONObject:
        with open(self.global_config, "r") as f:
            return cast(JSONObject, json.load(f))


class HighloadConfig(BaseModel):
    wallet: WalletConfig
    tonlib: TonlibConfig | None = None


def load_config(path: Path) -> HighloadConfig:
    with open(path, "r") as f:
        json_content = f.read()
    return HighloadConfig.model_validate_json(json_content)
