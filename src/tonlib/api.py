import base64
import typing

import pydantic

type Option[T] = T | None


def _decode_base64(value: object) -> object:
    if isinstance(value, str):
        return base64.b64decode(value)
    return value


def _encode_base64(value: bytes) -> str:
    return base64.b64encode(value).decode("ascii")


# Raw bytes in Python, base64 strings on the wire.
type Bytes = typing.Annotated[
    bytes,
    pydantic.BeforeValidator(_decode_base64),
    pydantic.PlainSerializer(_encode_base64, return_type=str, when_used="json"),
]

_CONFIG = pydantic.ConfigDict(serialize_by_alias=True, validate_by_name=True, validate_by_alias=True)


# ===== AccountAddress =====
class accountAddress(pydantic.BaseModel):
    tl_type: typing.Literal["accountAddress"] = pydantic.Field(
        alias="@type", default="accountAddress"
    )
    account_address: str = ""
    model_config: typing.ClassVar[pydantic.ConfigDict] = _CONFIG


# ===== Config =====
class config(pydantic.BaseModel):
    tl_type: typing.Literal["config"] = pydantic.Field(alias="@type", default="config")
    config: str = ""
    blockchain_name: str = ""
    use_callbacks_for_network: bool = False
    ignore_cache: bool = False
    model_config: typing.ClassVar[pydantic.ConfigDict] = _CONFIG


type Config = config


# ===== Error =====
class error(pydantic.BaseModel):
    tl_type: typing.Literal["error"] = pydantic.Field(alias="@type", default="error")
    code: int = 0
    message: str = ""
    model_config: typing.ClassVar[pydantic.ConfigDict] = _CONFIG


# ===== KeyStoreType =====
class keyStoreTypeInMemory(pydantic.BaseModel):
    tl_type: typing.Literal["keyStoreTypeInMemory"] = pydantic.Field(
        alias="@type", default="keyStoreTypeInMemory"
    )
    model_config: typing.ClassVar[pydantic.ConfigDict] = _CONFIG


type KeyStoreType = keyStoreTypeInMemory


# ===== Ok =====
class ok(pydantic.BaseModel):
    tl_type: typing.Literal["ok"] = pydantic.Field(alias="@type", default="ok")
    model_config: typing.ClassVar[pydantic.ConfigDict] = _CONFIG


# ===== Options =====
class options(pydantic.BaseModel):
    tl_type: typing.Literal["options"] = pydantic.Field(alias="@type", default="options")
    config: Option["Config"] = None
    keystore_type: Option["KeyStoreType"] = None
    model_config: typing.ClassVar[pydantic.ConfigDict] = _CONFIG


type Options = options


class options_info(pydantic.BaseModel):
    tl_type: typing.Literal["options.info"] = pydantic.Field(
        alias="@type", default="options.info"
    )
    model_config: typing.ClassVar[pydantic.ConfigDict] = _CONFIG


# ===== internal.TransactionId =====
class internal_transactionId(pydantic.BaseModel):
    tl_type: typing.Literal["internal.transactionId"] = pydantic.Field(
        alias="@type", default="internal.transactionId"
    )
    lt: int = 0
    hash: Bytes = b""
    model_config: typing.ClassVar[pydantic.ConfigDict] = _CONFIG


# ===== raw.FullAccountState =====
class raw_fullAccountState(pydantic.BaseModel):
    tl_type: typing.Literal["raw.fullAccountState"] = pydantic.Field(
        alias="@type", default="raw.fullAccountState"
    )
    balance: int = 0
    code: Bytes = b""
    data: Bytes = b""
    last_transaction_id: Option[internal_transactionId] = None
    frozen_hash: Bytes = b""
    sync_utime: int = 0
    model_config: typing.ClassVar[pydantic.ConfigDict] = _CONFIG


# ===== smc =====
class smc_info(pydantic.BaseModel):
    tl_type: typing.Literal["smc.info"] = pydantic.Field(alias="@type", default="smc.info")
    id: int = 0
    model_config: typing.ClassVar[pydantic.ConfigDict] = _CONFIG


class smc_methodIdName(pydantic.BaseModel):
    tl_type: typing.Literal["smc.methodIdName"] = pydantic.Field(
        alias="@type", default="smc.methodIdName"
    )
    name: str = ""
    model_config: typing.ClassVar[pydantic.ConfigDict] = _CONFIG


# ===== tvm =====
class tvm_numberDecimal(pydantic.BaseModel):
    tl_type: typing.Literal["tvm.numberDecimal"] = pydantic.Field(
        alias="@type", default="tvm.numberDecimal"
    )
    number: str = ""
    model_config: typing.ClassVar[pydantic.ConfigDict] = _CONFIG


class tvm_cell(pydantic.BaseModel):
    tl_type: typing.Literal["tvm.cell"] = pydantic.Field(alias="@type", default="tvm.cell")
    bytes: Bytes = b""
    model_config: typing.ClassVar[pydantic.ConfigDict] = _CONFIG


class tvm_slice(pydantic.BaseModel):
    tl_type: typing.Literal["tvm.slice"] = pydantic.Field(alias="@type", default="tvm.slice")
    bytes: Bytes = b""
    model_config: typing.ClassVar[pydantic.ConfigDict] = _CONFIG


class tvm_stackEntryNumber(pydantic.BaseModel):
    tl_type: typing.Literal["tvm.stackEntryNumber"] = pydantic.Field(
        alias="@type", default="tvm.stackEntryNumber"
    )
    number: Option[tvm_numberDecimal] = None
    model_config: typing.ClassVar[pydantic.ConfigDict] = _CONFIG


class tvm_stackEntryCell(pydantic.BaseModel):
    tl_type: typing.Literal["tvm.stackEntryCell"] = pydantic.Field(
        alias="@type", default="tvm.stackEntryCell"
    )
    cell: Option[tvm_cell] = None
    model_config: typing.ClassVar[pydantic.ConfigDict] = _CONFIG


class tvm_stackEntrySlice(pydantic.BaseModel):
    tl_type: typing.Literal["tvm.stackEntrySlice"] = pydantic.Field(
        alias="@type", default="tvm.stackEntrySlice"
    )
    slice: Option[tvm_slice] = None
    model_config: typing.ClassVar[pydantic.ConfigDict] = _CONFIG


class tvm_stackEntryUnsupported(pydantic.BaseModel):
    tl_type: typing.Literal["tvm.stackEntryUnsupported"] = pydantic.Field(
        alias="@type", default="tvm.stackEntryUnsupported"
    )
    model_config: typing.ClassVar[pydantic.ConfigDict] = _CONFIG


type tvm_StackEntry = typing.Annotated[
    tvm_stackEntryNumber | tvm_stackEntryCell | tvm_stackEntrySlice | tvm_stackEntryUnsupported,
    pydantic.Field(discriminator="tl_type"),
]


class smc_runResult(pydantic.BaseModel):
    tl_type: typing.Literal["smc.runResult"] = pydantic.Field(
        alias="@type", default="smc.runResult"
    )
    gas_used: int = 0
    stack: list[tvm_StackEntry] = []
    exit_code: int = 0
    model_config: typing.ClassVar[pydantic.ConfigDict] = _CONFIG


# ===== Functions =====
class init(pydantic.BaseModel):
    tl_type: typing.Literal["init"] = pydantic.Field(alias="@type", default="init")
    options: Option["Options"] = None
    model_config: typing.ClassVar[pydantic.ConfigDict] = _CONFIG


class raw_sendMessage(pydantic.BaseModel):
    tl_type: typing.Literal["raw.sendMessage"] = pydantic.Field(
        alias="@type", default="raw.sendMessage"
    )
    body: Bytes = b""
    model_config: typing.ClassVar[pydantic.ConfigDict] = _CONFIG


class raw_getAccountState(pydantic.BaseModel):
    tl_type: typing.Literal["raw.getAccountState"] = pydantic.Field(
        alias="@type", default="raw.getAccountState"
    )
    account_address: Option[accountAddress] = None
    model_config: typing.ClassVar[pydantic.ConfigDict] = _CONFIG


class smc_load(pydantic.BaseModel):
    tl_type: typing.Literal["smc.load"] = pydantic.Field(alias="@type", default="smc.load")
    account_address: Option[accountAddress] = None
    model_config: typing.ClassVar[pydantic.ConfigDict] = _CONFIG


class smc_runGetMethod(pydantic.BaseModel):
    tl_type: typing.Literal["smc.runGetMethod"] = pydantic.Field(
        alias="@type", default="smc.runGetMethod"
    )
    id: int = 0
    method: Option[smc_methodIdName] = None
    stack: list[tvm_StackEntry] = []
    model_config: typing.ClassVar[pydantic.ConfigDict] = _CONFIG


class smc_forget(pydantic.BaseModel):
    tl_type: typing.Literal["smc.forget"] = pydantic.Field(alias="@type", default="smc.forget")
    id: int = 0
    model_config: typing.ClassVar[pydantic.ConfigDict] = _CONFIG
