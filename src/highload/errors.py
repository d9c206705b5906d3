from typing import override


class RangeError(ValueError):
    def __init__(self, field: str, value: int, bits: int):
        super().__init__(f"{field}={value} does not fit in {bits} bits")
        self.field: str = field
        self.value: int = value
        self.bits: int = bits

    @override
    def __str__(self):
        return f"RangeError(field={self.field!r}, value={self.value}, bits={self.bits})"


class TooManyActions(ValueError):
    def __init__(self, count: int, limit: int):
        super().__init__(f"Max allowed action count is {limit}, got {count}. Use pack_actions instead.")
        self.count: int = count
        self.limit: int = limit


class NetworkError(Exception):
    def __init__(self, code: int, message: str):
        super().__init__(message)
        self.code: int = code
        self.message: str = message

    @override
    def __str__(self):
        return f"NetworkError(code={self.code}, message={self.message!r})"


def check_uint(field: str, value: int, bits: int) -> int:
    if value < 0 or value >> bits:
        raise RangeError(field, value, bits)
    return value
