from .client import TonlibClient
from .tonlibjson import TonLib, TonlibError, TonlibJsonCDLL

__all__ = [
    "TonLib",
    "TonlibClient",
    "TonlibError",
    "TonlibJsonCDLL",
]
