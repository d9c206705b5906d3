import asyncio
import logging
import os
import sys
from pathlib import Path

from pytoniq_core import Address

from highload import (
    HighloadWalletV3,
    InternalMessage,
    QueryId,
    SendMessage,
    SendMode,
    TonlibProvider,
    load_config,
)


async def main(config_path: Path, destination: str, count: int):
    config = load_config(config_path)
    if config.tonlib is None:
        raise SystemExit("tonlib section is required")

    secret_key = bytes.fromhex(os.environ["HIGHLOAD_SECRET_KEY"])
    wallet = HighloadWalletV3.from_config(config.wallet)
    dest = Address(destination)
    actions = [
        SendMessage.internal(SendMode.PAY_GAS_SEPARATELY, InternalMessage(dest=dest, value=1))
        for _ in range(count)
    ]

    async with TonlibProvider.from_config(config.tonlib) as provider:
        balance = await wallet.get_balance(provider)
        logging.info(f"Wallet {wallet.address.to_str()} balance: {balance}")

        query_id = QueryId(shard=0, slot=0)
        if await wallet.get_processed(provider, query_id, need_clean=False):
            raise SystemExit(f"Query id {query_id} was already processed")

        _ = await wallet.send_batch(provider, secret_key, actions, query_id)


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="[%(levelname)s][%(asctime)s][%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H-%M-%S",
    )
    asyncio.run(asyncio.wait_for(main(Path(sys.argv[1]), sys.argv[2], int(sys.argv[3])), 60))
