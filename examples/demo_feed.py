"""End-to-end demo of the Bitstamp client.

Shows:
1. Loading credentials from environment
2. Public REST calls (ticker, order book, transactions, pairs, EUR/USD)
3. A signed private call (balance)
4. Subscribing to every channel kind for BTC/USD and printing events
"""
import asyncio
import sys
from pathlib import Path

# Add parent directory to path so we can import bitstamp_api
sys.path.insert(0, str(Path(__file__).parent.parent))

from bitstamp_api.async_rest_client import AsyncBitstampClient
from bitstamp_api.channels import ChannelKind, EventChannel, TradingPair
from bitstamp_api.config import ClientConfig
from bitstamp_api.exceptions import BitstampError, StreamTimeoutError
from bitstamp_api.logging_setup import setup_logging_from_config, logger
from bitstamp_api.models import TimeWindow
from bitstamp_api.secrets import load_credentials


async def main():
    config_file = Path(__file__).parent.parent / "config.yaml"
    config = ClientConfig.from_yaml(str(config_file)) if config_file.exists() else ClientConfig.default()
    setup_logging_from_config(config.logging)
    logger.info("=== Bitstamp Client Demo ===")

    try:
        creds = load_credentials()
    except ValueError as e:
        logger.warning(f"No credentials, private calls will be skipped: {e}")
        creds = None

    async with AsyncBitstampClient.from_config(config, creds) as client:
        pair = TradingPair.BTCUSD
        for name, call in [
            ("ticker", client.get_ticker(pair)),
            ("hourly ticker", client.get_hourly_ticker(pair)),
            ("order book", client.get_order_book(pair)),
            ("transactions", client.get_transactions(pair, TimeWindow.MINUTE)),
            ("trading pairs", client.get_trading_pairs_info()),
            ("eur/usd", client.get_eur_usd()),
        ]:
            try:
                result = await call
            except BitstampError as e:
                logger.error(f"{name}: {e}")
                continue
            if isinstance(result, list):
                logger.info(f"{name}: {len(result)} entries")
            else:
                logger.info(f"{name}: {result}")

        if creds is not None:
            try:
                balance = await client.get_balance()
                logger.info(f"USD available: {balance.available('usd')}")
            except BitstampError as e:
                logger.error(f"balance: {e}")

        async with await client.event_stream() as stream:
            for kind in ChannelKind:
                await stream.subscribe(EventChannel(kind, pair))
            try:
                async for event in stream:
                    print(f"Got event: {event.event} on {event.channel} at {event.data!r}")
            except StreamTimeoutError as e:
                logger.error(f"Feed went stale: {e}")


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass
