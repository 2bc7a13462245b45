#!/usr/bin/env python
"""Bitstamp CLI: query market data, account balance, or tail the event feed.

Usage:
    python scripts/bitstamp_cli.py ticker btcusd
    python scripts/bitstamp_cli.py order-book btcusd --group 1
    python scripts/bitstamp_cli.py transactions ethbtc --time hour
    python scripts/bitstamp_cli.py balance
    python scripts/bitstamp_cli.py stream live_trades_btcusd diff_order_book_ethusd --count 10
"""
import argparse
import asyncio
import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from bitstamp_api.async_rest_client import AsyncBitstampClient
from bitstamp_api.channels import EventChannel
from bitstamp_api.config import ClientConfig
from bitstamp_api.exceptions import BitstampError
from bitstamp_api.logging_setup import setup_logging
from bitstamp_api.models import TimeWindow
from bitstamp_api.secrets import load_credentials


def _dump(result):
    if isinstance(result, list):
        return json.dumps([r.model_dump(by_alias=True) for r in result], indent=2)
    return result.model_dump_json(by_alias=True, indent=2)


async def run_rest(client, args):
    if args.command == "ticker":
        return await client.get_ticker(args.pair)
    if args.command == "hourly-ticker":
        return await client.get_hourly_ticker(args.pair)
    if args.command == "order-book":
        return await client.get_order_book(args.pair, group=args.group)
    if args.command == "transactions":
        return await client.get_transactions(args.pair, time=args.time)
    if args.command == "pairs":
        return await client.get_trading_pairs_info()
    if args.command == "eur-usd":
        return await client.get_eur_usd()
    if args.command == "balance":
        return await client.get_balance()
    raise ValueError(f"Unknown command: {args.command}")


async def run_stream(client, args):
    channels = [EventChannel.from_wire(c) for c in args.channels]
    received = 0
    async with await client.event_stream() as stream:
        for channel in channels:
            await stream.subscribe(channel)
        async for event in stream:
            print(f"{event.event} {event.channel} {event.data.model_dump_json(by_alias=True)}")
            received += 1
            if args.count and received >= args.count:
                break


async def main_async(args):
    config = ClientConfig.from_yaml(args.config) if args.config else ClientConfig.default()
    creds = load_credentials() if args.command == "balance" else None
    async with AsyncBitstampClient.from_config(config, creds) as client:
        if args.command == "stream":
            await run_stream(client, args)
        else:
            print(_dump(await run_rest(client, args)))


def main():
    parser = argparse.ArgumentParser(description="Bitstamp API client")
    parser.add_argument("--config", help="Path to YAML config file")
    parser.add_argument("--log-level", default="WARNING", help="Log level")

    subparsers = parser.add_subparsers(dest="command", required=True)

    for name in ("ticker", "hourly-ticker"):
        p = subparsers.add_parser(name, help=f"Show {name.replace('-', ' ')}")
        p.add_argument("pair", help="Currency pair, e.g. btcusd")

    book = subparsers.add_parser("order-book", help="Show order book")
    book.add_argument("pair")
    book.add_argument("--group", help="Order grouping (0, 1 or 2)")

    tx = subparsers.add_parser("transactions", help="Show recent transactions")
    tx.add_argument("pair")
    tx.add_argument("--time", choices=[t.value for t in TimeWindow])

    subparsers.add_parser("pairs", help="List trading pairs info")
    subparsers.add_parser("eur-usd", help="Show EUR/USD conversion rate")
    subparsers.add_parser("balance", help="Show account balance (needs credentials)")

    stream = subparsers.add_parser("stream", help="Print events from the live feed")
    stream.add_argument("channels", nargs="+", help="Wire channel names, e.g. live_trades_btcusd")
    stream.add_argument("--count", type=int, default=0, help="Stop after N events (0 = forever)")

    args = parser.parse_args()
    setup_logging(log_file="bitstamp.log", level=args.log_level, enable_console=True)

    try:
        asyncio.run(main_async(args))
    except (BitstampError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
