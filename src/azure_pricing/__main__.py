"""Query Azure retail prices from the command line. Use --help for usage."""

import argparse
import asyncio
import contextlib
import json
import logging
import signal
import sys
import uuid
from pathlib import Path

from dotenv import load_dotenv

from azure_pricing.client import AzurePricingClient, PriceQuery
from azure_pricing.config import load_config
from azure_pricing.context import ContextCancelled, DeadlineExceeded, RequestContext
from azure_pricing.errors import InvalidConfigError, PricingError, map_to_status
from azure_pricing.logging import set_log_context, setup_logging

logger = logging.getLogger(__name__)

# Exit code for unusable configuration (matches argparse usage errors)
EXIT_CONFIG_ERROR = 2


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="azure_pricing",
        description="Fetch Azure retail prices matching a filter",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # All B1s prices in East US
    python -m azure_pricing --region eastus --sku Standard_B1s

    # Storage prices in euros, JSON logs, 30s overall deadline
    python -m azure_pricing --service Storage --currency EUR --json-logs --timeout 30

Prints one JSON object per price item to stdout. Exit status is 0 on
success, otherwise the numeric status code of the failure (5 not found,
8 rate limited, 14 unavailable, 13 other, 4 deadline exceeded, 1 cancelled).
        """,
    )

    parser.add_argument("--region", default="", help="Azure region, e.g. eastus")
    parser.add_argument("--sku", default="", help="ARM SKU name, e.g. Standard_B1s")
    parser.add_argument("--service", default="", help="Service name, e.g. 'Virtual Machines'")
    parser.add_argument("--product", default="", help="Product name")
    parser.add_argument("--currency", default="", help="Currency code, e.g. USD")

    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML file with an 'azure_pricing:' section (default: built-in defaults)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Overall deadline in seconds for the whole query (default: none)",
    )
    parser.add_argument(
        "--trace-id",
        default=None,
        help="Trace ID attached to every log line (default: random)",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Logging level (default: WARNING)",
    )
    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Emit logs as JSON lines on stderr",
    )

    return parser.parse_args(argv)


async def run(args: argparse.Namespace) -> int:
    config = load_config(args.config)
    config.logger = logging.getLogger("azure_pricing.client")

    query = PriceQuery(
        region=args.region,
        sku=args.sku,
        service=args.service,
        product=args.product,
        currency=args.currency,
    )

    ctx = RequestContext.background()
    if args.timeout is not None:
        ctx = ctx.with_timeout(args.timeout)

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        # Not supported on Windows event loops
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(sig, ctx.cancel)

    async with AzurePricingClient(config) as client:
        items = await client.get_prices(query, ctx)

    for item in items:
        print(json.dumps(item.to_wire(), ensure_ascii=False))
    logger.info("Query complete", extra={"items": len(items)})
    return 0


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    load_dotenv()
    setup_logging(level=args.log_level, json_format=args.json_logs)
    set_log_context(trace_id=args.trace_id or uuid.uuid4().hex, operation="get_prices")

    try:
        return asyncio.run(run(args))
    except InvalidConfigError as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR
    except (PricingError, ContextCancelled, DeadlineExceeded) as e:
        print(f"error: {e}", file=sys.stderr)
        return map_to_status(e).value


if __name__ == "__main__":
    sys.exit(main())
