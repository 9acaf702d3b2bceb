"""Dump the qeta document stream as JSON lines."""
from __future__ import annotations
import argparse
import asyncio
import logging
import sys
from dataclasses import replace
from typing import List, Optional

from qa2index.crawl.discovery import discovery_from_settings
from qa2index.crawl.errors import ConfigError, FetchError, DiscoveryError
from qa2index.index.factory import DefaultQetaCollatorFactory
from qa2index.index.pipeline import write_jsonl
from qa2index.utils.config import Settings

logger = logging.getLogger("qa2index")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="qa2index", description=__doc__)
    p.add_argument("--base-url", help="qeta API base URL (overrides QETA_BASE_URL)")
    p.add_argument("--backend-url", help="backend root; qeta lives at <root>/api/qeta")
    p.add_argument("--token", help="bearer token (overrides QETA_TOKEN)")
    p.add_argument("--page-size", type=int, help="questions per request")
    p.add_argument("--max-pages", type=int, default=None)
    p.add_argument("--async", dest="use_async", action="store_true", help="use the aiohttp client")
    p.add_argument("--log-level", default="WARNING")
    return p


async def _run_async(factory: DefaultQetaCollatorFactory) -> int:
    n = 0
    async with factory.get_async_collator() as collator:
        async for doc in collator:
            n += write_jsonl([doc], sys.stdout)
    return n


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=args.log_level.upper(),
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        settings = Settings.from_env()
        overrides = {}
        if args.token:
            overrides["QETA_TOKEN"] = args.token
        if args.page_size is not None:
            overrides["QETA_PAGE_SIZE"] = args.page_size
        if overrides:
            settings = replace(settings, **overrides)
        discovery = discovery_from_settings(settings, base_url=args.base_url, backend_url=args.backend_url)
        factory = DefaultQetaCollatorFactory.from_settings(settings, discovery=discovery, max_pages=args.max_pages)
        if args.use_async:
            n = asyncio.run(_run_async(factory))
        else:
            with factory.get_collator() as collator:
                n = write_jsonl(collator, sys.stdout)
    except (ConfigError, DiscoveryError, FetchError) as e:
        logger.error("%s", e)
        return 1
    logger.info("wrote %d documents", n)
    return 0


if __name__ == "__main__":
    sys.exit(main())
