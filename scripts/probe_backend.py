#!/usr/bin/env python3
"""Probe backend candidates and report which one discovery would pick.

Useful after moving between networks to check which LAN address the
backend answers on, without starting the whole client.

Usage
-----
::

    export FLEETLINK_CANDIDATE_URLS="http://10.0.0.74:5000,http://192.168.0.111:5000"
    python scripts/probe_backend.py

Options::

    --candidate URL      Probe URL (repeatable; overrides the environment)
    --previous URL       Previously known address, probed first
    --json               Output as machine-readable JSON
    --verbose, -v        Enable debug logging
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Any

import aiohttp

from fleetlink._discovery import HttpBackendProber, candidate_order
from fleetlink.config import FleetConfig
from fleetlink.exceptions import BackendUnreachableError


async def main() -> int:
    parser = argparse.ArgumentParser(description="Probe fleet backend candidates.")
    parser.add_argument("--candidate", action="append", default=[], help="Candidate base URL (repeatable)")
    parser.add_argument("--previous", help="Previously known backend address, probed first")
    parser.add_argument("--json", action="store_true", dest="json_mode", help="Output machine-readable JSON")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)

    overrides: dict[str, Any] = {}
    if args.candidate:
        overrides["candidate_urls"] = tuple(args.candidate)
    config = FleetConfig.from_env(**overrides)

    result: dict[str, Any] = {"candidates": [], "selected": None}
    async with aiohttp.ClientSession() as session:
        prober = HttpBackendProber(config, session)
        for url in candidate_order(args.previous, config.candidate_urls):
            result["candidates"].append({"url": url, "reachable": await prober.is_reachable(url)})
        try:
            result["selected"] = await prober.probe_and_resolve(args.previous)
        except BackendUnreachableError as exc:
            result["error"] = str(exc)

    if args.json_mode:
        print(json.dumps(result, indent=2))
    else:
        for item in result["candidates"]:
            print(f"  {'OK  ' if item['reachable'] else 'FAIL'}  {item['url']}")
        print(f"selected: {result['selected'] or '-'}")
    return 0 if result["selected"] else 1


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
