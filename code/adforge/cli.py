"""Command line entry point: ``adforge <command> ...``.

Thin layer over the client. Library errors surface here as one
user-facing line on stderr and exit status 1.
"""
from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Any, List, Optional

import structlog
from pydantic import ValidationError

from adforge.client import AdForgeClient
from adforge.dashboard import gather_best_effort
from adforge.errors import AdForgeError, user_message
from adforge.logging_setup import configure_logging
from adforge.models.creative import CinematicAdRequest, StyleModifier
from adforge.models.job import JobProgress

log = structlog.get_logger(__name__)


def _print_progress(progress: JobProgress) -> None:
    print(f"[{progress.percentage:5.1f}%] {progress.current_step}", flush=True)


def _dump(value: Any) -> str:
    if hasattr(value, "model_dump"):
        value = value.model_dump(mode="json")
    return json.dumps(value, indent=2, default=str)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="adforge", description="AdForge backend client")
    parser.add_argument("--base-url", default=None, help="Backend URL (default: ADFORGE_API_BASE_URL)")
    parser.add_argument("--token", default=None, help="Bearer token (default: ADFORGE_API_TOKEN)")
    parser.add_argument("--log-level", default=None)
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("health", help="Check the backend is reachable")

    scrape = sub.add_parser("scrape", help="Import a product page and wait for the result")
    scrape.add_argument("url")
    scrape.add_argument("--brand-id", default=None)

    job = sub.add_parser("job", help="Inspect or control backend jobs")
    job_sub = job.add_subparsers(dest="job_command", required=True)
    status = job_sub.add_parser("status")
    status.add_argument("job_id")
    wait = job_sub.add_parser("wait")
    wait.add_argument("job_id")
    wait.add_argument("--interval", type=float, default=None)
    wait.add_argument("--max-attempts", type=int, default=-1, help="0 polls without a cap")
    listing = job_sub.add_parser("list")
    listing.add_argument("--status", default="all")
    listing.add_argument("--limit", type=int, default=50)
    cancel = job_sub.add_parser("cancel")
    cancel.add_argument("job_id")

    cinematic = sub.add_parser("cinematic", help="Generate a cinematic product video")
    cinematic.add_argument("--name", required=True, dest="product_name")
    cinematic.add_argument("--description", required=True, dest="product_description")
    cinematic.add_argument("--image-url", default=None)
    cinematic.add_argument("--brand-name", default=None)
    cinematic.add_argument("--duration", type=int, default=15)
    cinematic.add_argument(
        "--style",
        action="append",
        default=[],
        choices=[m.value.lstrip("-") for m in StyleModifier],
        help="Style modifier without the leading dashes; repeatable",
    )
    cinematic.add_argument("--no-wait", action="store_true", help="Submit and print the job id only")

    sub.add_parser("credits", help="Show credit balance and plan")
    return parser


async def _run(args: argparse.Namespace) -> int:
    async with AdForgeClient(base_url=args.base_url, token=args.token) as client:
        if args.command == "health":
            ok = await client.health()
            print("ok" if ok else "unreachable")
            return 0 if ok else 1

        if args.command == "scrape":
            product = await client.scraping.import_product(args.url, args.brand_id, on_progress=_print_progress)
            print(_dump(product))
            return 0

        if args.command == "job":
            if args.job_command == "status":
                print(_dump(await client.jobs.get(args.job_id)))
            elif args.job_command == "wait":
                result = await client.jobs.wait(
                    args.job_id,
                    interval=args.interval,
                    max_attempts=None if args.max_attempts == 0 else args.max_attempts,
                    on_progress=_print_progress,
                )
                print(_dump(result))
            elif args.job_command == "list":
                jobs = await client.jobs.list(status=args.status, limit=args.limit)
                for row in jobs.jobs:
                    print(f"{row.job_id}  {row.status.value:<10}  {row.percentage:5.1f}%  {row.display_title}")
            elif args.job_command == "cancel":
                await client.jobs.cancel(args.job_id)
                print(f"cancel requested for {args.job_id}")
            return 0

        if args.command == "cinematic":
            request = CinematicAdRequest(
                product_name=args.product_name,
                product_description=args.product_description,
                product_image_url=args.image_url,
                brand_name=args.brand_name,
                target_duration=args.duration,
                style_modifiers=[f"--{s}" for s in args.style],
            )
            job = await client.cinematic.generate(request)
            print(f"job {job.job_id} submitted", flush=True)
            if not args.no_wait:
                print(await client.cinematic.wait(job.job_id, on_progress=_print_progress))
            return 0

        if args.command == "credits":
            fetched = await gather_best_effort(
                balance=client.credits.balance(),
                subscription=client.subscriptions.current(),
            )
            if "balance" in fetched.errors:
                raise fetched.errors["balance"]
            balance = fetched.values["balance"]
            subscription = fetched.get("subscription")
            print(f"plan: {subscription.plan if subscription else 'unknown'}")
            print(f"credits available: {balance.available}")
            print(f"credits used: {balance.used}")
            return 0

    return 2


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)
    try:
        return asyncio.run(_run(args))
    except AdForgeError as exc:
        log.debug("cli_command_failed", command=args.command, error_type=type(exc).__name__)
        print(user_message(exc), file=sys.stderr)
        return 1
    except ValidationError as exc:
        print(f"Invalid input: {exc.errors()[0]['msg']}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(main())
