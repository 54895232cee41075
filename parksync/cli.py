"""
Offline queue maintenance utility.

Usage:
    parksync list
    parksync enqueue sync_extend '{"sessionId": "abc", "minutes": 30}'
    parksync process
    parksync dead-letters --clear
    parksync watch
"""

import argparse
import asyncio
import json
import sys
from typing import List, Optional

from parksync.core.api_client import ParkingApiClient
from parksync.core.config import settings
from parksync.core.connectivity import HttpReachabilityMonitor
from parksync.core.logging import setup_logging
from parksync.core.store import create_store
from parksync.services import ActionQueue, DeadLetterLog, OfflineCache, build_handlers
from parksync.workers.queue_consumer import QueueConsumer


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="parksync", description="Inspect and replay the offline action queue")
    parser.add_argument("--log-level", default=None,
                        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
                        help="Override LOG_LEVEL")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("list", help="Show pending actions")

    enqueue = subparsers.add_parser("enqueue", help="Queue an action")
    enqueue.add_argument("type", help="Action type, e.g. sync_extend")
    enqueue.add_argument("payload", nargs="?", default="null", help="JSON payload")

    remove = subparsers.add_parser("remove", help="Cancel a pending action")
    remove.add_argument("id")

    subparsers.add_parser("clear", help="Discard every pending action")
    subparsers.add_parser("process", help="Run one processing pass now")

    dead_letters = subparsers.add_parser("dead-letters", help="Show dropped actions")
    dead_letters.add_argument("--clear", action="store_true", help="Empty the dead letter log")

    requeue = subparsers.add_parser("requeue", help="Move a dead letter back onto the queue")
    requeue.add_argument("id")

    subparsers.add_parser("watch", help="Replay the queue whenever the API becomes reachable")
    return parser


def _print_json(data) -> None:
    print(json.dumps(data, indent=2, default=str))


async def run_command(args: argparse.Namespace) -> int:
    store = create_store(settings)
    monitor = HttpReachabilityMonitor()
    dead_letters = DeadLetterLog(store)
    queue = ActionQueue(store, monitor, dead_letters=dead_letters)

    try:
        if args.command == "list":
            _print_json([action.to_record() for action in await queue.list()])

        elif args.command == "enqueue":
            try:
                payload = json.loads(args.payload)
            except json.JSONDecodeError as e:
                print(f"Invalid JSON payload: {e}", file=sys.stderr)
                return 2
            _print_json({"id": await queue.enqueue(args.type, payload)})

        elif args.command == "remove":
            removed = await queue.remove(args.id)
            _print_json({"removed": removed})
            return 0 if removed else 1

        elif args.command == "clear":
            await queue.clear()
            _print_json({"cleared": True})

        elif args.command == "process":
            handlers = build_handlers(ParkingApiClient(), OfflineCache(store))
            result = await queue.process_queue(handlers)
            _print_json(result.model_dump())

        elif args.command == "dead-letters":
            if args.clear:
                await dead_letters.clear()
                _print_json({"cleared": True})
            else:
                _print_json([entry.to_record() for entry in await dead_letters.list()])

        elif args.command == "requeue":
            new_id = await dead_letters.requeue(args.id, queue)
            _print_json({"id": new_id})
            return 0 if new_id else 1

        elif args.command == "watch":
            handlers = build_handlers(ParkingApiClient(), OfflineCache(store))
            consumer = QueueConsumer(queue, monitor, handlers)
            await consumer.start()
            monitor.start()
            try:
                await asyncio.Event().wait()
            finally:
                await monitor.stop()
                await consumer.stop()

        return 0
    finally:
        close = getattr(store, "close", None)
        if close is not None:
            await close()


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level, stream=sys.stderr)
    try:
        return asyncio.run(run_command(args))
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(main())
