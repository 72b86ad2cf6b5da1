from __future__ import annotations

import argparse
import asyncio
import logging
import signal

from coaching_api.infrastructure.outbox import NotificationOutboxProcessor
from coaching_api.shared.config.container import ApplicationContainer
from coaching_api.shared.config.settings import settings


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the booking notification outbox worker.")
    parser.add_argument(
        "--poll-interval-seconds",
        type=float,
        default=settings.outbox_poll_interval_seconds,
        help="Polling interval for pending outbox events.",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=settings.outbox_batch_size,
        help="Maximum events processed per poll cycle.",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Process one batch and exit.",
    )
    return parser.parse_args()


async def _run_worker(args: argparse.Namespace) -> None:
    container = ApplicationContainer(settings)
    try:
        processor = NotificationOutboxProcessor(
            session_factory=container.session_factory,
            dispatcher=container.create_notification_dispatcher(),
            poll_interval_seconds=args.poll_interval_seconds,
            batch_size=args.batch_size,
        )

        if args.once:
            processed = await processor.process_pending_once(limit=args.batch_size)
            print(f"Processed events: {processed}")
            return

        stop_event = asyncio.Event()

        def _request_stop() -> None:
            processor.stop()
            stop_event.set()

        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, _request_stop)
            except NotImplementedError:
                pass

        worker_task = asyncio.create_task(processor.run_forever())
        await stop_event.wait()
        await worker_task
    finally:
        await container.shutdown()


def main() -> int:
    logging.basicConfig(level=settings.log_level.upper())
    args = parse_args()
    try:
        asyncio.run(_run_worker(args))
        return 0
    except KeyboardInterrupt:
        return 0


if __name__ == "__main__":
    raise SystemExit(main())
