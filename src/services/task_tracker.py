"""Tracking of fire-and-forget outbound tasks for graceful shutdown."""

import asyncio

import logfire

# Outbound sends still in flight
_pending_tasks: set[asyncio.Task] = set()


def track_background_task(task: asyncio.Task) -> None:
    """
    Track a background task for graceful shutdown.

    Example:
        task = asyncio.create_task(messenger.send_message(...))
        track_background_task(task)
    """
    _pending_tasks.add(task)
    task.add_done_callback(_pending_tasks.discard)


def pending_task_count() -> int:
    return len(_pending_tasks)


async def drain_pending_tasks(timeout: float) -> tuple[int, int]:
    """Give in-flight sends ``timeout`` seconds to finish, then cancel them.

    Returns:
        (completed, cancelled) task counts
    """
    in_flight = set(_pending_tasks)
    cancelled: set[asyncio.Task] = set()

    if in_flight:
        _, cancelled = await asyncio.wait(in_flight, timeout=timeout)
        for task in cancelled:
            task.cancel()
        # Cancelled sends unwind their httpx clients before the loop closes
        await asyncio.gather(*cancelled, return_exceptions=True)

    completed = len(in_flight) - len(cancelled)
    log = logfire.warning if cancelled else logfire.info
    log(
        "Outbound sends drained at shutdown",
        completed_count=completed,
        cancelled_count=len(cancelled),
        timeout_seconds=timeout,
    )
    return completed, len(cancelled)
