"""
Partial-failure tolerant fan-out over replicas.

One construction task per target runs inside an asyncio.TaskGroup, so no
task outlives the call. Each task contains its own failure: a replica that
cannot be built is logged and dropped instead of cancelling its siblings.
Results go into a single list guarded by an asyncio.Lock.

There is no per-task timeout beyond the transport's own; a hung replica
holds up the whole group.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import TypeVar

from probe_core.errors import PartialListError

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def gather_replicas(
    targets: Sequence[str],
    build: Callable[[str], Awaitable[T]],
) -> list[T]:
    """
    Build one client per target concurrently.

    Args:
        targets: Replica identifiers, typically pod names.
        build: Coroutine function building the client for one target.

    Returns:
        One client per target, in completion order.

    Raises:
        PartialListError: If any target failed. The exception carries the
            clients that were built and the per-target failures; closing
            the partial clients is the caller's decision.

    Example:
        clients = await gather_replicas(["pb-0", "pb-1"], builder.build_for_pod)
    """
    clients: list[T] = []
    failures: dict[str, BaseException] = {}
    lock = asyncio.Lock()

    async def build_one(target: str) -> None:
        try:
            client = await build(target)
        except Exception as e:
            logger.warning(f"Failed to build client for {target}: {e}")
            async with lock:
                failures[target] = e
            return
        async with lock:
            clients.append(client)

    async with asyncio.TaskGroup() as group:
        for target in targets:
            group.create_task(build_one(target))

    if len(clients) != len(targets):
        raise PartialListError(expected=len(targets), clients=clients, failures=failures)

    return clients
