"""
Write-then-read readiness protocol.

For stores without a native readiness flag, readiness is established by
writing a fixed marker document and reading it back. Combining the two
probes distinguishes four states:

- UNREACHABLE: the transport failed at any step
- NOT_PROVISIONED: reachable, marker never written (read-only check)
- WRITABLE: marker written (or present) and read back consistently
- READ_INCONSISTENT: the write was accepted but the marker did not read back

READ_INCONSISTENT is a real failure and is reported, not retried.
"""

import json
import logging
from collections.abc import Mapping
from typing import Any

from probe_core.errors import (
    MarkerNotFoundError,
    ReadRejectedError,
    TransportError,
)
from probe_protocols import (
    ReadinessProbeCapability,
    ReadinessState,
    ReadProbeCapability,
)

logger = logging.getLogger(__name__)


def _normalize(document: Mapping[str, Any]) -> dict[str, Any]:
    # What the store hands back went through JSON; compare like with like.
    return json.loads(json.dumps(document))


def document_matches(written: Mapping[str, Any], read: Mapping[str, Any]) -> bool:
    """
    Whether a read-back document carries every field that was written.

    Extra fields added by the store (version counters and the like) are
    ignored. A scalar written into a multi-valued field reads back as a
    single-element list; both forms count as a match.
    """
    expected = _normalize(written)
    for key, value in expected.items():
        if key not in read:
            return False
        got = read[key]
        if got != value and got != [value]:
            return False
    return True


async def probe_readiness(
    client: ReadProbeCapability | ReadinessProbeCapability,
    document: Mapping[str, Any] | None = None,
) -> ReadinessState:
    """
    Determine write/read readiness of a store.

    Args:
        client: Client implementing read_probe (and write_probe when a
            document is given).
        document: Marker body to write. When None only the read half runs.

    Returns:
        The ReadinessState. In read-only mode (no document) nothing is
        written, so WRITABLE means only that a marker from an earlier
        write is present and readable.

    Raises:
        WriteRejectedError: If the store explicitly rejected the write.
        ResponseParseError: If a response could not be interpreted.
        TypeError: If a document is given but the client cannot write.
    """
    if document is None:
        try:
            await client.read_probe()
        except TransportError as e:
            logger.debug(f"Readiness read failed at transport level: {e}")
            return ReadinessState.UNREACHABLE
        except MarkerNotFoundError:
            return ReadinessState.NOT_PROVISIONED
        return ReadinessState.WRITABLE

    if not isinstance(client, ReadinessProbeCapability):
        raise TypeError(f"{type(client).__name__} does not support write probes")

    try:
        await client.write_probe(document)
    except TransportError as e:
        logger.debug(f"Readiness write failed at transport level: {e}")
        return ReadinessState.UNREACHABLE

    try:
        stored = await client.read_probe()
    except TransportError as e:
        logger.debug(f"Readiness read failed at transport level: {e}")
        return ReadinessState.UNREACHABLE
    except (MarkerNotFoundError, ReadRejectedError) as e:
        logger.warning(f"Write accepted but marker did not read back: {e}")
        return ReadinessState.READ_INCONSISTENT

    if not document_matches(document, stored):
        logger.warning("Write accepted but marker read back with different content")
        return ReadinessState.READ_INCONSISTENT

    return ReadinessState.WRITABLE
