"""Host-side client: runs a composition artifact in a fresh subprocess.

The artifact shares nothing with the host but the JSON request written to its
stdin and the JSON response read from its stdout.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from collections.abc import Sequence

from pydantic import ValidationError

from supergraph_bridge.config import get_sandbox_settings
from supergraph_bridge.models import CompositionReport, CompositionRequest, SubgraphInput
from supergraph_bridge.versions import find_version

logger = logging.getLogger(__name__)


class SandboxError(RuntimeError):
    """Raised when an artifact subprocess does not produce a composition response."""


async def run_artifact(python: str, artifact: str, payload: str, timeout: float | None = None) -> str:
    """Run ``python -m artifact`` with ``payload`` on stdin and return its stdout."""
    logger.debug("Starting artifact %s with %s", artifact, python)
    try:
        process = await asyncio.create_subprocess_exec(
            python,
            "-m",
            artifact,
            stdin=asyncio.subprocess.PIPE,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as exc:
        raise SandboxError(f"Could not start artifact {artifact}: {exc}") from exc

    try:
        stdout, stderr = await asyncio.wait_for(process.communicate(payload.encode("utf-8")), timeout)
    except asyncio.TimeoutError:
        logger.warning("Artifact %s timed out after %ss", artifact, timeout)
        raise SandboxError(f"Artifact {artifact} did not respond within {timeout}s") from None
    finally:
        if process.returncode is None:
            with contextlib.suppress(ProcessLookupError):
                process.kill()
            await process.wait()

    if process.returncode != 0:
        detail = stderr.decode("utf-8", errors="replace").strip()
        logger.warning("Artifact %s exited with status %d", artifact, process.returncode)
        raise SandboxError(f"Artifact {artifact} exited with status {process.returncode}: {detail}")
    try:
        return stdout.decode("utf-8")
    except UnicodeDecodeError as exc:
        logger.warning("Artifact %s wrote output that is not UTF-8", artifact)
        raise SandboxError(f"Artifact {artifact} returned undecodable output") from exc


async def compose(
    version: str,
    services: Sequence[SubgraphInput],
    timeout: float | None = None,
) -> tuple[CompositionReport, str]:
    """Compose ``services`` with the artifact of ``version``.

    Returns the parsed report together with the raw JSON response. An explicit
    ``timeout`` overrides ``SUPERGRAPH_BRIDGE_TIMEOUT``.
    """
    resolved = find_version(version)
    settings = get_sandbox_settings()
    effective_timeout = timeout if timeout is not None else settings.timeout
    payload = CompositionRequest(services=list(services)).model_dump_json(exclude_none=True)

    started = time.perf_counter()
    raw = await run_artifact(settings.python, resolved.artifact, payload, effective_timeout)
    logger.info(
        "Composed %d subgraph(s) with version %s in %.3fs",
        len(services),
        resolved.name,
        time.perf_counter() - started,
    )

    try:
        report = CompositionReport.model_validate_json(raw)
    except ValidationError as exc:
        raise SandboxError(f"Artifact {resolved.artifact} returned an invalid response") from exc
    return report, raw
