import os
import sys
from dataclasses import dataclass


@dataclass(frozen=True)
class SandboxSettings:
    python: str
    timeout: float | None


def get_sandbox_settings() -> SandboxSettings:
    """Read sandbox settings from ``SUPERGRAPH_BRIDGE_PYTHON`` and ``SUPERGRAPH_BRIDGE_TIMEOUT``."""
    python = os.getenv("SUPERGRAPH_BRIDGE_PYTHON") or sys.executable

    raw_timeout = os.getenv("SUPERGRAPH_BRIDGE_TIMEOUT", "").strip()
    timeout: float | None = None
    if raw_timeout:
        try:
            timeout = float(raw_timeout)
        except ValueError:
            raise ValueError(f"SUPERGRAPH_BRIDGE_TIMEOUT must be a number of seconds, got {raw_timeout!r}") from None
        if timeout <= 0:
            raise ValueError(f"SUPERGRAPH_BRIDGE_TIMEOUT must be positive, got {raw_timeout!r}")

    return SandboxSettings(python=python, timeout=timeout)
