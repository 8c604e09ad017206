"""Bounded subprocess execution for git invocations."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from .errors import (
    GitCommandError,
    GitTimeoutError,
    GitUnavailableError,
    OutputLimitExceededError,
)

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 64 * 1024


async def _drain(stream: asyncio.StreamReader, limit: int, argv: list[str]) -> bytes:
    buf = bytearray()
    while True:
        chunk = await stream.read(_CHUNK_SIZE)
        if not chunk:
            return bytes(buf)
        buf.extend(chunk)
        if len(buf) > limit:
            raise OutputLimitExceededError(
                f"output of '{' '.join(argv)}' exceeded {limit} bytes", args=argv[1:]
            )


async def _communicate(
    proc: asyncio.subprocess.Process, limit: int, argv: list[str]
) -> tuple[int, bytes, bytes]:
    # Both pipes are drained together so a full stderr cannot stall the child.
    stdout, stderr = await asyncio.gather(
        _drain(proc.stdout, limit, argv), _drain(proc.stderr, limit, argv)
    )
    returncode = await proc.wait()
    return returncode, stdout, stderr


async def _terminate(proc: asyncio.subprocess.Process) -> None:
    if proc.returncode is None:
        try:
            proc.kill()
        except ProcessLookupError:
            pass
    await proc.wait()


async def run_process(
    argv: list[str],
    cwd: str | Path | None = None,
    max_output: int = 10 * 1024 * 1024,
    timeout: float | None = None,
) -> tuple[int, bytes, bytes]:
    """Run ``argv`` and return ``(returncode, stdout, stderr)``.

    Output on either pipe beyond ``max_output`` bytes kills the child and
    raises :class:`OutputLimitExceededError`. ``timeout`` of ``None`` waits
    indefinitely.
    """
    if cwd is not None and not Path(cwd).is_dir():
        raise GitCommandError(f"not a directory: {cwd}", args=argv[1:])

    logger.debug("exec %s (cwd=%s)", " ".join(argv), cwd)
    try:
        proc = await asyncio.create_subprocess_exec(
            *argv,
            cwd=str(cwd) if cwd is not None else None,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except FileNotFoundError as exc:
        raise GitUnavailableError(
            f"{argv[0]} is not installed or not available in PATH", args=argv[1:]
        ) from exc
    except OSError as exc:
        raise GitCommandError(str(exc), args=argv[1:]) from exc

    try:
        return await asyncio.wait_for(_communicate(proc, max_output, argv), timeout)
    except asyncio.TimeoutError as exc:
        await _terminate(proc)
        raise GitTimeoutError(
            f"'{' '.join(argv)}' timed out after {timeout}s", args=argv[1:]
        ) from exc
    except BaseException:
        await _terminate(proc)
        raise
