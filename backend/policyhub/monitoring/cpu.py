"""
CpuMonitor — samples host CPU usage and trips once above a threshold.

Every `check_interval` seconds the monitor takes a `sample_seconds` long
usage sample.  The first sample at or above `threshold` stops monitoring
and invokes the threshold callback with the measured percentage.  The
default callback asks the current process to terminate (SIGTERM), leaving
the restart to the process supervisor.
"""

from __future__ import annotations

import asyncio
import inspect
import os
import platform
import signal
from typing import Any, Callable

import psutil
import structlog

logger = structlog.get_logger("monitoring.cpu")

OnThreshold = Callable[[float], Any]

BYTES_PER_GB = 1024 ** 3


def request_restart(usage: float) -> None:
    """Terminate this process gracefully so its supervisor starts a fresh one."""
    logger.critical("Restarting process due to high CPU usage", usage=usage, pid=os.getpid())
    os.kill(os.getpid(), signal.SIGTERM)


class CpuMonitor:
    """
    Usage::

        monitor = CpuMonitor(threshold=70, check_interval=5)
        monitor.start()
        info = await monitor.current_info()
        await monitor.stop()
    """

    def __init__(
        self,
        threshold: float = 70.0,
        check_interval: float = 5.0,
        *,
        sample_seconds: float = 1.0,
        on_threshold: OnThreshold | None = None,
    ) -> None:
        self.threshold = threshold
        self.check_interval = check_interval
        self.sample_seconds = sample_seconds
        self.on_threshold: OnThreshold = on_threshold or request_restart
        self.last_usage: float | None = None
        self._task: asyncio.Task | None = None

    @property
    def monitoring(self) -> bool:
        return self._task is not None and not self._task.done()

    async def sample(self) -> float:
        """CPU usage percentage over one sample window."""
        usage = await asyncio.to_thread(psutil.cpu_percent, interval=self.sample_seconds)
        self.last_usage = float(usage)
        return self.last_usage

    async def current_info(self) -> dict[str, Any]:
        usage = await self.sample()
        memory = psutil.virtual_memory()
        return {
            "usage": round(usage, 2),
            "threshold": self.threshold,
            "cores": psutil.cpu_count(),
            "platform": platform.system().lower(),
            "arch": platform.machine(),
            "total_memory_gb": round(memory.total / BYTES_PER_GB, 2),
            "free_memory_gb": round(memory.available / BYTES_PER_GB, 2),
            "monitoring": self.monitoring,
        }

    # ─── Lifecycle ─────────────────────────────────────

    def start(self, on_threshold: OnThreshold | None = None) -> None:
        """Start the sampling loop.  Must be called from a running event loop."""
        if self.monitoring:
            logger.info("CPU monitoring is already running")
            return
        if on_threshold is not None:
            self.on_threshold = on_threshold
        self._task = asyncio.create_task(self._run(), name="cpu-monitor")
        logger.info(
            "CPU monitoring started",
            threshold=self.threshold,
            check_interval=self.check_interval,
        )

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("CPU monitoring stopped")

    async def _run(self) -> None:
        while True:
            try:
                usage = await self.sample()
            except Exception as exc:
                logger.error("CPU sample failed", error=str(exc))
            else:
                logger.debug("CPU usage sampled", usage=usage)
                if usage >= self.threshold:
                    logger.warning(
                        "CPU usage exceeded threshold",
                        usage=usage,
                        threshold=self.threshold,
                    )
                    await self._trip(usage)
                    return
            await asyncio.sleep(self.check_interval)

    async def _trip(self, usage: float) -> None:
        try:
            outcome = self.on_threshold(usage)
            if inspect.isawaitable(outcome):
                await outcome
        except Exception as exc:
            logger.exception("CPU threshold callback failed", error=str(exc))
