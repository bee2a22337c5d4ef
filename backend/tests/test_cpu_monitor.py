"""CpuMonitor sampling loop and host info."""

import asyncio

from policyhub.monitoring import CpuMonitor


def _feed(monitor, readings):
    """Replace sampling with a fixed series; the last reading repeats."""
    readings = list(readings)

    async def fake_sample():
        value = readings.pop(0) if len(readings) > 1 else readings[0]
        monitor.last_usage = value
        return value

    monitor.sample = fake_sample


async def _wait_until(predicate, timeout=2.0):
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate() and loop.time() < deadline:
        await asyncio.sleep(0.01)


class TestCpuMonitor:
    async def test_threshold_breach_invokes_callback_once_and_stops(self):
        tripped = []
        monitor = CpuMonitor(threshold=70, check_interval=0.01)
        _feed(monitor, [12.0, 40.0, 91.5])

        monitor.start(on_threshold=tripped.append)
        await _wait_until(lambda: not monitor.monitoring)

        assert tripped == [91.5]
        assert monitor.monitoring is False
        await monitor.stop()

    async def test_async_callback_is_awaited(self):
        tripped = []

        async def on_threshold(usage):
            tripped.append(usage)

        monitor = CpuMonitor(threshold=50, check_interval=0.01, on_threshold=on_threshold)
        _feed(monitor, [50.0])

        monitor.start()
        await _wait_until(lambda: bool(tripped))

        assert tripped == [50.0]

    async def test_below_threshold_keeps_monitoring_until_stopped(self):
        tripped = []
        monitor = CpuMonitor(threshold=70, check_interval=0.01, on_threshold=tripped.append)
        _feed(monitor, [10.0])

        monitor.start()
        await asyncio.sleep(0.05)
        assert monitor.monitoring is True

        await monitor.stop()
        assert monitor.monitoring is False
        assert tripped == []

    async def test_sample_errors_do_not_stop_monitoring(self):
        tripped = []
        monitor = CpuMonitor(threshold=70, check_interval=0.01, on_threshold=tripped.append)
        calls = []

        async def flaky_sample():
            calls.append(1)
            if len(calls) == 1:
                raise OSError("/proc/stat unreadable")
            return 95.0

        monitor.sample = flaky_sample

        monitor.start()
        await _wait_until(lambda: bool(tripped))

        assert tripped == [95.0]
        assert len(calls) == 2

    async def test_start_twice_keeps_single_loop(self):
        monitor = CpuMonitor(threshold=70, check_interval=0.01)
        _feed(monitor, [5.0])

        monitor.start()
        first = monitor._task
        monitor.start()

        assert monitor._task is first
        await monitor.stop()

    async def test_stop_without_start(self):
        await CpuMonitor().stop()

    async def test_current_info_shape(self):
        monitor = CpuMonitor(threshold=80, sample_seconds=0.01)

        info = await monitor.current_info()

        assert set(info) == {
            "usage",
            "threshold",
            "cores",
            "platform",
            "arch",
            "total_memory_gb",
            "free_memory_gb",
            "monitoring",
        }
        assert info["threshold"] == 80
        assert 0 <= info["usage"] <= 100
        assert info["total_memory_gb"] >= info["free_memory_gb"] > 0
        assert info["monitoring"] is False
        assert monitor.last_usage is not None


def test_default_action_signals_own_process(monkeypatch):
    from policyhub.monitoring import cpu

    sent = []
    monkeypatch.setattr(cpu.os, "kill", lambda pid, sig: sent.append((pid, sig)))

    cpu.request_restart(88.0)

    assert sent == [(cpu.os.getpid(), cpu.signal.SIGTERM)]
    assert CpuMonitor().on_threshold is cpu.request_restart
