"""
Host monitoring — CPU threshold watchdog.
"""

from policyhub.monitoring.cpu import CpuMonitor, request_restart

__all__ = ["CpuMonitor", "request_restart"]
