"""Pinning the current thread to a CPU."""

from __future__ import annotations

import os


def set_current_thread_affinity(cpuid: int) -> bool:
    """Pin the calling thread to ``cpuid``; return whether it worked."""
    if cpuid < 0:
        raise ValueError(f"invalid CPU id: {cpuid}")
    num_cores = os.cpu_count() or 1
    if cpuid >= num_cores:
        return False
    setter = getattr(os, "sched_setaffinity", None)
    if setter is None:
        return False
    try:
        setter(0, {cpuid})
    except OSError:
        return False
    return True