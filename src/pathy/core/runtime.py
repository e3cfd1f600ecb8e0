"""Taichi runtime setup.

ti.init() must run before any module that declares Taichi fields is imported
(scene storage, camera state, the render kernels). This module declares none,
so it can be imported first:

    >>> from src.pathy.core.runtime import init_runtime
    >>> init_runtime(workers=4, seed=7)
    4
    >>> from src.pathy.core.render import render  # safe after init
"""

from __future__ import annotations

import logging
import os

import taichi as ti

logger = logging.getLogger(__name__)

# Thread pool size passed to the last ti.init(), None before initialization
_pool_size: int | None = None


def hardware_concurrency() -> int:
    """Number of CPU threads available, at least 1."""
    return max(1, os.cpu_count() or 1)


def init_runtime(
    arch: object = ti.cpu,
    *,
    workers: int | None = None,
    seed: int = 0,
    debug: bool = False,
) -> int:
    """Initialize Taichi for rendering.

    Random numbers drawn with ti.random() come from one generator per CPU
    thread; seed sets their starting state.

    Fast math is disabled so kernels evaluate floating-point expressions in
    the order written; the tone curve must quantize exactly like its NumPy
    counterpart.

    Args:
        arch: Taichi backend (default ti.cpu).
        workers: Size of the CPU thread pool. None uses every hardware thread.
        seed: Seed for the per-thread random generators.
        debug: Enable Taichi debug mode, which checks kernel assertions such
            as ray directions being normalized.

    Returns:
        The number of worker threads requested.

    Raises:
        ValueError: If workers is less than 1.
    """
    num_workers = hardware_concurrency() if workers is None else workers
    if num_workers < 1:
        raise ValueError(f"Worker count must be at least 1, got {num_workers}")

    global _pool_size
    ti.init(
        arch=arch,
        cpu_max_num_threads=num_workers,
        random_seed=seed,
        debug=debug,
        fast_math=False,
    )
    _pool_size = num_workers
    logger.debug("Taichi initialized with %d worker threads", num_workers)
    return num_workers


def pool_size() -> int | None:
    """Worker threads configured by the last init_runtime() call, or None."""
    return _pool_size
