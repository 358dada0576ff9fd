"""
Multi-method orchestration.

Runs each configured detection method over the same grayscale buffer,
times it, and collects a MethodResult per method. A failure or timeout
in one method is recorded on that method only; siblings always report.
"""

from __future__ import annotations
import enum
import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeout
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence

import numpy as np

from ..core.candidates import filter_candidates
from ..core.hough import detect_circles
from ..core.image import InputError, RasterBuffer, as_raster
from ..core.morphology import check_mask, morph_open
from ..core.overlay import draw_overlay
from ..core.params import DEFAULT_METHODS, MethodParams, get_method
from ..core.preprocess import gaussian_smooth, to_gray
from ..core.regions import extract_regions
from ..core.threshold import apply_threshold

logger = logging.getLogger(__name__)


class MethodState(enum.Enum):
    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class MethodTimeout(RuntimeError):
    """A method exceeded its wall-clock budget."""


@dataclass(frozen=True)
class MethodResult:
    """Outcome of one method run."""

    method_id: str
    label: str
    count: int
    elapsed_ms: float
    overlay: Optional[np.ndarray]
    state: MethodState
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.state is MethodState.SUCCEEDED


def _check_deadline(deadline: Optional[float], params: MethodParams) -> None:
    if deadline is not None and time.monotonic() > deadline:
        raise MethodTimeout(f"{params.method_id} exceeded its time budget")


def _detect(gray: np.ndarray, params: MethodParams, deadline: Optional[float]) -> list:
    smoothed = gaussian_smooth(gray, params.blur_ksize, params.blur_sigma)
    _check_deadline(deadline, params)

    if params.detector == "hough":
        candidates = detect_circles(smoothed, params.hough)
    else:
        mask = apply_threshold(smoothed, params)
        _check_deadline(deadline, params)
        check_mask(mask, gray.shape)
        cleaned = morph_open(mask, params.open_ksize)
        _check_deadline(deadline, params)
        check_mask(cleaned, gray.shape)
        candidates = extract_regions(cleaned)
    _check_deadline(deadline, params)
    return filter_candidates(candidates, gray.shape, params.filters)


def _failed(params: MethodParams, elapsed_ms: float, error: str) -> MethodResult:
    return MethodResult(params.method_id, params.label, 0, elapsed_ms, None,
                        MethodState.FAILED, error)


def run_method(gray: np.ndarray, params: MethodParams, timeout_s: Optional[float] = None) -> MethodResult:
    """
    Run a single configured method on a grayscale buffer.

    The optional timeout_s budget starts when this call begins, and it is
    checked between pipeline stages.

    Never raises for computational errors: they are returned as a
    FAILED result carrying "<ExceptionType>: <message>".
    """
    logger.debug("%s: %s -> %s", params.method_id, MethodState.PENDING.value, MethodState.RUNNING.value)
    t0 = time.perf_counter()
    deadline = time.monotonic() + timeout_s if timeout_s is not None else None
    try:
        params.validate()
        accepted = _detect(gray, params, deadline)
        overlay = draw_overlay(gray, accepted, params.color)
    except Exception as e:
        elapsed = (time.perf_counter() - t0) * 1000.0
        logger.warning("%s failed after %.1f ms: %s", params.method_id, elapsed, e)
        logger.debug("%s traceback", params.method_id, exc_info=True)
        return _failed(params, elapsed, f"{type(e).__name__}: {e}")

    elapsed = (time.perf_counter() - t0) * 1000.0
    logger.info("%s: %d nuclei in %.1f ms", params.method_id, len(accepted), elapsed)
    return MethodResult(params.method_id, params.label, len(accepted), elapsed, overlay,
                        MethodState.SUCCEEDED)


def _select(methods: Optional[Iterable[str]], configs: Sequence[MethodParams]) -> List[MethodParams]:
    if methods is None:
        return list(configs)
    wanted = list(methods)
    if not wanted:
        raise InputError("No detection methods selected")
    chosen = {m: get_method(m, tuple(configs)) for m in wanted}
    # presentation order is the configured order
    return [p for p in configs if p.method_id in chosen]


def count_nuclei(
    image: RasterBuffer | np.ndarray,
    methods: Optional[Iterable[str]] = None,
    *,
    configs: Sequence[MethodParams] = DEFAULT_METHODS,
    max_workers: Optional[int] = None,
    timeout_s: Optional[float] = None,
) -> Dict[str, MethodResult]:
    """
    Count nuclei in one image with each selected method.

    Args:
        image: Decoded image (RasterBuffer or uint8/uint16/bool array, RGB(A) or gray).
        methods: Method ids to run; None runs every configured method.
        configs: Method configurations, in presentation order.
        max_workers: Thread pool size; 1 runs sequentially on the calling thread.
        timeout_s: Optional per-method wall-clock budget in seconds.

    Returns:
        Mapping method_id -> MethodResult in configured order.

    Raises:
        InputError: missing/empty/non-image input or an empty/unknown selection.
    """
    selected = _select(methods, configs)
    raster = as_raster(image)
    gray = to_gray(raster)
    logger.debug("Analyzing %dx%d image with %s", raster.width, raster.height,
                  ", ".join(p.method_id for p in selected))

    workers = max_workers if max_workers is not None else len(selected)
    if workers <= 1:
        return {p.method_id: run_method(gray, p, timeout_s) for p in selected}

    started: Dict[str, float] = {}
    running = {p.method_id: threading.Event() for p in selected}

    def task(p: MethodParams) -> MethodResult:
        # the budget is charged from here, not from submission
        started[p.method_id] = time.monotonic()
        running[p.method_id].set()
        return run_method(gray, p, timeout_s)

    pool = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="nuclei")
    try:
        futures = {p.method_id: (p, pool.submit(task, p)) for p in selected}
        results = {}
        for method_id, (p, fut) in futures.items():
            if timeout_s is None:
                results[method_id] = fut.result()
                continue
            running[method_id].wait()
            start = started[method_id]
            remaining = max(0.0, start + timeout_s - time.monotonic())
            try:
                results[method_id] = fut.result(timeout=remaining)
            except FutureTimeout:
                elapsed = (time.monotonic() - start) * 1000.0
                logger.warning("%s timed out after %.1f ms", method_id, elapsed)
                results[method_id] = _failed(
                    p, elapsed, f"MethodTimeout: {method_id} exceeded {timeout_s:g} s")
        return results
    finally:
        # do not block on methods abandoned after a timeout
        pool.shutdown(wait=False, cancel_futures=True)
