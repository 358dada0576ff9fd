import math
import time
from dataclasses import replace

import numpy as np
import cv2
import pytest

from nuclei_count.core import (
    THRESHOLDERS, DEFAULT_METHODS, HoughParams, InputError, RasterBuffer, get_method, to_gray,
)
from nuclei_count.pipeline import MethodState, count_nuclei, run_method

CONTOUR_METHODS = ["otsu", "fixed"]


def test_four_disks_end_to_end(four_disks_rgba):
    res = count_nuclei(four_disks_rgba)
    assert list(res) == ["otsu", "fixed", "hough", "adaptive"]
    for mid in CONTOUR_METHODS:
        assert res[mid].ok, res[mid].error
        assert res[mid].count == 4
    # default Hough votes are too few for radius-8 disks
    assert res["hough"].ok and res["hough"].count == 0
    for r in res.values():
        assert r.state is MethodState.SUCCEEDED
        assert r.overlay.shape == (100, 100, 3)
        assert r.elapsed_ms >= 0.0


def test_hough_with_lower_accumulator_threshold(four_disks, disk_centers):
    tuned = replace(get_method("hough"), hough=replace(HoughParams(), param2=20))
    configs = tuple(tuned if p.method_id == "hough" else p for p in DEFAULT_METHODS)
    res = count_nuclei(four_disks, ["hough"], configs=configs)
    assert res["hough"].ok and res["hough"].count == 4
    ov = res["hough"].overlay
    blue = (ov[..., 2] == 255) & (ov[..., 0] == 0) & (ov[..., 1] == 0)
    for x, y in disk_centers:
        ring = blue[y - 15:y + 16, x - 15:x + 16]
        ys, xs = np.nonzero(ring)
        assert ring.any()
        assert math.hypot(xs.mean() - 15, ys.mean() - 15) < 3.0


def test_adaptive_flat_background_encloses_disks(four_disks):
    # a flat background is within C of its own local mean, so it becomes one
    # border-touching component whose outer boundary encloses every disk
    res = count_nuclei(four_disks, ["adaptive"])
    assert res["adaptive"].ok
    assert res["adaptive"].count == 0


def test_overlay_marks_accepted_candidates(four_disks):
    res = count_nuclei(four_disks, ["otsu"])
    ov = res["otsu"].overlay
    green = (ov[..., 1] == 255) & (ov[..., 0] == 0) & (ov[..., 2] == 0)
    assert green.any()
    assert not green[:10, :].any()  # nothing drawn in the border band


def test_speckle_counts_zero_and_disk_counts_one():
    speckle = np.zeros((100, 100), np.uint8)
    speckle[48:51, 48:51] = 220
    disk = np.zeros((100, 100), np.uint8)
    cv2.circle(disk, (50, 50), 20, 220, -1)
    for mid in CONTOUR_METHODS:
        assert count_nuclei(speckle, [mid])[mid].count == 0
        assert count_nuclei(disk, [mid])[mid].count == 1


def test_border_disk_excluded_then_included_after_shift():
    near = np.zeros((100, 100), np.uint8)
    cv2.circle(near, (12, 50), 8, 200, -1)
    shifted = np.zeros((100, 100), np.uint8)
    cv2.circle(shifted, (27, 50), 8, 200, -1)
    for mid in CONTOUR_METHODS:
        assert count_nuclei(near, [mid])[mid].count == 0
        assert count_nuclei(shifted, [mid])[mid].count == 1


def test_runs_are_deterministic(four_disks):
    a = count_nuclei(four_disks)
    b = count_nuclei(four_disks, max_workers=1)
    for mid in a:
        assert a[mid].count == b[mid].count
        assert np.array_equal(a[mid].overlay, b[mid].overlay)


def test_selection_keeps_configured_order(four_disks):
    res = count_nuclei(four_disks, ["adaptive", "otsu"])
    assert list(res) == ["otsu", "adaptive"]


@pytest.mark.parametrize("workers", [1, None])
def test_failing_method_does_not_affect_siblings(four_disks, monkeypatch, workers):
    baseline = count_nuclei(four_disks, max_workers=workers)
    # corrupted intermediate mask: wrong shape
    monkeypatch.setitem(THRESHOLDERS, "fixed", lambda gray, params=None: np.ones((3, 3), bool))
    res = count_nuclei(four_disks, max_workers=workers)
    assert res["fixed"].state is MethodState.FAILED
    assert res["fixed"].overlay is None and res["fixed"].count == 0
    assert res["fixed"].error.startswith("ValueError")
    for mid in ("otsu", "hough", "adaptive"):
        assert res[mid].ok
        assert res[mid].count == baseline[mid].count


def test_numeric_error_is_recorded(four_disks, monkeypatch):
    def boom(gray, params=None):
        raise ZeroDivisionError("division by zero")
    monkeypatch.setitem(THRESHOLDERS, "otsu", boom)
    res = count_nuclei(four_disks)
    assert res["otsu"].error == "ZeroDivisionError: division by zero"
    assert res["fixed"].count == 4


def test_sequential_timeout_marks_only_slow_method(four_disks, monkeypatch):
    def slow(gray, params=None):
        time.sleep(0.6)
        return gray >= 80
    monkeypatch.setitem(THRESHOLDERS, "otsu", slow)
    res = count_nuclei(four_disks, max_workers=1, timeout_s=0.3)
    assert res["otsu"].state is MethodState.FAILED
    assert res["otsu"].error.startswith("MethodTimeout")
    assert res["fixed"].ok and res["fixed"].count == 4


def test_parallel_timeout_does_not_block(four_disks, monkeypatch):
    def slow(gray, params=None):
        time.sleep(1.5)
        return gray >= 80
    monkeypatch.setitem(THRESHOLDERS, "otsu", slow)
    t0 = time.monotonic()
    res = count_nuclei(four_disks, timeout_s=0.5)
    assert time.monotonic() - t0 < 1.4
    assert res["otsu"].error.startswith("MethodTimeout")
    assert res["fixed"].ok


def test_invalid_params_fail_only_that_method(four_disks):
    from dataclasses import replace
    configs = (replace(DEFAULT_METHODS[0], blur_ksize=4),) + DEFAULT_METHODS[1:]
    res = count_nuclei(four_disks, configs=configs)
    assert not res["otsu"].ok and res["fixed"].ok


@pytest.mark.parametrize("image", [None, np.zeros((0, 0), np.uint8), np.zeros((5, 5, 2), np.uint8)])
def test_input_errors_are_fatal(image):
    with pytest.raises(InputError):
        count_nuclei(image)


def test_empty_or_unknown_selection(four_disks):
    with pytest.raises(InputError):
        count_nuclei(four_disks, [])
    with pytest.raises(InputError):
        count_nuclei(four_disks, ["watershed"])


def test_run_method_single(four_disks):
    gray = to_gray(RasterBuffer(four_disks))
    r = run_method(gray, DEFAULT_METHODS[1])
    assert r.method_id == "fixed" and r.label == "Simple Thresholding"
    assert r.count == 4 and r.error is None


def test_queued_method_budget_starts_when_it_runs(four_disks, monkeypatch):
    def slow(delay):
        def fn(gray, params=None):
            time.sleep(delay)
            return gray >= 80
        return fn
    monkeypatch.setitem(THRESHOLDERS, "otsu", slow(0.4))
    monkeypatch.setitem(THRESHOLDERS, "fixed", slow(0.4))
    monkeypatch.setitem(THRESHOLDERS, "adaptive", slow(0.3))
    # adaptive waits ~0.4 s for a free worker, then runs 0.3 s of its 0.5 s budget
    res = count_nuclei(four_disks, max_workers=2, timeout_s=0.5)
    for mid in ("otsu", "fixed", "hough", "adaptive"):
        assert res[mid].ok, res[mid].error
    assert res["adaptive"].count == 4
