import numpy as np
import cv2
import pytest

DISK_CENTERS = [(25, 25), (25, 75), (75, 25), (75, 75)]


@pytest.fixture
def disk_centers():
    return list(DISK_CENTERS)


@pytest.fixture
def rng():
    return np.random.default_rng(0)


@pytest.fixture
def four_disks():
    # 100x100, four bright disks r=8 on a plain dark background
    img = np.zeros((100, 100), np.uint8)
    for c in DISK_CENTERS:
        cv2.circle(img, c, 8, 200, -1)
    return img


@pytest.fixture
def four_disks_rgba(four_disks):
    rgba = np.dstack([four_disks, four_disks, four_disks, np.full_like(four_disks, 255)])
    return rgba


@pytest.fixture
def bimodal(rng):
    # two well separated intensity clusters with an empty gap between them
    lo = rng.integers(40, 81, size=6000)
    hi = rng.integers(150, 191, size=4000)
    vals = np.concatenate([lo, hi]).astype(np.uint8)
    rng.shuffle(vals)
    return vals.reshape(100, 100)
