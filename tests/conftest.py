import numpy as np
import pytest

from anneal import config


@pytest.fixture
def random_cells():
    def make(lines, xsize, seed=0):
        rng = np.random.default_rng(seed)
        return rng.integers(0, 2, size=(lines, xsize), dtype=np.uint8)
    return make


@pytest.fixture(autouse=True)
def default_config():
    config.use_config(None)
    yield
    config.use_config(None)


@pytest.fixture
def small_config(tmp_path):
    path = tmp_path / "small.conf"
    path.write_text("[grid]\nxsize = 16\nseed = 7\n", encoding="utf-8")
    config.use_config(path)
    return path


@pytest.fixture
def gpu_backend():
    cp = pytest.importorskip("cupy")
    try:
        if cp.cuda.runtime.getDeviceCount() == 0:
            pytest.skip("no CUDA device")
    except cp.cuda.runtime.CUDARuntimeError:
        pytest.skip("no CUDA device")
    from anneal import gpu_backend
    return gpu_backend
