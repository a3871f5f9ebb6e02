"""CuPy-based Simulation drop-in."""

import logging

import cupy as cp

from . import config
from .core import Simulation as CPUSimulation
from .errors import DeviceAllocationError, DeviceExecutionError, HostAllocationError
from .grid import allocate, launch_dims

logger = logging.getLogger(__name__)

ANNEAL_CUDA_MODULE = cp.RawModule(code=r'''
extern "C" {
    __constant__ unsigned char anneal[10] = {0, 0, 0, 0, 1, 0, 1, 1, 1, 1};

    /*
     * Fill the halo of one padded grid from its own interior.
     * Index i < xsize wraps column i+1 vertically, index i < lines wraps
     * row i+1 horizontally, index 0 also fills the corners. Reads only
     * touch the interior and writes only touch the halo.
     */
    __global__ void boundary_kernel(unsigned char* grid, const int lines, const int xsize)
    {
        const long long width = (long long)xsize + 2;
        const long long last = (long long)lines * width;
        const long long below = ((long long)lines + 1) * width;
        const long long span = lines > xsize ? lines : xsize;
        const long long stride = (long long)gridDim.x * blockDim.x;

        for (long long i = (long long)blockIdx.x * blockDim.x + threadIdx.x; i < span; i += stride) {
            if (i < xsize) {
                grid[i + 1] = grid[last + i + 1];
                grid[below + i + 1] = grid[width + i + 1];
            }
            if (i < lines) {
                const long long row = (i + 1) * width;
                grid[row] = grid[row + xsize];
                grid[row + xsize + 1] = grid[row + 1];
            }
            if (i == 0) {
                grid[0] = grid[last + xsize];
                grid[xsize + 1] = grid[last + 1];
                grid[below] = grid[width + xsize];
                grid[below + xsize + 1] = grid[width + 1];
            }
        }
    }

    /*
     * One thread per interior cell, striding over the rows and columns the
     * launch does not cover: sum the 3x3 neighbourhood of src and write the
     * table entry to the same position of dst.
     */
    __global__ void anneal_kernel(const unsigned char* src, unsigned char* dst,
                                  const int lines, const int xsize)
    {
        const long long width = (long long)xsize + 2;
        const long long stride_x = (long long)gridDim.x * blockDim.x;
        const long long stride_y = (long long)gridDim.y * blockDim.y;

        for (long long y = (long long)blockIdx.y * blockDim.y + threadIdx.y + 1; y <= lines; y += stride_y) {
            for (long long x = (long long)blockIdx.x * blockDim.x + threadIdx.x + 1; x <= xsize; x += stride_x) {
                const unsigned char* up = src + (y - 1) * width + x;
                const unsigned char* mid = up + width;
                const unsigned char* down = mid + width;
                const int sum = up[-1] + up[0] + up[1]
                              + mid[-1] + mid[0] + mid[1]
                              + down[-1] + down[0] + down[1];
                dst[y * width + x] = anneal[sum];
            }
        }
    }
}
''')

_CUDA_ERRORS = (cp.cuda.runtime.CUDARuntimeError, cp.cuda.driver.CUDADriverError)


class Simulation(CPUSimulation):
    """
    A CuPy-based simulation that inherits from the CPU version.

    The grid pair lives in device memory; each step is two kernel launches
    on the same stream, so the halo is complete before any cell update
    reads it and each generation finishes before the next begins.
    """

    xp = cp

    def __init__(self, *args, **kwargs):
        """Initialise the host grid and load the kernels."""
        super().__init__(*args, **kwargs)
        self._setup_device()

    @classmethod
    def from_grid(cls, grid):
        sim = super().from_grid(grid)
        sim._setup_device()
        return sim

    def _setup_device(self):
        dev_cfg = config.load_config().get("device", {})
        self.block = (dev_cfg.get("block_x", 32), dev_cfg.get("block_y", 8), 1)
        self.threads = dev_cfg.get("threads", 256)
        self.grid_dims, self.boundary_blocks = launch_dims(
            self.lines, self.xsize, self.block, self.threads
        )
        try:
            self.kernels = {
                name: ANNEAL_CUDA_MODULE.get_function(name)
                for name in ("boundary_kernel", "anneal_kernel")
            }
        except (cp.cuda.compiler.CompileException, *_CUDA_ERRORS) as exc:
            raise DeviceExecutionError("compile", str(exc)) from exc

    # --- buffer management ---------------------------------------------
    def upload(self):
        """Copy the host grid to the device and allocate the destination there."""
        try:
            self.src = cp.asarray(self.host)
            self.dst = allocate(self.lines, self.xsize, xp=self.xp)
        except cp.cuda.memory.OutOfMemoryError as exc:
            self.close()
            raise DeviceAllocationError(str(exc)) from exc
        except _CUDA_ERRORS as exc:
            self.close()
            raise DeviceExecutionError("upload", str(exc)) from exc
        logger.debug("uploaded %d bytes per buffer", self.src.nbytes)

    def download(self):
        """Wait for outstanding steps and copy the source grid to the host."""
        self._require_uploaded()
        try:
            cp.cuda.get_current_stream().synchronize()
        except _CUDA_ERRORS as exc:
            raise DeviceExecutionError("synchronize", str(exc)) from exc
        try:
            self.host = self.src.get()
        except MemoryError as exc:
            raise HostAllocationError("cannot allocate host copy of the final grid") from exc
        except _CUDA_ERRORS as exc:
            raise DeviceExecutionError("download", str(exc)) from exc
        return self.host

    def close(self):
        """Drop the device buffers so the memory pool can reuse them."""
        super().close()
        cp.get_default_memory_pool().free_all_blocks()

    # --- stages ---------------------------------------------------------
    def _sync_boundary(self, grid):
        try:
            self.kernels["boundary_kernel"](
                self.boundary_blocks, (self.threads,),
                (grid, cp.int32(self.lines), cp.int32(self.xsize)),
            )
        except _CUDA_ERRORS as exc:
            raise DeviceExecutionError("boundary_kernel", str(exc)) from exc

    def _transition(self, src, dst):
        try:
            self.kernels["anneal_kernel"](
                self.grid_dims, self.block,
                (src, dst, cp.int32(self.lines), cp.int32(self.xsize)),
            )
        except _CUDA_ERRORS as exc:
            raise DeviceExecutionError("anneal_kernel", str(exc)) from exc
