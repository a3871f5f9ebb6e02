import time, anneal.gpu_backend as gpu

sim = gpu.Simulation(4096)
t0 = time.perf_counter()
sim.upload(); sim.run(128); sim.download()
print('Elapsed', time.perf_counter()-t0)
