import time

import numpy as np

from mvq.quantize import Quantizer

# ---- Configuration ----
N_ITERATIONS = 10
HEIGHT = 480
WIDTH = 640
SEED = 42


def run_benchmark():
    print("--- Starting Benchmark for Quantizer.reduce ---")
    print(f"Number of iterations: {N_ITERATIONS}")
    print(f"Image dimensions: {WIDTH}x{HEIGHT} ({HEIGHT*WIDTH} pixels)")
    print("Generating random 24-bit images for each iteration...")

    rng = np.random.default_rng(SEED)
    quantizer = Quantizer() # reused; the bucket table is reset on every run
    durations = []
    passes = []

    for i in range(N_ITERATIONS):
        image = rng.integers(0, 1 << 24, size=HEIGHT * WIDTH, dtype=np.uint32)

        start_time = time.perf_counter()
        result = quantizer.reduce(image)
        duration = time.perf_counter() - start_time

        durations.append(duration)
        passes.append(result.passes)
        print(f"  Iteration {i+1}/{N_ITERATIONS} done. Colors: {result.colors}, passes: {result.passes}. Time: {duration:.4f}s")

    if not durations:
        print("No iterations were run.")
        return

    total_time = sum(durations)
    avg_time = total_time / N_ITERATIONS
    megapixels = HEIGHT * WIDTH * N_ITERATIONS / 1e6

    print("\n--- Benchmark Results Summary ---")
    print(f"Total time: {total_time:.4f} seconds")
    print(f"Average time per call: {avg_time:.4f} seconds ({avg_time*1000:.1f} ms)")
    print(f"Min time per call: {min(durations):.4f} seconds")
    print(f"Max time per call: {max(durations):.4f} seconds")
    print(f"Average pruning passes: {sum(passes) / len(passes):.1f}")
    print(f"Throughput: {megapixels / total_time:.2f} megapixels/second")

if __name__ == "__main__":
    run_benchmark()
