"""Plot the X/Y drive waveform and trajectory for a scan configuration."""

import sys
from pathlib import Path

import numpy as np
import matplotlib.pyplot as plt

from rasterwave.components import io


config_file = Path(sys.argv[1]) if len(sys.argv) > 1 else Path(__file__).parent / "scan_example.toml"

config = io.load_scan_config(config_file)
generator = io.generator_from_config(config)

chunks = list(generator.chunks(config.sample_rate, config.output.max_buffer_size))
waveform = np.concatenate(chunks, axis=1)
t = np.arange(waveform.shape[1]) / config.sample_rate

print(f"{len(chunks)} chunks, {waveform.shape[1]} samples, "
      f"expected {generator.total_output_samples(config.sample_rate)}")


fig, (ax_x, ax_y, ax_xy) = plt.subplots(
    3, 1, figsize=(8, 10), layout="constrained"
)

ax_x.plot(t * 1e3, waveform[0], lw=0.8)
ax_x.set_ylabel("X (V)")
ax_x.set_title(f"Scan waveform: {generator.descriptor.pattern.name.lower()}")
ax_x.grid(True)

ax_y.plot(t * 1e3, waveform[1], lw=0.8)
ax_y.set_xlabel("Time (ms)")
ax_y.set_ylabel("Y (V)")
ax_y.grid(True)

ax_xy.plot(waveform[0], waveform[1], lw=0.5)
ax_xy.set_xlabel("X (V)")
ax_xy.set_ylabel("Y (V)")
ax_xy.set_aspect("equal")
ax_xy.set_title("Trajectory")

plt.show()
