"""WorkshopConfig — single source of truth for all demonstration parameters."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, Tuple

import numpy as np


# Modes accepted by mne.baseline.rescale
BASELINE_MODES = ("mean", "ratio", "logratio", "percent", "zscore", "zlogratio")

# Canonical EEG frequency bands (Hz), lower bound inclusive
FREQ_BANDS: Dict[str, Tuple[float, float]] = {
    "delta": (1.0, 4.0),
    "theta": (4.0, 8.0),
    "alpha": (8.0, 13.0),
    "beta": (13.0, 30.0),
    "gamma": (30.0, 45.0),
}


def _default_data_dir() -> str:
    return os.environ.get("PIPELINE_DATA_DIR", str(Path.home() / "project" / "data"))


@dataclass(frozen=True)
class WorkshopConfig:
    # --- Synthetic signals ---
    sfreq: float = 500.0
    duration: float = 2.0               # length of the stationary sine demos in seconds
    sine_freqs: Tuple[float, ...] = (4.0, 10.0, 25.0)
    sine_amplitudes: Tuple[float, ...] = (1.0, 0.6, 0.3)
    noise_sd: float = 0.2

    # --- Synthetic epochs ---
    channels: Tuple[str, ...] = ("Cz", "Pz")
    n_epochs: int = 30
    tmin: float = -0.5
    tmax: float = 1.5
    burst_freq: float = 10.0
    burst_onset: float = 0.2            # seconds after the trigger
    burst_duration: float = 0.4
    burst_amplitude: float = 1.5
    standard_burst_scale: float = 0.3   # all but the last average_by condition get a weaker burst

    # --- Triggers / averaging ---
    triggers: Dict[str, int] = field(
        default_factory=lambda: {"standard": 201, "deviant": 202}
    )
    average_by: Tuple[str, ...] = ("standard", "deviant")

    # --- Morlet wavelets ---
    # Number of cycles grows with frequency: better temporal resolution at low
    # frequencies than a fixed cycle count would give.
    tfr_freqs: Tuple[float, ...] = tuple(np.linspace(6.0, 40.0, 35))
    tfr_cycles: Tuple[float, ...] = tuple(np.linspace(3.0, 10.0, 35))
    tfr_baseline: Tuple[float, float] = (-0.45, -0.05)
    tfr_baseline_mode: str = "percent"
    tfr_decim: int = 1

    # --- Reproducibility ---
    random_seed: int = 42

    # --- Paths ---
    data_dir: str = field(default_factory=_default_data_dir)
    output_dir: str = "output"

    @property
    def nyquist(self) -> float:
        return self.sfreq / 2.0

    def validate(self) -> "WorkshopConfig":
        """Raise ValueError for inconsistent parameter combinations; return self."""
        if len(self.sine_freqs) != len(self.sine_amplitudes):
            raise ValueError(
                f"sine_freqs ({len(self.sine_freqs)}) and sine_amplitudes "
                f"({len(self.sine_amplitudes)}) must have the same length"
            )
        if len(self.tfr_freqs) != len(self.tfr_cycles):
            raise ValueError(
                f"tfr_freqs ({len(self.tfr_freqs)}) and tfr_cycles "
                f"({len(self.tfr_cycles)}) must have the same length"
            )
        too_high = [f for f in (*self.sine_freqs, *self.tfr_freqs, self.burst_freq) if f >= self.nyquist]
        if too_high:
            raise ValueError(f"Frequencies {too_high} are at or above Nyquist ({self.nyquist} Hz)")
        if self.tmin >= self.tmax:
            raise ValueError(f"tmin={self.tmin} must be smaller than tmax={self.tmax}")
        bmin, bmax = self.tfr_baseline
        if bmin >= bmax:
            raise ValueError(f"Baseline window {self.tfr_baseline} is empty or reversed")
        if bmin < self.tmin or bmax > self.tmax:
            raise ValueError(
                f"Baseline window {self.tfr_baseline} lies outside the epoch [{self.tmin}, {self.tmax}]"
            )
        if self.tfr_baseline_mode not in BASELINE_MODES:
            raise ValueError(
                f"Unknown baseline mode {self.tfr_baseline_mode!r}; choose from {BASELINE_MODES}"
            )
        missing = [c for c in self.average_by if c not in self.triggers]
        if missing:
            raise ValueError(f"average_by conditions {missing} have no trigger code")
        return self


def freq_cycle_pairs(cfg: WorkshopConfig) -> Iterator[Tuple[float, float]]:
    """Yield (frequency, n_cycles) pairs of the wavelet family."""
    for freq, n_cycles in zip(cfg.tfr_freqs, cfg.tfr_cycles):
        yield float(freq), float(n_cycles)
