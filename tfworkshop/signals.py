"""Synthetic signal generators for the time-frequency demonstrations."""
from __future__ import annotations

from typing import Optional, Sequence, Tuple

import mne
import numpy as np
import pandas as pd

from .config import WorkshopConfig

mne.set_log_level("WARNING")


def make_times(sfreq: float, duration: float, tmin: float = 0.0) -> np.ndarray:
    """Sample times of a signal starting at *tmin* and lasting *duration* seconds."""
    if sfreq <= 0:
        raise ValueError(f"sfreq must be positive, got {sfreq}")
    if duration <= 0:
        raise ValueError(f"duration must be positive, got {duration}")
    n_samples = int(round(duration * sfreq))
    return tmin + np.arange(n_samples) / sfreq


def make_sine(
    freq: float,
    sfreq: float,
    duration: float,
    amplitude: float = 1.0,
    phase: float = 0.0,
    tmin: float = 0.0,
) -> Tuple[np.ndarray, np.ndarray]:
    times = make_times(sfreq, duration, tmin)
    return times, amplitude * np.sin(2 * np.pi * freq * times + phase)


def make_sine_mixture(
    freqs: Sequence[float],
    amplitudes: Sequence[float],
    sfreq: float,
    duration: float,
    noise_sd: float = 0.0,
    seed: Optional[int] = None,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Sum of sines plus optional white noise.

    Returns
    -------
    times  : (n_samples,)
    signal : (n_samples,)
    """
    if len(freqs) != len(amplitudes):
        raise ValueError(
            f"Got {len(freqs)} frequencies but {len(amplitudes)} amplitudes"
        )
    times = make_times(sfreq, duration)
    signal = np.zeros_like(times)
    for freq, amp in zip(freqs, amplitudes):
        signal += amp * np.sin(2 * np.pi * freq * times)
    if noise_sd > 0:
        rng = np.random.default_rng(seed)
        signal += rng.normal(0.0, noise_sd, size=times.shape)
    return times, signal


def make_chirp_segments(
    freqs: Sequence[float],
    sfreq: float,
    segment_duration: float,
    amplitude: float = 1.0,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Non-stationary signal: one pure sine per segment, played back to back.

    Its FFT shows every frequency but says nothing about *when* each one
    occurred, which is the motivating example for wavelets.
    """
    if not len(freqs):
        raise ValueError("At least one segment frequency is required")
    seg_times = make_times(sfreq, segment_duration)
    segments = [amplitude * np.sin(2 * np.pi * f * seg_times) for f in freqs]
    signal = np.concatenate(segments)
    times = np.arange(len(signal)) / sfreq
    return times, signal


def make_burst(
    freq: float,
    times: np.ndarray,
    onset: float,
    duration: float,
    amplitude: float = 1.0,
    phase: float = 0.0,
) -> np.ndarray:
    """Hann-tapered oscillation, zero outside [onset, onset + duration)."""
    burst = np.zeros_like(times, dtype=float)
    mask = (times >= onset) & (times < onset + duration)
    n = int(mask.sum())
    if n == 0:
        return burst
    taper = np.hanning(n)
    burst[mask] = amplitude * taper * np.sin(2 * np.pi * freq * (times[mask] - onset) + phase)
    return burst


def _pink_noise(rng: np.random.Generator, n_samples: int, sfreq: float) -> np.ndarray:
    """Unit-variance noise with a 1/f power spectrum."""
    white = rng.standard_normal(n_samples)
    spectrum = np.fft.rfft(white)
    freqs = np.fft.rfftfreq(n_samples, d=1.0 / sfreq)
    scale = np.ones_like(freqs)
    scale[1:] = 1.0 / np.sqrt(freqs[1:])
    scale[0] = 0.0  # drop DC
    pink = np.fft.irfft(spectrum * scale, n=n_samples)
    return pink / pink.std()


def make_synthetic_epochs(
    cfg: WorkshopConfig,
    n_epochs: Optional[int] = None,
    seed: Optional[int] = None,
) -> mne.EpochsArray:
    """
    Build a synthetic two-condition EEG experiment.

    Each epoch is 1/f noise in every channel plus a tapered burst at
    ``cfg.burst_freq`` starting ``cfg.burst_onset`` s after the trigger.
    Trials of the last condition in ``cfg.average_by`` carry the full burst,
    all others a weaker one, so the baseline-corrected difference shows an
    event-related power increase. Conditions alternate in ``average_by`` order.
    """
    n_epochs = cfg.n_epochs if n_epochs is None else n_epochs
    conditions = list(cfg.average_by) or list(cfg.triggers)
    if n_epochs < max(1, len(conditions)):
        raise ValueError(
            f"n_epochs={n_epochs} is too small: need at least one epoch for each "
            f"of the {len(conditions)} conditions {conditions}"
        )
    target = conditions[-1]
    seed = cfg.random_seed if seed is None else seed
    rng = np.random.default_rng(seed)

    times = make_times(cfg.sfreq, cfg.tmax - cfg.tmin, tmin=cfg.tmin)
    n_times = len(times)
    n_ch = len(cfg.channels)

    labels = [conditions[i % len(conditions)] for i in range(n_epochs)]

    data = np.empty((n_epochs, n_ch, n_times))
    for e, label in enumerate(labels):
        scale = 1.0 if label == target else cfg.standard_burst_scale
        for ch in range(n_ch):
            noise = cfg.noise_sd * _pink_noise(rng, n_times, cfg.sfreq)
            burst = make_burst(
                cfg.burst_freq, times, cfg.burst_onset, cfg.burst_duration,
                amplitude=cfg.burst_amplitude * scale,
                phase=rng.uniform(0, 2 * np.pi),
            )
            data[e, ch] = noise + burst

    # MNE expects Volts; synthetic amplitudes are in µV
    data *= 1e-6

    onset_sample = int(round(-cfg.tmin * cfg.sfreq))
    events = np.column_stack([
        onset_sample + np.arange(n_epochs) * n_times,
        np.zeros(n_epochs, dtype=int),
        [cfg.triggers[label] for label in labels],
    ]).astype(int)
    event_id = {label: cfg.triggers[label] for label in conditions}
    metadata = pd.DataFrame({"trial": np.arange(n_epochs), "condition": labels})

    info = mne.create_info(ch_names=list(cfg.channels), sfreq=cfg.sfreq, ch_types="eeg")
    return mne.EpochsArray(
        data, info, events=events, tmin=cfg.tmin, event_id=event_id,
        metadata=metadata, verbose=False,
    )
