"""Fourier-transform demonstrations: amplitude spectra, peaks and Welch PSD."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np
import pandas as pd
from scipy.signal import find_peaks, get_window, welch


@dataclass
class FFTResult:
    freqs: np.ndarray       # (n_freqs,) in Hz
    amplitude: np.ndarray   # (n_freqs,) same unit as the signal
    phase: np.ndarray       # (n_freqs,) radians

    @property
    def power(self) -> np.ndarray:
        return self.amplitude ** 2

    @property
    def resolution(self) -> float:
        return float(self.freqs[1] - self.freqs[0]) if len(self.freqs) > 1 else float("nan")

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame({"freq": self.freqs, "amplitude": self.amplitude, "phase": self.phase})


def spectral_resolution(sfreq: float, n_samples: int) -> float:
    """Spacing of FFT frequency bins: longer signals give finer resolution."""
    if n_samples < 1:
        raise ValueError(f"n_samples must be positive, got {n_samples}")
    return sfreq / n_samples


def compute_fft(
    signal: np.ndarray,
    sfreq: float,
    window: Optional[str] = None,
) -> FFTResult:
    """
    One-sided amplitude spectrum of a real signal.

    Amplitudes are scaled so that a sine of amplitude A whose frequency falls
    on a bin shows up with amplitude A. DC and Nyquist bins are not doubled.
    With a *window* (any name scipy.signal.get_window accepts) the amplitude
    is divided by the window's coherent gain.
    """
    signal = np.asarray(signal, dtype=float)
    if signal.ndim != 1:
        raise ValueError(f"signal must be 1-D, got shape {signal.shape}")
    n = signal.shape[0]
    if n < 2:
        raise ValueError("signal needs at least two samples")

    gain = 1.0
    if window is not None:
        taper = get_window(window, n)
        gain = taper.mean()
        signal = signal * taper

    spectrum = np.fft.rfft(signal)
    freqs = np.fft.rfftfreq(n, d=1.0 / sfreq)

    amplitude = np.abs(spectrum) / (n * gain)
    if n % 2 == 0:
        amplitude[1:-1] *= 2
    else:
        amplitude[1:] *= 2

    return FFTResult(freqs=freqs, amplitude=amplitude, phase=np.angle(spectrum))


def dominant_frequencies(
    result: FFTResult,
    n: int = 3,
    min_amplitude: float = 0.0,
) -> pd.DataFrame:
    """
    The *n* strongest spectral peaks, strongest first.

    Peaks are local maxima of the amplitude spectrum (DC excluded).
    """
    peaks, _ = find_peaks(result.amplitude)
    peaks = peaks[result.amplitude[peaks] > min_amplitude]
    order = np.argsort(result.amplitude[peaks])[::-1][:n]
    idx = peaks[order]
    return pd.DataFrame(
        {"freq": result.freqs[idx], "amplitude": result.amplitude[idx]}
    ).reset_index(drop=True)


def welch_psd(
    signal: np.ndarray,
    sfreq: float,
    nperseg: Optional[int] = None,
) -> Tuple[np.ndarray, np.ndarray]:
    """Welch power spectral density; defaults to 1-s segments."""
    signal = np.asarray(signal, dtype=float)
    if nperseg is None:
        nperseg = min(len(signal), int(sfreq))
    return welch(signal, fs=sfreq, nperseg=nperseg)
