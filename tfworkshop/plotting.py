"""Figures for each demonstration. Functions return Figures and never show them."""
from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional, Sequence, Tuple

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np
import seaborn as sns

from .spectral import FFTResult
from .tfr import TFRResult

sns.set_theme(context="talk", style="whitegrid")


def plot_signal(times: np.ndarray, signal: np.ndarray, title: str = "") -> plt.Figure:
    fig, ax = plt.subplots(figsize=(9, 3))
    ax.plot(times, signal, lw=1.2)
    ax.set_xlabel("Time (s)")
    ax.set_ylabel("Amplitude")
    if title:
        ax.set_title(title)
    fig.tight_layout()
    return fig


def plot_sine_components(
    times: np.ndarray,
    components: Dict[str, np.ndarray],
    mixture: np.ndarray,
) -> plt.Figure:
    """One row per component, the sum at the bottom."""
    n_rows = len(components) + 1
    fig, axes = plt.subplots(n_rows, 1, figsize=(9, 1.6 * n_rows), sharex=True, sharey=True)
    palette = sns.color_palette(n_colors=n_rows)
    for ax, (label, comp), color in zip(axes, components.items(), palette):
        ax.plot(times, comp, color=color, lw=1.2)
        ax.set_ylabel(label, rotation=0, ha="right", va="center")
    axes[-1].plot(times, mixture, color="k", lw=1.0)
    axes[-1].set_ylabel("sum", rotation=0, ha="right", va="center")
    axes[-1].set_xlabel("Time (s)")
    fig.tight_layout()
    return fig


def plot_spectrum(result: FFTResult, fmax: Optional[float] = None, title: str = "") -> plt.Figure:
    fig, ax = plt.subplots(figsize=(9, 3))
    mask = np.ones_like(result.freqs, dtype=bool) if fmax is None else result.freqs <= fmax
    ax.stem(result.freqs[mask], result.amplitude[mask], markerfmt=" ", basefmt=" ")
    ax.set_xlabel("Frequency (Hz)")
    ax.set_ylabel("Amplitude")
    if title:
        ax.set_title(title)
    fig.tight_layout()
    return fig


def plot_wavelet(times: np.ndarray, wavelet: np.ndarray, freq: float, n_cycles: float, ax=None) -> plt.Figure:
    """Real part, imaginary part and Gaussian envelope of a complex Morlet."""
    if ax is None:
        fig, ax = plt.subplots(figsize=(6, 3))
    else:
        fig = ax.figure
    ax.plot(times, wavelet.real, label="real")
    ax.plot(times, wavelet.imag, label="imag", alpha=0.7)
    ax.plot(times, np.abs(wavelet), color="k", ls="--", lw=1, label="|w|")
    ax.set_title(f"{freq:g} Hz, {n_cycles:g} cycles")
    ax.set_xlabel("Time (s)")
    ax.legend(loc="upper right", fontsize="x-small")
    return fig


def plot_wavelet_family(kernels: Sequence[Tuple[np.ndarray, np.ndarray, float, float]]) -> plt.Figure:
    """Side-by-side kernels; each item is (times, wavelet, freq, n_cycles)."""
    fig, axes = plt.subplots(1, len(kernels), figsize=(5 * len(kernels), 3), sharey=True)
    axes = np.atleast_1d(axes)
    for ax, (times, wavelet, freq, n_cycles) in zip(axes, kernels):
        plot_wavelet(times, wavelet, freq, n_cycles, ax=ax)
    fig.tight_layout()
    return fig


def plot_tfr(
    tfr: TFRResult,
    channel: int = 0,
    title: str = "",
    vlim: Optional[Tuple[float, float]] = None,
    cmap: str = "RdBu_r",
    colorbar_label: str = "Power",
) -> plt.Figure:
    """Time-frequency heatmap of one channel (multi-channel results are indexed)."""
    power = tfr.power
    if power.ndim > 2:
        power = power.reshape(-1, len(tfr.freqs), len(tfr.times))[channel]
    if vlim is None:
        lim = np.nanmax(np.abs(power))
        vlim = (-lim, lim) if np.nanmin(power) < 0 else (0.0, lim)
    fig, ax = plt.subplots(figsize=(8, 4))
    mesh = ax.pcolormesh(tfr.times, tfr.freqs, power, shading="auto", cmap=cmap, vmin=vlim[0], vmax=vlim[1])
    fig.colorbar(mesh, ax=ax, label=colorbar_label)
    ax.set_xlabel("Time (s)")
    ax.set_ylabel("Frequency (Hz)")
    if title:
        ax.set_title(title)
    fig.tight_layout()
    return fig


def plot_band_timecourse(
    tfrs: Dict[str, TFRResult],
    band: Tuple[float, float],
    channel: int = 0,
) -> plt.Figure:
    """Band-averaged power over time, one line per condition."""
    fig, ax = plt.subplots(figsize=(8, 3))
    for label, tfr in tfrs.items():
        course = tfr.band_timecourse(*band)
        course = course.reshape(-1, len(tfr.times))[channel]
        ax.plot(tfr.times, course, label=label)
    ax.axvline(0.0, color="k", lw=0.8)
    ax.set_xlabel("Time (s)")
    ax.set_ylabel("Power")
    ax.set_title(f"{band[0]:g}-{band[1]:g} Hz")
    ax.legend()
    fig.tight_layout()
    return fig


def save_figure(fig: plt.Figure, path, dpi: int = 150) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    try:
        fig.savefig(path, dpi=dpi)
    finally:
        plt.close(fig)
    return path
