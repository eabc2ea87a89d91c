"""Morlet wavelet time-frequency decomposition and baseline correction."""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Dict, Optional, Sequence, Tuple, Union

import mne
import numpy as np
import pandas as pd
from mne.baseline import rescale
from mne.time_frequency import morlet, tfr_array_morlet

from .config import BASELINE_MODES, WorkshopConfig

mne.set_log_level("WARNING")

_EPOCH_OUTPUTS = ("power", "complex", "phase")
_AVERAGED_OUTPUTS = ("avg_power", "itc")


@dataclass
class TFRResult:
    times: np.ndarray   # (n_times,)
    freqs: np.ndarray   # (n_freqs,)
    power: np.ndarray   # (..., n_freqs, n_times)

    def __post_init__(self):
        if self.power.shape[-2:] != (len(self.freqs), len(self.times)):
            raise ValueError(
                f"power shape {self.power.shape} does not end in "
                f"(n_freqs={len(self.freqs)}, n_times={len(self.times)})"
            )

    def band_timecourse(self, fmin: float, fmax: float) -> np.ndarray:
        """Mean over frequencies in [fmin, fmax]; shape (..., n_times)."""
        mask = (self.freqs >= fmin) & (self.freqs <= fmax)
        if not mask.any():
            raise ValueError(f"No frequencies between {fmin} and {fmax} Hz")
        return self.power[..., mask, :].mean(axis=-2)

    def crop(self, tmin: Optional[float] = None, tmax: Optional[float] = None) -> "TFRResult":
        mask = np.ones_like(self.times, dtype=bool)
        if tmin is not None:
            mask &= self.times >= tmin
        if tmax is not None:
            mask &= self.times <= tmax
        if not mask.any():
            raise ValueError(f"Crop window ({tmin}, {tmax}) holds no samples")
        return replace(self, times=self.times[mask], power=self.power[..., mask])

    def peak(self) -> Tuple[float, float, float]:
        """(time, freq, value) of the maximum, over all leading dimensions."""
        flat = self.power.reshape(-1, len(self.freqs), len(self.times))
        _, f_idx, t_idx = np.unravel_index(np.nanargmax(flat), flat.shape)
        return float(self.times[t_idx]), float(self.freqs[f_idx]), float(np.nanmax(flat))

    def to_frame(self, channel_names: Optional[Sequence[str]] = None) -> pd.DataFrame:
        """Long-format table; leading dims are flattened into a 'channel' column."""
        flat = self.power.reshape(-1, len(self.freqs), len(self.times))
        if channel_names is None:
            channel_names = [str(i) for i in range(flat.shape[0])]
        n_f, n_t = len(self.freqs), len(self.times)
        return pd.DataFrame({
            "channel": np.repeat(list(channel_names), n_f * n_t),
            "freq": np.tile(np.repeat(self.freqs, n_t), flat.shape[0]),
            "time": np.tile(self.times, flat.shape[0] * n_f),
            "power": flat.ravel(),
        })


# ---------------------------------------------------------------------------
# Wavelets
# ---------------------------------------------------------------------------

def morlet_kernel(sfreq: float, freq: float, n_cycles: float) -> Tuple[np.ndarray, np.ndarray]:
    """Complex Morlet wavelet centred on t=0, as used by tfr_array_morlet."""
    wavelet = morlet(sfreq, [freq], n_cycles=n_cycles, zero_mean=True)[0]
    n = len(wavelet)
    times = (np.arange(n) - n // 2) / sfreq
    return times, wavelet


def wavelet_resolution(freqs: Sequence[float], n_cycles: Union[float, Sequence[float]]) -> pd.DataFrame:
    """
    Time/frequency trade-off of a Morlet family.

    sigma_t = n_cycles / (2 pi f),  sigma_f = f / n_cycles,
    FWHM_t = sigma_t * 2 sqrt(2 ln 2).
    """
    freqs = np.asarray(freqs, dtype=float)
    n_cycles = np.broadcast_to(np.asarray(n_cycles, dtype=float), freqs.shape)
    sigma_t = n_cycles / (2 * np.pi * freqs)
    return pd.DataFrame({
        "freq": freqs,
        "n_cycles": n_cycles,
        "sigma_t": sigma_t,
        "sigma_f": freqs / n_cycles,
        "fwhm_t": sigma_t * 2 * np.sqrt(2 * np.log(2)),
    })


# ---------------------------------------------------------------------------
# Decomposition
# ---------------------------------------------------------------------------

def compute_tfr(
    data: np.ndarray,
    sfreq: float,
    freqs: Sequence[float],
    n_cycles: Union[float, Sequence[float]],
    times: Optional[np.ndarray] = None,
    output: str = "power",
    decim: int = 1,
) -> TFRResult:
    """
    Morlet decomposition of a 1-D, 2-D or 3-D array.

    Parameters
    ----------
    data : (n_times,) | (n_channels, n_times) | (n_epochs, n_channels, n_times)
    freqs, n_cycles : wavelet frequencies and cycles (scalar or one per frequency)
    times : sample times; defaults to arange(n_times) / sfreq
    output : 'power', 'complex', 'phase' keep the input's leading dims;
             'avg_power', 'itc' average over epochs and need 3-D input

    Returns
    -------
    TFRResult with power of shape (<leading dims>, n_freqs, ceil(n_times / decim))
    """
    data = np.asarray(data)
    freqs = np.asarray(freqs, dtype=float)
    if output not in _EPOCH_OUTPUTS + _AVERAGED_OUTPUTS:
        raise ValueError(f"Unknown output {output!r}")
    if data.ndim not in (1, 2, 3):
        raise ValueError(f"data must be 1-D, 2-D or 3-D, got shape {data.shape}")
    if output in _AVERAGED_OUTPUTS and data.ndim != 3:
        raise ValueError(f"output={output!r} averages over epochs and needs 3-D data")
    if np.ndim(n_cycles) and len(n_cycles) != len(freqs):
        raise ValueError(f"Got {len(freqs)} frequencies but {len(n_cycles)} cycle counts")
    if np.any(freqs >= sfreq / 2):
        raise ValueError(f"Frequencies must stay below Nyquist ({sfreq / 2} Hz)")

    lead_shape = data.shape[:-1]
    n_times = data.shape[-1]
    # tfr_array_morlet wants (n_epochs, n_channels, n_times)
    data_3d = data.reshape((1,) * (3 - data.ndim) + data.shape)

    out = tfr_array_morlet(
        data_3d, sfreq=sfreq, freqs=freqs, n_cycles=n_cycles,
        zero_mean=True, output=output, decim=decim, verbose=False,
    )
    if output in _EPOCH_OUTPUTS:
        out = out.reshape(lead_shape + out.shape[-2:])

    if times is None:
        times = np.arange(n_times) / sfreq
    times = np.asarray(times)[::decim]
    return TFRResult(times=times, freqs=freqs, power=out)


def apply_baseline(
    tfr: TFRResult,
    baseline: Tuple[Optional[float], Optional[float]],
    mode: str = "percent",
) -> TFRResult:
    """
    Express power relative to a (pre-stimulus) reference window.

    'percent' gives (P - mean(P_base)) / mean(P_base); see
    mne.baseline.rescale for the other modes.
    """
    if mode not in BASELINE_MODES:
        raise ValueError(f"Unknown baseline mode {mode!r}; choose from {BASELINE_MODES}")
    bmin = tfr.times[0] if baseline[0] is None else baseline[0]
    bmax = tfr.times[-1] if baseline[1] is None else baseline[1]
    n_base = int(((tfr.times >= bmin) & (tfr.times <= bmax)).sum())
    if n_base == 0:
        raise ValueError(
            f"Baseline window {baseline} holds no samples of [{tfr.times[0]:.3f}, {tfr.times[-1]:.3f}]"
        )
    if np.iscomplexobj(tfr.power):
        raise ValueError("Baseline correction needs real-valued power, not complex coefficients")
    corrected = rescale(tfr.power, tfr.times, baseline, mode=mode, copy=True, verbose=False)
    return replace(tfr, power=corrected)


def epochs_tfr(epochs: mne.BaseEpochs, cfg: WorkshopConfig) -> Dict[str, TFRResult]:
    """
    Baseline-corrected average power per condition.

    Power is computed per epoch, averaged within each condition in
    ``cfg.average_by`` and then baseline-corrected, which is the order the
    external pipeline uses.

    Returns
    -------
    dict: condition -> TFRResult with power (n_channels, n_freqs, n_times)
    """
    results: Dict[str, TFRResult] = {}
    for condition in cfg.average_by:
        if condition not in epochs.event_id:
            raise KeyError(f"Condition {condition!r} not in epochs.event_id {sorted(epochs.event_id)}")
        data = epochs[condition].get_data(copy=True)
        tfr = compute_tfr(
            data, epochs.info["sfreq"], cfg.tfr_freqs, np.asarray(cfg.tfr_cycles),
            times=epochs.times, output="avg_power", decim=cfg.tfr_decim,
        )
        results[condition] = apply_baseline(tfr, cfg.tfr_baseline, cfg.tfr_baseline_mode)
    return results


def condition_difference(a: TFRResult, b: TFRResult) -> TFRResult:
    """Element-wise a - b of two results on the same time/frequency grid."""
    if a.power.shape != b.power.shape:
        raise ValueError(f"Shape mismatch: {a.power.shape} vs {b.power.shape}")
    if not (np.allclose(a.times, b.times) and np.allclose(a.freqs, b.freqs)):
        raise ValueError("Time or frequency axes differ")
    return replace(a, power=a.power - b.power)
