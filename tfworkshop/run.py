"""
Time-frequency workshop demonstrations.

Usage
-----
All demos, figures and tables into output/:
  python -m tfworkshop.run --output output/

Also print the external pipeline call shown at the end of the workshop:
  python -m tfworkshop.run --output output/ --show-pipeline-call

Run the external pipeline on real recordings (needs hu-neuro-pipeline):
  python -m tfworkshop.run \\
      --run-pipeline \\
      --raw-files data/*.vhdr \\
      --log-files data/*.txt \\
      --output    output/
"""
from __future__ import annotations

import argparse
import json
import warnings
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Dict, List, Optional

import numpy as np
import pandas as pd

warnings.filterwarnings("ignore", category=FutureWarning)


@dataclass
class DemoResults:
    figures: List[Path] = field(default_factory=list)
    dominant: Optional[pd.DataFrame] = None
    tfrs: Dict[str, object] = field(default_factory=dict)
    band_power: Optional[pd.DataFrame] = None
    summary: dict = field(default_factory=dict)
    pipeline_call: Optional[str] = None


def _save(fig, path: Path, results: DemoResults) -> None:
    from .plotting import save_figure

    try:
        results.figures.append(save_figure(fig, path))
    except Exception as e:
        warnings.warn(f"Could not save figure {path.name}: {e}")


def export_results(results: DemoResults, output_dir: Path) -> None:
    output_dir.mkdir(parents=True, exist_ok=True)

    if results.dominant is not None:
        results.dominant.to_csv(output_dir / "dominant_frequencies.csv", index=False)

    if results.band_power is not None:
        results.band_power.to_csv(output_dir / "band_power.csv", index=False)

    with open(output_dir / "summary.json", "w") as fh:
        json.dump(results.summary, fh, indent=2)

    print(f"Results saved to: {output_dir.resolve()}")


def main(
    output_dir: str = "output",
    seed: Optional[int] = None,
    n_epochs: Optional[int] = None,
    show_pipeline_call: bool = False,
    run_pipeline: bool = False,
    raw_files: Optional[List[str]] = None,
    log_files: Optional[List[str]] = None,
) -> DemoResults:
    from .config import FREQ_BANDS, WorkshopConfig
    from .signals import (
        make_chirp_segments,
        make_sine,
        make_sine_mixture,
        make_synthetic_epochs,
    )
    from .spectral import compute_fft, dominant_frequencies
    from .tfr import compute_tfr, condition_difference, epochs_tfr, morlet_kernel
    from .plotting import (
        plot_band_timecourse,
        plot_signal,
        plot_sine_components,
        plot_spectrum,
        plot_tfr,
        plot_wavelet_family,
    )
    from .pipeline_call import PipelineOptions, format_call, run_group_pipeline

    cfg = WorkshopConfig(output_dir=output_dir)
    if seed is not None:
        cfg = replace(cfg, random_seed=seed)
    if n_epochs is not None:
        cfg = replace(cfg, n_epochs=n_epochs)
    cfg.validate()

    output_path = Path(output_dir)
    results = DemoResults()

    print("=" * 55)
    print("  Time-frequency analysis of EEG: demonstrations")
    print("=" * 55)

    # -----------------------------------------------------------------------
    # 1. A single sine wave
    # -----------------------------------------------------------------------
    print("  [1] Sine wave")
    freq0, amp0 = cfg.sine_freqs[0], cfg.sine_amplitudes[0]
    times, sine = make_sine(freq0, cfg.sfreq, cfg.duration, amplitude=amp0)
    _save(plot_signal(times, sine, f"{freq0:g} Hz sine"), output_path / "01_sine.png", results)

    # -----------------------------------------------------------------------
    # 2. Mixture of sines
    # -----------------------------------------------------------------------
    print("  [2] Mixture of sines")
    components = {
        f"{f:g} Hz": make_sine(f, cfg.sfreq, cfg.duration, amplitude=a)[1]
        for f, a in zip(cfg.sine_freqs, cfg.sine_amplitudes)
    }
    times, mixture = make_sine_mixture(
        cfg.sine_freqs, cfg.sine_amplitudes, cfg.sfreq, cfg.duration,
        noise_sd=cfg.noise_sd, seed=cfg.random_seed,
    )
    _save(plot_sine_components(times, components, mixture), output_path / "02_mixture.png", results)

    # -----------------------------------------------------------------------
    # 3. Fourier transform of the mixture
    # -----------------------------------------------------------------------
    print("  [3] Fourier transform")
    spectrum = compute_fft(mixture, cfg.sfreq)
    results.dominant = dominant_frequencies(spectrum, n=len(cfg.sine_freqs))
    _save(plot_spectrum(spectrum, fmax=50.0, title="FFT of the mixture"), output_path / "03_fft.png", results)
    print(f"      dominant: {', '.join(f'{f:g} Hz' for f in results.dominant['freq'])}")

    # -----------------------------------------------------------------------
    # 4. Non-stationary signal: the FFT loses timing
    # -----------------------------------------------------------------------
    print("  [4] Non-stationary signal")
    seg_times, segments = make_chirp_segments(cfg.sine_freqs, cfg.sfreq, segment_duration=1.0)
    _save(plot_signal(seg_times, segments, "Frequencies one after another"),
          output_path / "04_nonstationary.png", results)
    _save(plot_spectrum(compute_fft(segments, cfg.sfreq), fmax=50.0, title="Same FFT, different signal"),
          output_path / "05_nonstationary_fft.png", results)

    # -----------------------------------------------------------------------
    # 5. Morlet wavelets
    # -----------------------------------------------------------------------
    print("  [5] Morlet wavelets")
    picks = [(cfg.tfr_freqs[0], cfg.tfr_cycles[0]), (cfg.tfr_freqs[-1], cfg.tfr_cycles[-1])]
    kernels = [(*morlet_kernel(cfg.sfreq, f, c), f, c) for f, c in picks]
    _save(plot_wavelet_family(kernels), output_path / "06_wavelets.png", results)

    # -----------------------------------------------------------------------
    # 6. Wavelet transform of the non-stationary signal
    # -----------------------------------------------------------------------
    print("  [6] Time-frequency decomposition")
    seg_freqs = np.arange(2.0, 41.0, 1.0)
    seg_tfr = compute_tfr(segments, cfg.sfreq, seg_freqs, n_cycles=seg_freqs / 2.0, times=seg_times)
    _save(plot_tfr(seg_tfr, title="Morlet power: timing recovered"),
          output_path / "07_tfr_nonstationary.png", results)

    # -----------------------------------------------------------------------
    # 7. Synthetic experiment: per-condition baseline-corrected power
    # -----------------------------------------------------------------------
    print(f"  [7] Synthetic experiment ({cfg.n_epochs} epochs, {len(cfg.channels)} channels)")
    epochs = make_synthetic_epochs(cfg)
    results.tfrs = epochs_tfr(epochs, cfg)
    unit = "%" if cfg.tfr_baseline_mode == "percent" else cfg.tfr_baseline_mode
    for condition, tfr in results.tfrs.items():
        _save(plot_tfr(tfr, title=f"{condition} ({epochs.ch_names[0]})", colorbar_label=f"Power ({unit})"),
              output_path / f"08_tfr_{condition}.png", results)

    if len(cfg.average_by) >= 2:
        a, b = cfg.average_by[-1], cfg.average_by[0]
        diff = condition_difference(results.tfrs[a], results.tfrs[b])
        _save(plot_tfr(diff, title=f"{a} minus {b}", colorbar_label=f"Power ({unit})"),
              output_path / "09_tfr_difference.png", results)

    alpha = FREQ_BANDS["alpha"]
    _save(plot_band_timecourse(results.tfrs, alpha), output_path / "10_alpha_timecourse.png", results)
    band_rows = []
    for condition, tfr in results.tfrs.items():
        course = tfr.band_timecourse(*alpha)
        for ch_idx, ch_name in enumerate(epochs.ch_names):
            band_rows.append(pd.DataFrame({
                "condition": condition, "channel": ch_name,
                "time": tfr.times, "power": course[ch_idx],
            }))
    results.band_power = pd.concat(band_rows, ignore_index=True)

    results.summary = {
        "config": {
            "sfreq": cfg.sfreq,
            "sine_freqs": list(cfg.sine_freqs),
            "tfr_freqs": [float(f) for f in cfg.tfr_freqs],
            "tfr_cycles": [float(c) for c in cfg.tfr_cycles],
            "tfr_baseline": list(cfg.tfr_baseline),
            "tfr_baseline_mode": cfg.tfr_baseline_mode,
            "n_epochs": cfg.n_epochs,
            "random_seed": cfg.random_seed,
        },
        "dominant_frequencies": results.dominant.to_dict(orient="records"),
        "tfr_peaks": {
            condition: dict(zip(("time", "freq", "power"), tfr.crop(tmin=0.0).peak()))
            for condition, tfr in results.tfrs.items()
        },
    }

    # -----------------------------------------------------------------------
    # 8. The external pipeline
    # -----------------------------------------------------------------------
    if show_pipeline_call or run_pipeline:
        options = PipelineOptions.from_config(
            cfg, raw_files=raw_files, log_files=log_files, output_dir=str(output_path / "pipeline"),
        )
        results.pipeline_call = format_call(options)
        results.summary["pipeline_call"] = options.to_kwargs()
        print("\n" + results.pipeline_call + "\n")
        if run_pipeline:
            print("  Running external pipeline...")
            run_group_pipeline(options)

    export_results(results, output_path)
    print(f"  {len(results.figures)} figure(s) written")
    return results


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------

def cli_main() -> None:
    parser = argparse.ArgumentParser(
        description="EEG time-frequency workshop demonstrations",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--output", default="output", help="Output directory")
    parser.add_argument("--seed", type=int, default=None, help="Random seed (default: config value)")
    parser.add_argument("--n-epochs", type=int, default=None, help="Synthetic epochs (default: config value)")
    parser.add_argument("--show-pipeline-call", action="store_true", help="Print the external pipeline call")
    parser.add_argument("--run-pipeline", action="store_true", help="Run the external pipeline")
    parser.add_argument("--raw-files", nargs="*", default=None, help="Raw EEG files for the pipeline")
    parser.add_argument("--log-files", nargs="*", default=None, help="Behavioural log files for the pipeline")

    args = parser.parse_args()
    main(
        output_dir=args.output,
        seed=args.seed,
        n_epochs=args.n_epochs,
        show_pipeline_call=args.show_pipeline_call,
        run_pipeline=args.run_pipeline,
        raw_files=args.raw_files,
        log_files=args.log_files,
    )


if __name__ == "__main__":
    cli_main()
