"""
Options for the external group-level EEG pipeline (hu-neuro-pipeline).

The pipeline itself lives in the ``pipeline`` package; this module only
assembles the call shown in the workshop and forwards it when installed.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from .config import WorkshopConfig


def _get_pipeline():
    """Import the external pipeline package, raising a clear error if unavailable."""
    try:
        import pipeline
        return pipeline
    except ImportError:
        raise ImportError(
            "hu-neuro-pipeline is required to run the group pipeline. "
            "Install with: pip install hu-neuro-pipeline"
        )


@dataclass
class PipelineOptions:
    raw_files: List[str] = field(default_factory=list)
    log_files: List[str] = field(default_factory=list)
    output_dir: str = "output"
    triggers: Dict[str, int] = field(default_factory=dict)
    average_by: Tuple[str, ...] = ()
    perform_tfr: bool = True
    tfr_freqs: Tuple[float, ...] = ()
    tfr_cycles: Tuple[float, ...] = ()
    tfr_baseline: Tuple[float, float] = (-0.45, -0.05)
    tfr_mode: str = "percent"

    @classmethod
    def from_config(
        cls,
        cfg: WorkshopConfig,
        raw_files: Optional[Sequence[str]] = None,
        log_files: Optional[Sequence[str]] = None,
        output_dir: Optional[str] = None,
    ) -> "PipelineOptions":
        cfg.validate()
        return cls(
            raw_files=[str(f) for f in raw_files or []],
            log_files=[str(f) for f in log_files or []],
            output_dir=output_dir or cfg.output_dir,
            triggers=dict(cfg.triggers),
            average_by=tuple(cfg.average_by),
            tfr_freqs=tuple(float(f) for f in cfg.tfr_freqs),
            tfr_cycles=tuple(float(c) for c in cfg.tfr_cycles),
            tfr_baseline=tuple(cfg.tfr_baseline),
            tfr_mode=cfg.tfr_baseline_mode,
        )

    def to_kwargs(self) -> dict:
        """Keyword arguments for pipeline.group_pipeline (plain lists, JSON-safe)."""
        return {
            "raw_files": list(self.raw_files),
            "log_files": list(self.log_files),
            "output_dir": self.output_dir,
            "triggers": dict(self.triggers),
            "average_by": list(self.average_by),
            "perform_tfr": self.perform_tfr,
            "tfr_freqs": list(self.tfr_freqs),
            "tfr_cycles": list(self.tfr_cycles),
            "tfr_baseline": list(self.tfr_baseline),
            "tfr_mode": self.tfr_mode,
        }


def _format_value(value) -> str:
    if isinstance(value, (list, tuple)) and len(value) > 4 and all(
        isinstance(v, (int, float)) for v in value
    ):
        # Evenly spaced arrays read better as the linspace that made them
        if np.allclose(np.diff(value), value[1] - value[0]):
            return f"np.linspace({value[0]:g}, {value[-1]:g}, {len(value)})"
    return repr(value)


def format_call(options: PipelineOptions) -> str:
    """Source text of the group_pipeline call, one keyword per line."""
    lines = ["from pipeline import group_pipeline", "", "trials, evokeds, config = group_pipeline("]
    for key, value in options.to_kwargs().items():
        lines.append(f"    {key}={_format_value(value)},")
    lines.append(")")
    return "\n".join(lines)


def fetch_example_data(n_participants: int = 1) -> dict:
    """
    Download example recordings with the pipeline's dataset helper.

    Files land in $PIPELINE_DATA_DIR. Returns the dict of file lists
    (raw_files, log_files, ...) the helper provides.
    """
    _get_pipeline()
    from pipeline.datasets import ucap
    return ucap.get_paths(n_participants)


def run_group_pipeline(options: PipelineOptions):
    """Forward *options* to pipeline.group_pipeline and return its result."""
    if not options.raw_files:
        raise ValueError("raw_files is empty; nothing to process")
    if options.log_files and len(options.log_files) != len(options.raw_files):
        raise ValueError(
            f"Got {len(options.raw_files)} raw files but {len(options.log_files)} log files"
        )
    pipeline = _get_pipeline()
    return pipeline.group_pipeline(**options.to_kwargs())
