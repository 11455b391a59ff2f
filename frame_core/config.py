# frame_core/config.py
"""
Input parameters, defaults and solver constants.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, asdict
from typing import Optional

from .errors import PreconditionError


# ---- solver constants ----
POWER_ITERATIONS = 40      # fixed iteration count of the modal estimate
NEWMARK_GAMMA = 0.5
NEWMARK_BETA = 0.25        # constant-average-acceleration variant
STIFFNESS_FLOOR = 1e-9     # epsilon under sqrt(k/m) in the damping term
MIN_NODE_MASS = 1e-12      # free nodes lighter than this are rejected

MOTION_KINDS = ("sinusoidal", "pulse", "filtered_random", "el_centro")


def require_positive(name: str, value: float) -> None:
    if not math.isfinite(value) or value <= 0.0:
        raise PreconditionError(f"{name} must be a finite positive number, got {value!r}")


def require_count(name: str, value: int) -> None:
    try:
        valid = int(value) == value and value >= 1
    except (TypeError, ValueError, OverflowError):
        valid = False
    if not valid:
        raise PreconditionError(f"{name} must be an integer >= 1, got {value!r}")


@dataclass
class FrameParameters:
    """
    Geometry and material of a regular moment frame.

    story_mass is the lumped mass of one story level; column_ei / beam_ei are
    flexural rigidities (E*I) of a full column / beam.
    """
    stories: int = 3
    bays: int = 2
    story_height: float = 3.0
    bay_width: float = 6.0
    segments: int = 1
    story_mass: float = 100.0
    column_ei: float = 5.0e4
    beam_ei: float = 5.0e4

    def validate(self) -> "FrameParameters":
        require_count("stories", self.stories)
        require_count("bays", self.bays)
        require_count("segments", self.segments)
        require_positive("story_height", self.story_height)
        require_positive("bay_width", self.bay_width)
        require_positive("story_mass", self.story_mass)
        require_positive("column_ei", self.column_ei)
        require_positive("beam_ei", self.beam_ei)
        return self

    def as_dict(self) -> dict:
        return asdict(self)


@dataclass
class SimulationSettings:
    """Ground-motion synthesis and damping settings of one run."""
    duration: float = 10.0
    dt: float = 1.0 / 60.0
    kind: str = "sinusoidal"
    peak_accel: float = 1.0
    freq: float = 1.0          # Hz, sinusoidal only
    damping_ratio: float = 0.05
    seed: Optional[int] = None

    def validate(self) -> "SimulationSettings":
        require_positive("duration", self.duration)
        require_positive("dt", self.dt)
        if self.dt > self.duration:
            raise PreconditionError(f"dt ({self.dt}) is longer than duration ({self.duration})")
        if self.kind not in MOTION_KINDS:
            raise PreconditionError(f"Unknown motion kind {self.kind!r}; expected one of {MOTION_KINDS}")
        if not math.isfinite(self.peak_accel) or self.peak_accel < 0.0:
            raise PreconditionError(f"peak_accel must be finite and >= 0, got {self.peak_accel!r}")
        if self.kind == "sinusoidal":
            require_positive("freq", self.freq)
        if not math.isfinite(self.damping_ratio) or self.damping_ratio < 0.0:
            raise PreconditionError(f"damping_ratio must be finite and >= 0, got {self.damping_ratio!r}")
        if self.seed is not None and (isinstance(self.seed, float) or self.seed < 0):
            raise PreconditionError(f"seed must be a non-negative integer, got {self.seed!r}")
        return self

    def as_dict(self) -> dict:
        return asdict(self)
