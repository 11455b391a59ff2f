# frame_core/earthquakes.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .config import MOTION_KINDS, require_positive
from .errors import PreconditionError

logger = logging.getLogger(__name__)


# El Centro 1940, N-S component, reduced to its main turning points (g)
EL_CENTRO_T = np.array([0.00, 0.50, 1.00, 1.40, 1.80, 2.00, 2.14, 2.40, 2.80,
                        3.20, 3.70, 4.20, 4.80, 5.50, 7.00, 9.00, 12.0, 30.0])
EL_CENTRO_G = np.array([0.000, 0.010, 0.040, -0.050, -0.090, 0.150, 0.319, -0.120, -0.250,
                        0.180, -0.150, 0.120, -0.100, 0.060, -0.040, 0.020, 0.000, 0.000])


def get_el_centro_record() -> tuple[np.ndarray, np.ndarray]:
    """Breakpoints (t [s], a [g]) of the reduced El Centro trace; linear in between."""
    return EL_CENTRO_T.copy(), EL_CENTRO_G.copy()


@dataclass
class GroundMotion:
    """
    Ground-acceleration record sampled at a fixed dt, plus playback state.

    The samples are read-only; `index` and `current_acceleration` are moved
    by `advance()` (one call per tick) and cleared by `rewind()`.
    """
    accelerations: np.ndarray
    dt: float
    kind: str = "custom"
    index: int = 0
    current_acceleration: float = 0.0

    def __post_init__(self):
        self.accelerations = np.array(self.accelerations, dtype=float)
        self.accelerations.setflags(write=False)

    @property
    def n_samples(self) -> int:
        return self.accelerations.shape[0]

    @property
    def duration(self) -> float:
        return self.n_samples * self.dt

    @property
    def times(self) -> np.ndarray:
        return self.dt * np.arange(self.n_samples)

    @property
    def time(self) -> float:
        return self.index * self.dt

    @property
    def finished(self) -> bool:
        return self.index >= self.n_samples

    @property
    def peak(self) -> float:
        return float(np.max(np.abs(self.accelerations))) if self.n_samples else 0.0

    def advance(self) -> float:
        """Expose the next sample as the current acceleration (0 after the record ends)."""
        if self.finished:
            self.current_acceleration = 0.0
        else:
            self.current_acceleration = float(self.accelerations[self.index])
            self.index += 1
        return self.current_acceleration

    def rewind(self) -> None:
        self.index = 0
        self.current_acceleration = 0.0

    def as_dict(self) -> dict:
        return {
            "kind": self.kind,
            "dt": self.dt,
            "t": self.times.tolist(),
            "ag": self.accelerations.tolist(),
            "peak": self.peak,
        }


def sinusoidal_motion(t: np.ndarray, peak: float, freq: float, duration: float) -> np.ndarray:
    """a(t) = peak * sin(2 pi f t) * exp(-t / duration)"""
    return peak * np.sin(2.0 * np.pi * freq * t) * np.exp(-t / duration)


def pulse_motion(t: np.ndarray, peak: float, duration: float) -> np.ndarray:
    """Triangle: 0 at t=0, peak at duration/2, back to 0 at t=duration."""
    half = duration / 2.0
    a = np.where(t <= half, peak * t / half, peak * (duration - t) / half)
    return np.clip(a, min(0.0, peak), max(0.0, peak))


def filtered_random_motion(t: np.ndarray, peak: float, duration: float,
                           rng: np.random.Generator) -> np.ndarray:
    """
    Uniform noise in [-peak, peak] under an exp(-t / duration) envelope.
    No frequency filtering is applied.
    """
    return rng.uniform(-peak, peak, size=t.shape[0]) * np.exp(-t / duration)


def el_centro_motion(t: np.ndarray, peak: float) -> np.ndarray:
    """El Centro record interpolated at t, scaled so max |a| equals peak."""
    t_data, a_data_g = get_el_centro_record()
    ag = np.interp(t, t_data, a_data_g, left=0.0, right=0.0)
    return ag * (peak / np.max(np.abs(a_data_g)))


def build_ground_motion(duration: float,
                        dt: float,
                        kind: str,
                        peak_accel: float,
                        freq: float = 1.0,
                        rng: Optional[np.random.Generator] = None,
                        seed: Optional[int] = None) -> GroundMotion:
    """
    Synthesize floor(duration / dt) samples at t_i = i * dt.

    `filtered_random` draws from `rng` (or a generator seeded with `seed`);
    with neither given it is non-deterministic.
    """
    require_positive("duration", duration)
    require_positive("dt", dt)
    if kind not in MOTION_KINDS:
        raise PreconditionError(f"Unknown motion kind {kind!r}; expected one of {MOTION_KINDS}")

    n_samples = int(np.floor(duration / dt))
    t = dt * np.arange(n_samples)

    if kind == "sinusoidal":
        require_positive("freq", freq)
        ag = sinusoidal_motion(t, peak_accel, freq, duration)
    elif kind == "pulse":
        ag = pulse_motion(t, peak_accel, duration)
    elif kind == "filtered_random":
        if rng is None:
            rng = np.random.default_rng(seed)
        ag = filtered_random_motion(t, peak_accel, duration, rng)
    else:
        ag = el_centro_motion(t, peak_accel)

    logger.info("Ground motion %s: %d samples, dt=%.4g s, peak=%.4g", kind, n_samples, dt, peak_accel)
    return GroundMotion(accelerations=ag, dt=dt, kind=kind)
