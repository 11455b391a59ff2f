# frame_core/modal.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np
from scipy.linalg import eigh

from .config import MIN_NODE_MASS, POWER_ITERATIONS
from .errors import NumericalDegeneracyError, PreconditionError
from .matrices import MassVector, assemble_matrices, free_partition
from .structures import FrameModel

logger = logging.getLogger(__name__)


def _free_system(mass: MassVector, K: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    if K.shape != (len(mass), len(mass)):
        raise PreconditionError(
            f"Stiffness matrix shape {K.shape} does not match {len(mass)} mass entries")
    m, K_ff = free_partition(mass, K)
    if m.size == 0:
        raise PreconditionError("Modal estimate needs at least one free (non-anchored) node")
    light = mass.free_indices[m < MIN_NODE_MASS]
    if light.size:
        raise PreconditionError(
            f"Free nodes {light.tolist()} carry zero mass; "
            f"mass is lumped only at frame-line intersections")
    return m, K_ff


def power_iteration(m: np.ndarray,
                    K_ff: np.ndarray,
                    iterations: int = POWER_ITERATIONS) -> tuple[float, np.ndarray]:
    """
    Power iteration on the mass-normalized operator  v -> (K v) / m.

    Each pass:
        w = (K v) / m          (entrywise division)
        lambda = v . w         (v has unit length)
        v = w / |w|
    Runs a fixed number of passes and converges to the dominant
    stiffness-to-mass ratio of the free substructure.
    """
    n = m.shape[0]
    v = np.ones(n) / np.sqrt(n)
    eigenvalue = np.nan

    for it in range(iterations):
        w = (K_ff @ v) / m
        eigenvalue = float(v @ w)
        norm = float(np.linalg.norm(w))
        if not np.isfinite(norm) or norm == 0.0:
            raise NumericalDegeneracyError(
                f"Eigen-iteration stalled at pass {it + 1} (|Kv/m| = {norm}); "
                f"check that the springs restrain every free node")
        v = w / norm

    if not np.isfinite(eigenvalue) or eigenvalue <= 0.0:
        raise NumericalDegeneracyError(f"Eigenvalue estimate is not positive: {eigenvalue}")
    return eigenvalue, v


def estimate_natural_frequency(mass: MassVector,
                               K: np.ndarray,
                               iterations: int = POWER_ITERATIONS) -> tuple[float, float]:
    """
    (frequency [Hz], period [s]) from the power-iteration eigenvalue:
        f = sqrt(lambda) / (2 pi),   T = 1 / f
    Anchored DOFs are eliminated before iterating.
    """
    m, K_ff = _free_system(mass, K)
    eigenvalue, _ = power_iteration(m, K_ff, iterations)
    frequency = float(np.sqrt(eigenvalue) / (2.0 * np.pi))
    period = 1.0 / frequency
    logger.info("Modal estimate: lambda=%.6g, f=%.4f Hz, T=%.4f s (%d free DOFs)",
                eigenvalue, frequency, period, m.size)
    return frequency, period


@dataclass
class ModalResult:
    frequencies: np.ndarray     # f_n [Hz], ascending
    periods: np.ndarray         # T_n [s]
    modes: np.ndarray           # PHI (columns = modes), free DOFs only
    free_indices: np.ndarray
    estimate_frequency: float   # power-iteration estimate [Hz]
    estimate_period: float

    def as_dict(self) -> dict:
        return {
            "frequencies": self.frequencies.tolist(),
            "periods": self.periods.tolist(),
            "modes": self.modes.tolist(),
            "free_indices": self.free_indices.tolist(),
            "estimate_frequency": self.estimate_frequency,
            "estimate_period": self.estimate_period,
        }


class ModalAnalyzer:
    """
    Exact generalized eigen-solve  K phi = lambda M phi  of the free
    substructure, reported next to the power-iteration estimate.
    """

    def __init__(self, model: FrameModel, n_modes: Optional[int] = None):
        self.model = model
        self.n_modes = n_modes

    def run(self) -> ModalResult:
        mass, K = assemble_matrices(self.model)
        m, K_ff = _free_system(mass, K)

        eigvals, eigvecs = eigh(K_ff, np.diag(m))
        if eigvals[0] <= 1e-12 * max(eigvals[-1], 1.0):
            raise NumericalDegeneracyError(
                f"Free substructure is not restrained (lowest eigenvalue {eigvals[0]:.3e})")

        if self.n_modes is not None:
            eigvals = eigvals[:self.n_modes]
            eigvecs = eigvecs[:, :self.n_modes]

        f_n = np.sqrt(eigvals) / (2.0 * np.pi)
        T_n = 1.0 / f_n
        f_est, T_est = estimate_natural_frequency(mass, K)

        return ModalResult(frequencies=f_n, periods=T_n, modes=eigvecs,
                           free_indices=mass.free_indices,
                           estimate_frequency=f_est, estimate_period=T_est)
