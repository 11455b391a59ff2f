# frame_core/matrices.py
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from .structures import FrameModel


CLAMPED_COEFF = 12.0   # fixed-fixed member, sway mode


def lateral_stiffness(ei: float, length: float) -> float:
    """k = 12 EI / L^3"""
    return CLAMPED_COEFF * ei / length ** 3


@dataclass
class MassVector:
    """
    Lumped nodal masses.

    `values` holds inf at anchored entries so the vector can be displayed
    as-is; anchored DOFs are eliminated through the `anchored` mask.
    """
    values: np.ndarray
    anchored: np.ndarray

    def __len__(self) -> int:
        return self.values.shape[0]

    @property
    def free_indices(self) -> np.ndarray:
        return np.flatnonzero(~self.anchored)

    @property
    def free_values(self) -> np.ndarray:
        return self.values[~self.anchored]

    def as_dict(self) -> dict:
        return {
            "values": [None if a else float(v) for v, a in zip(self.values, self.anchored)],
            "anchored": self.anchored.tolist(),
        }


def assemble_mass_vector(model: "FrameModel") -> MassVector:
    anchored = np.array([node.anchored for node in model.nodes], dtype=bool)
    values = np.array([node.mass for node in model.nodes], dtype=float)
    return MassVector(values=values, anchored=anchored)


def assemble_stiffness_matrix(model: "FrameModel") -> np.ndarray:
    """
    Direct stiffness assembly, one lateral DOF per node:
        K[i,i] += k   K[j,j] += k
        K[i,j] -= k   K[j,i] -= k
    Nodes without springs keep an all-zero row and column.
    """
    n = model.n_nodes
    K = np.zeros((n, n), dtype=float)
    for s in model.springs:
        K[s.i, s.i] += s.stiffness
        K[s.j, s.j] += s.stiffness
        K[s.i, s.j] -= s.stiffness
        K[s.j, s.i] -= s.stiffness
    return K


def assemble_matrices(model: "FrameModel") -> tuple[MassVector, np.ndarray]:
    """Full re-assembly of (mass vector, stiffness matrix); nothing is cached."""
    return assemble_mass_vector(model), assemble_stiffness_matrix(model)


def free_partition(mass: MassVector, K: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """Restrict (M, K) to the non-anchored DOFs (fixed-base elimination)."""
    free = mass.free_indices
    return mass.values[free], K[np.ix_(free, free)]
