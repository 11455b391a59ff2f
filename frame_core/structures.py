# frame_core/structures.py
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Optional, Union

import numpy as np

from .config import FrameParameters
from .matrices import lateral_stiffness

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Anchored:
    """Fixed-base node: its motion is prescribed by the ground, not by forces."""


@dataclass(frozen=True)
class Free:
    """Node with one horizontal DOF carrying a lumped mass (may be zero)."""
    mass: float


NodeKind = Union[Anchored, Free]
ANCHORED = Anchored()


@dataclass
class Node:
    """Structural joint with a single horizontal DOF."""
    x0: float
    y0: float
    kind: NodeKind
    displacement: float = 0.0
    velocity: float = 0.0
    acceleration: float = 0.0

    @property
    def anchored(self) -> bool:
        return isinstance(self.kind, Anchored)

    @property
    def mass(self) -> float:
        # inf is for reporting only; solvers branch on `anchored`
        return math.inf if self.anchored else self.kind.mass

    def zero_state(self) -> None:
        self.displacement = 0.0
        self.velocity = 0.0
        self.acceleration = 0.0


@dataclass
class Spring:
    """
    Lateral spring between nodes i and j.

    `force` is derived state: k * (d_i - d_j), recomputed every step. Node i
    receives +force as restoring contribution, node j receives -force.
    """
    i: int
    j: int
    stiffness: float
    role: str = "column"       # "column" | "beam"
    force: float = 0.0


@dataclass
class FrameModel:
    """
    Lumped-mass lateral-spring model of a moment frame.

    Nodes are stored densely, row-major:
        index = row * cols + col
    rows are discretized story levels (row 0 = base), cols are discretized
    bay lines. Every component addresses nodes through `grid_index`.
    """
    nodes: list[Node]
    springs: list[Spring]
    rows: int
    cols: int
    height: float = 0.0
    width: float = 0.0
    parameters: Optional[FrameParameters] = field(default=None, repr=False)

    def __post_init__(self):
        if len(self.nodes) != self.rows * self.cols:
            raise ValueError(
                f"Grid {self.rows}x{self.cols} needs {self.rows * self.cols} nodes, got {len(self.nodes)}")

    @property
    def row_stride(self) -> int:
        return self.cols

    @property
    def n_nodes(self) -> int:
        return len(self.nodes)

    def grid_index(self, row: int, col: int) -> int:
        if not (0 <= row < self.rows and 0 <= col < self.cols):
            raise IndexError(f"Grid position ({row}, {col}) outside {self.rows}x{self.cols}")
        return row * self.row_stride + col

    def node_at(self, row: int, col: int) -> Node:
        return self.nodes[self.grid_index(row, col)]

    @property
    def anchored_indices(self) -> list[int]:
        return [n for n, node in enumerate(self.nodes) if node.anchored]

    @property
    def free_indices(self) -> list[int]:
        return [n for n, node in enumerate(self.nodes) if not node.anchored]

    @property
    def top_row_indices(self) -> list[int]:
        return [self.grid_index(self.rows - 1, c) for c in range(self.cols)]

    def displacements(self) -> np.ndarray:
        return np.array([node.displacement for node in self.nodes], dtype=float)

    def velocities(self) -> np.ndarray:
        return np.array([node.velocity for node in self.nodes], dtype=float)

    def accelerations(self) -> np.ndarray:
        return np.array([node.acceleration for node in self.nodes], dtype=float)

    def spring_forces(self) -> np.ndarray:
        return np.array([s.force for s in self.springs], dtype=float)

    def as_dict(self) -> dict:
        return {
            "rows": self.rows,
            "cols": self.cols,
            "height": self.height,
            "width": self.width,
            "nodes": [
                {"x0": n.x0, "y0": n.y0, "anchored": n.anchored,
                 "mass": None if n.anchored else n.kind.mass}
                for n in self.nodes
            ],
            "springs": [
                {"i": s.i, "j": s.j, "stiffness": s.stiffness, "role": s.role}
                for s in self.springs
            ],
        }

    @classmethod
    def from_frame_data(cls,
                        stories: int,
                        bays: int,
                        story_height: float,
                        bay_width: float,
                        segments: int,
                        story_mass: float,
                        column_ei: float,
                        beam_ei: float) -> "FrameModel":
        """
        Discretize a regular frame into (S*N + 1) x (B*N + 1) nodes.

        Spring stiffness uses the subdivided segment length:
            k_col  = 12 EI_c / (H/N)^3
            k_beam = 12 EI_b / (L/N)^3
        The story mass is split evenly over the B + 1 frame-line nodes of the
        story's top row; intermediate subdivision nodes carry zero mass.
        Inputs are assumed valid (see FrameParameters.validate).
        """
        n = int(segments)
        rows = int(stories) * n + 1
        cols = int(bays) * n + 1
        dy = story_height / n
        dx = bay_width / n

        k_col = lateral_stiffness(column_ei, dy)
        k_beam = lateral_stiffness(beam_ei, dx)
        node_mass = story_mass / (int(bays) + 1)

        nodes: list[Node] = []
        for r in range(rows):
            for c in range(cols):
                if r == 0:
                    kind: NodeKind = ANCHORED
                elif r % n == 0 and c % n == 0:
                    kind = Free(node_mass)
                else:
                    kind = Free(0.0)
                nodes.append(Node(x0=c * dx, y0=r * dy, kind=kind))

        model = cls(nodes=nodes, springs=[], rows=rows, cols=cols,
                    height=stories * story_height, width=bays * bay_width,
                    parameters=FrameParameters(stories, bays, story_height, bay_width,
                                               segments, story_mass, column_ei, beam_ei))

        # columns: vertically adjacent nodes in every grid column
        for c in range(cols):
            for r in range(rows - 1):
                model.springs.append(
                    Spring(model.grid_index(r, c), model.grid_index(r + 1, c), k_col, "column"))

        # beams: horizontally adjacent nodes in every grid row
        for r in range(rows):
            for c in range(cols - 1):
                model.springs.append(
                    Spring(model.grid_index(r, c), model.grid_index(r, c + 1), k_beam, "beam"))

        logger.info("Built frame model: %d nodes, %d springs (k_col=%.4g, k_beam=%.4g)",
                    len(model.nodes), len(model.springs), k_col, k_beam)
        return model


def build_model(stories: int,
                bays: int,
                story_height: float,
                bay_width: float,
                segments: int,
                story_mass: float,
                column_ei: float,
                beam_ei: float) -> FrameModel:
    return FrameModel.from_frame_data(stories, bays, story_height, bay_width,
                                      segments, story_mass, column_ei, beam_ei)


def build_model_from_parameters(params: FrameParameters) -> FrameModel:
    params.validate()
    return build_model(params.stories, params.bays, params.story_height, params.bay_width,
                       params.segments, params.story_mass, params.column_ei, params.beam_ei)
