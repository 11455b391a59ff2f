# frame_core/response.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .config import MIN_NODE_MASS, NEWMARK_BETA, NEWMARK_GAMMA, STIFFNESS_FLOOR
from .earthquakes import GroundMotion
from .errors import PreconditionError
from .structures import FrameModel

logger = logging.getLogger(__name__)


def check_free_masses(model: FrameModel) -> None:
    light = [n for n, node in enumerate(model.nodes)
             if not node.anchored and node.kind.mass < MIN_NODE_MASS]
    if light:
        raise PreconditionError(
            f"Free nodes {light} have zero mass and cannot be integrated; "
            f"mass is lumped only at frame-line intersections (use segments=1)")


def update_spring_forces(model: FrameModel) -> tuple[np.ndarray, np.ndarray]:
    """
    Recompute spring forces  F = k (d_i - d_j)  and gather per node:
        restoring[n] = sum(+F if n is end i, -F if n is end j)
        k_local[n]   = sum of attached stiffness
    """
    n = model.n_nodes
    restoring = np.zeros(n)
    k_local = np.zeros(n)
    for s in model.springs:
        s.force = s.stiffness * (model.nodes[s.i].displacement - model.nodes[s.j].displacement)
        restoring[s.i] += s.force
        restoring[s.j] -= s.force
        k_local[s.i] += s.stiffness
        k_local[s.j] += s.stiffness
    return restoring, k_local


def simulate_step(model: FrameModel, ground: GroundMotion, damping_ratio: float) -> None:
    """
    Advance every node by one step of ground.dt under ground.current_acceleration.

    Anchored nodes follow the ground kinematically (forward Euler):
        a = ag,  v += a dt,  d += v dt
    Free nodes use local viscous damping and a simplified Newmark update
    (gamma = 0.5, beta = 0.25) driven by the acceleration of this step:
        c = 2 zeta sqrt(max(k_local, eps) / max(m, 1))
        a = (-R - c v - m ag) / m
        v += (1 - gamma) a dt
        d += v dt + beta a dt^2
    """
    check_free_masses(model)
    dt = ground.dt
    ag = ground.current_acceleration
    restoring, k_local = update_spring_forces(model)

    for n, node in enumerate(model.nodes):
        if node.anchored:
            node.acceleration = ag
            node.velocity += node.acceleration * dt
            node.displacement += node.velocity * dt
            continue

        m = node.kind.mass
        c = 2.0 * damping_ratio * np.sqrt(max(k_local[n], STIFFNESS_FLOOR) / max(m, 1.0))
        f_eff = -restoring[n] - c * node.velocity
        node.acceleration = (f_eff - m * ag) / m
        node.velocity += (1.0 - NEWMARK_GAMMA) * node.acceleration * dt
        node.displacement += node.velocity * dt + NEWMARK_BETA * node.acceleration * dt ** 2


def reset_state(model: FrameModel, ground: Optional[GroundMotion] = None) -> None:
    """Zero displacement/velocity/acceleration of every node (and rewind the record)."""
    for node in model.nodes:
        node.zero_state()
    for s in model.springs:
        s.force = 0.0
    if ground is not None:
        ground.rewind()
    logger.debug("State reset (%d nodes)", model.n_nodes)


@dataclass
class StepSnapshot:
    t: float
    ag: float
    x: np.ndarray
    v: np.ndarray
    a: np.ndarray
    spring_forces: np.ndarray
    roof_displacement: float    # mean displacement of the top row

    @classmethod
    def capture(cls, model: FrameModel, ground: GroundMotion, t: float) -> "StepSnapshot":
        x = model.displacements()
        return cls(t=t,
                   ag=ground.current_acceleration,
                   x=x,
                   v=model.velocities(),
                   a=model.accelerations(),
                   spring_forces=model.spring_forces(),
                   roof_displacement=float(np.mean(x[model.top_row_indices])))

    def as_dict(self) -> dict:
        return {
            "t": self.t,
            "ag": self.ag,
            "x": self.x.tolist(),
            "v": self.v.tolist(),
            "a": self.a.tolist(),
            "spring_forces": self.spring_forces.tolist(),
            "roof_displacement": self.roof_displacement,
        }


@dataclass
class TimeHistoryResult:
    t: np.ndarray
    ag: np.ndarray
    x: np.ndarray       # (nodes, steps)
    v: np.ndarray
    a: np.ndarray

    def as_dict(self) -> dict:
        return {
            "t": self.t.tolist(),
            "ag": self.ag.tolist(),
            "x": self.x.tolist(),
            "v": self.v.tolist(),
            "a": self.a.tolist(),
        }


class TimeIntegrator:
    """Runs simulate_step over a ground-motion record and keeps the history."""

    def __init__(self, model: FrameModel, ground: GroundMotion, damping_ratio: float = 0.05):
        self.model = model
        self.ground = ground
        self.damping_ratio = damping_ratio

    def run(self, n_steps: Optional[int] = None, t0: Optional[float] = None) -> TimeHistoryResult:
        """t[k] is the time of the sample consumed by step k (t0 defaults to the playback time)."""
        if t0 is None:
            t0 = self.ground.time
        if n_steps is None:
            n_steps = self.ground.n_samples - self.ground.index

        n = self.model.n_nodes
        t = np.zeros(n_steps)
        ag = np.zeros(n_steps)
        x = np.zeros((n, n_steps))
        v = np.zeros((n, n_steps))
        a = np.zeros((n, n_steps))

        for k in range(n_steps):
            t[k] = t0 + k * self.ground.dt
            ag[k] = self.ground.advance()
            simulate_step(self.model, self.ground, self.damping_ratio)
            x[:, k] = self.model.displacements()
            v[:, k] = self.model.velocities()
            a[:, k] = self.model.accelerations()

        logger.info("Time history: %d steps, max |x| = %.4g", n_steps, np.max(np.abs(x)) if n_steps else 0.0)
        return TimeHistoryResult(t=t, ag=ag, x=x, v=v, a=a)
