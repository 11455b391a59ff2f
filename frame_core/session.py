# frame_core/session.py
from __future__ import annotations

import logging
from typing import Optional

import numpy as np

from .config import FrameParameters, SimulationSettings
from .earthquakes import GroundMotion, build_ground_motion
from .matrices import assemble_matrices
from .modal import estimate_natural_frequency
from .response import (StepSnapshot, TimeHistoryResult, TimeIntegrator, check_free_masses,
                       reset_state, simulate_step)
from .structures import FrameModel, build_model_from_parameters

logger = logging.getLogger(__name__)


class SimulationSession:
    """
    Caller-owned simulation state: model, ground motion, damping, running flag.

    One `tick()` = advance the record by one sample, then one integrator step.
    Single-threaded; a caller that renders from another thread must
    serialize access to `model` and `ground` per tick.
    """

    def __init__(self,
                 frame: Optional[FrameParameters] = None,
                 settings: Optional[SimulationSettings] = None,
                 rng: Optional[np.random.Generator] = None):
        self.frame = frame or FrameParameters()
        self.settings = settings or SimulationSettings()
        self.rng = rng
        self.running = False
        self.step_count = 0
        self.model: FrameModel = None
        self.ground: GroundMotion = None
        self.rebuild()

    @property
    def damping_ratio(self) -> float:
        return self.settings.damping_ratio

    @property
    def time(self) -> float:
        return self.step_count * self.ground.dt

    def rebuild(self,
                frame: Optional[FrameParameters] = None,
                settings: Optional[SimulationSettings] = None) -> None:
        """Replace model and ground motion wholesale; state starts from rest."""
        frame = (frame or self.frame).validate()
        settings = (settings or self.settings).validate()
        self.frame, self.settings = frame, settings
        self.model = build_model_from_parameters(self.frame)
        s = self.settings
        self.ground = build_ground_motion(s.duration, s.dt, s.kind, s.peak_accel, s.freq,
                                          rng=self.rng, seed=s.seed)
        self.step_count = 0
        self.running = False
        logger.info("Session rebuilt: %d stories x %d bays, %s motion",
                    self.frame.stories, self.frame.bays, s.kind)

    def modal_properties(self) -> tuple[float, float]:
        mass, K = assemble_matrices(self.model)
        return estimate_natural_frequency(mass, K)

    def start(self) -> None:
        check_free_masses(self.model)
        self.running = True

    def pause(self) -> None:
        self.running = False

    def resume(self) -> None:
        self.start()

    def reset(self) -> None:
        reset_state(self.model, self.ground)
        self.step_count = 0
        self.running = False

    def tick(self) -> StepSnapshot:
        """One step; the snapshot is stamped with the time of the sample it consumed."""
        t = self.time
        self.ground.advance()
        simulate_step(self.model, self.ground, self.damping_ratio)
        self.step_count += 1
        return StepSnapshot.capture(self.model, self.ground, t)

    def run(self, n_ticks: Optional[int] = None) -> list[StepSnapshot]:
        """Tick until the record ends (or n_ticks), stopping early on pause()."""
        if n_ticks is None:
            n_ticks = self.ground.n_samples - self.ground.index
        self.start()
        snapshots = []
        for _ in range(n_ticks):
            if not self.running:
                break
            snapshots.append(self.tick())
        self.running = False
        return snapshots

    def time_history(self, n_steps: Optional[int] = None) -> TimeHistoryResult:
        """Batch run of the rest of the record, kept as full (nodes, steps) arrays."""
        check_free_masses(self.model)
        result = TimeIntegrator(self.model, self.ground, self.damping_ratio).run(
            n_steps, t0=self.time)
        self.step_count += result.t.shape[0]
        return result
