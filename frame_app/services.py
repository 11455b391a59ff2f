from __future__ import annotations

import asyncio
import logging
import math
from dataclasses import fields

from frame_core.config import FrameParameters, SimulationSettings
from frame_core.earthquakes import build_ground_motion
from frame_core.errors import PreconditionError
from frame_core.matrices import assemble_matrices
from frame_core.modal import ModalAnalyzer
from frame_core.session import SimulationSession
from frame_core.structures import FrameModel, build_model_from_parameters

logger = logging.getLogger(__name__)


def _as_number(raw) -> float:
    """float(raw), keeping integral values as int so count checks see the real input."""
    value = float(raw)
    return int(value) if value.is_integer() else value


def _from_payload(cls, payload: dict):
    """Build a config dataclass from a JSON payload, casting to the defaults' types."""
    if not isinstance(payload, dict):
        raise PreconditionError(f"{cls.__name__} payload must be a JSON object, got {type(payload).__name__}")
    defaults = cls()
    values = {}
    for f in fields(cls):
        if f.name not in payload or payload[f.name] is None:
            continue
        default = getattr(defaults, f.name)
        raw = payload[f.name]
        try:
            if default is None or isinstance(default, int):   # seed is Optional[int]
                # fractional counts go through to validate() and are rejected there
                values[f.name] = _as_number(raw)
            elif isinstance(default, float):
                values[f.name] = float(raw)
            else:
                values[f.name] = str(raw)
        except (TypeError, ValueError, OverflowError) as e:
            raise PreconditionError(f"Invalid value for {f.name!r}: {raw!r}") from e
    return cls(**values).validate()


class FrameFactory:
    @staticmethod
    def parameters_from_payload(payload: dict) -> FrameParameters:
        return _from_payload(FrameParameters, payload)

    @staticmethod
    def create_frame(payload: dict) -> FrameModel:
        return build_model_from_parameters(FrameFactory.parameters_from_payload(payload))


class ModalService:
    def run(self, model: FrameModel) -> dict:
        modal = ModalAnalyzer(model).run()
        mass, K = assemble_matrices(model)
        resp = modal.as_dict()
        resp["mass_vector"] = mass.as_dict()["values"]
        resp["K_matrix"] = K.tolist()
        return resp


class GroundMotionService:
    @staticmethod
    def settings_from_payload(payload: dict) -> SimulationSettings:
        return _from_payload(SimulationSettings, payload)

    def run(self, payload: dict) -> dict:
        s = self.settings_from_payload(payload)
        motion = build_ground_motion(s.duration, s.dt, s.kind, s.peak_accel, s.freq, seed=s.seed)
        return motion.as_dict()


class TimeSimulationService:
    """Streams a whole run of a session as INIT / DATA ... / END frames."""

    def __init__(self, frame_delay: float = 0.0):
        self.frame_delay = frame_delay

    @classmethod
    def from_payload(cls, payload: dict) -> "TimeSimulationService":
        if not isinstance(payload, dict):
            raise PreconditionError(f"Simulation payload must be a JSON object, got {type(payload).__name__}")
        raw = payload.get("frame_delay", 0.0)
        try:
            frame_delay = float(raw)
        except (TypeError, ValueError) as e:
            raise PreconditionError(f"Invalid value for 'frame_delay': {raw!r}") from e
        if not math.isfinite(frame_delay) or frame_delay < 0.0:
            raise PreconditionError(f"frame_delay must be finite and >= 0, got {raw!r}")
        return cls(frame_delay)

    @staticmethod
    def create_session(payload: dict) -> SimulationSession:
        frame = FrameFactory.parameters_from_payload(payload.get("frame_req", {}))
        settings = GroundMotionService.settings_from_payload(payload.get("sim_req", {}))
        return SimulationSession(frame, settings)

    async def run(self, session: SimulationSession):
        frequency, period = session.modal_properties()
        session.start()

        yield {
            "type": "INIT",
            "model": session.model.as_dict(),
            "frequency": frequency,
            "period": period,
            "dt": session.ground.dt,
            "n_steps": session.ground.n_samples,
        }

        while session.running and not session.ground.finished:
            snapshot = session.tick()
            yield {"type": "DATA", **snapshot.as_dict()}
            await asyncio.sleep(self.frame_delay)

        session.pause()
        logger.info("Simulation finished after %d steps", session.step_count)
        yield {"type": "END", "steps": session.step_count}


class TimeHistoryService:
    """Whole run in one response, as (nodes, steps) arrays."""

    def run(self, payload: dict) -> dict:
        if not isinstance(payload, dict):
            raise PreconditionError(f"Simulation payload must be a JSON object, got {type(payload).__name__}")
        session = TimeSimulationService.create_session(payload)
        result = session.time_history()
        logger.info("Time history service: %d steps", result.t.shape[0])
        return result.as_dict()
