import asyncio

import numpy as np
import pytest

from frame_app.services import (FrameFactory, GroundMotionService, ModalService,
                                TimeHistoryService, TimeSimulationService)
from frame_core.errors import PreconditionError


FRAME_PAYLOAD = {
    "stories": 2, "bays": 2, "story_height": 3.0, "bay_width": 6.0,
    "segments": 1, "story_mass": 60.0, "column_ei": 2.0e4, "beam_ei": 3.0e4,
}


def test_factory_parses_payload():
    params = FrameFactory.parameters_from_payload({"stories": "3", "bay_width": 4})
    assert params.stories == 3
    assert params.bay_width == 4.0
    assert params.bays == 2            # default


def test_factory_rejects_bad_values():
    with pytest.raises(PreconditionError):
        FrameFactory.create_frame({**FRAME_PAYLOAD, "column_ei": -1.0})
    with pytest.raises(PreconditionError, match="stories"):
        FrameFactory.create_frame({**FRAME_PAYLOAD, "stories": "many"})


@pytest.mark.parametrize("field,value", [("stories", 2.7), ("bays", 1.9), ("segments", "1.5")])
def test_factory_rejects_fractional_counts(field, value):
    with pytest.raises(PreconditionError, match=field):
        FrameFactory.create_frame({**FRAME_PAYLOAD, field: value})


def test_factory_accepts_integral_floats():
    params = FrameFactory.parameters_from_payload({"stories": 3.0, "bays": "2"})
    assert params.stories == 3 and params.bays == 2


def test_factory_rejects_non_object_payload():
    with pytest.raises(PreconditionError, match="JSON object"):
        FrameFactory.parameters_from_payload([1, 2, 3])


def test_ground_motion_service_rejects_fractional_seed():
    with pytest.raises(PreconditionError, match="seed"):
        GroundMotionService().run({"kind": "filtered_random", "seed": 2.5})


def test_modal_service_payload():
    model = FrameFactory.create_frame(FRAME_PAYLOAD)
    resp = ModalService().run(model)
    assert len(resp["frequencies"]) == len(model.free_indices)
    assert resp["estimate_frequency"] > 0.0
    assert resp["mass_vector"][:3] == [None, None, None]
    K = np.array(resp["K_matrix"])
    assert np.allclose(K, K.T)


def test_ground_motion_service():
    resp = GroundMotionService().run({"kind": "pulse", "duration": 2.0, "dt": 0.5, "peak_accel": 1.0})
    assert resp["ag"] == [0.0, 0.5, 1.0, 0.5]


def test_ground_motion_service_rejects_unknown_kind():
    with pytest.raises(PreconditionError):
        GroundMotionService().run({"kind": "tsunami"})


def test_time_simulation_streams_frames():
    payload = {"frame_req": FRAME_PAYLOAD,
               "sim_req": {"duration": 0.5, "dt": 0.05, "kind": "sinusoidal", "freq": 2.0}}
    service = TimeSimulationService()
    session = service.create_session(payload)

    async def collect():
        return [frame async for frame in service.run(session)]

    frames = asyncio.run(collect())
    assert frames[0]["type"] == "INIT"
    assert frames[0]["frequency"] > 0.0
    assert frames[-1] == {"type": "END", "steps": 10}
    data = [f for f in frames if f["type"] == "DATA"]
    assert len(data) == 10
    assert data[0]["t"] == 0.0
    assert data[-1]["t"] == pytest.approx(0.45)


@pytest.mark.parametrize("delay", ["fast", -1.0, float("inf"), [0.1]])
def test_time_simulation_rejects_bad_frame_delay(delay):
    with pytest.raises(PreconditionError, match="frame_delay"):
        TimeSimulationService.from_payload({"frame_delay": delay})


def test_time_simulation_rejects_non_object_payload():
    with pytest.raises(PreconditionError, match="JSON object"):
        TimeSimulationService.from_payload(["frame_req"])


def test_time_history_service():
    payload = {"frame_req": FRAME_PAYLOAD,
               "sim_req": {"duration": 0.5, "dt": 0.05, "kind": "pulse"}}
    resp = TimeHistoryService().run(payload)
    assert len(resp["t"]) == 10
    assert resp["t"][0] == 0.0
    assert np.allclose(resp["t"], 0.05 * np.arange(10))
    assert np.array(resp["x"]).shape == (9, 10)
