import json
import logging

from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware

from frame_app.services import (FrameFactory, GroundMotionService, ModalService, TimeHistoryService,
                                TimeSimulationService)
from frame_core.errors import NumericalDegeneracyError, PreconditionError

logger = logging.getLogger(__name__)

app = FastAPI(title="Frame seismic response")

origins = [
    "http://127.0.0.1:5500",
    "http://localhost:5500",
    "null"
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _http_error(e: Exception) -> HTTPException:
    status = 409 if isinstance(e, NumericalDegeneracyError) else 422
    return HTTPException(status_code=status, detail=str(e))


# === WebSocket Endpoint ===
@app.websocket("/ws/simulate")
async def websocket_endpoint(websocket: WebSocket):
    await websocket.accept()
    logger.info("Client connected via WebSocket")

    try:
        payload = json.loads(await websocket.receive_text())
        simulator = TimeSimulationService.from_payload(payload)
        session = simulator.create_session(payload)
        async for frame in simulator.run(session):
            await websocket.send_json(frame)
    except WebSocketDisconnect:
        logger.info("Client disconnected.")
        return
    except (PreconditionError, NumericalDegeneracyError, json.JSONDecodeError) as e:
        logger.warning("Simulation rejected: %s", e)
        await websocket.send_json({"type": "ERROR", "message": str(e)})
    await websocket.close()


@app.post("/frame/modal")
async def calculate_modal_properties(payload: dict):
    try:
        model = FrameFactory.create_frame(payload)
        return ModalService().run(model)
    except (PreconditionError, NumericalDegeneracyError) as e:
        logger.warning("Modal calculation failed: %s", e)
        raise _http_error(e)


@app.post("/frame/ground-motion")
async def synthesize_ground_motion(payload: dict):
    try:
        return GroundMotionService().run(payload)
    except PreconditionError as e:
        raise _http_error(e)


@app.post("/frame/time-history")
async def run_time_history(payload: dict):
    try:
        return TimeHistoryService().run(payload)
    except PreconditionError as e:
        raise _http_error(e)
