# frame_core - lateral seismic response of multi-story moment frames
"""
frame_core: lumped-mass lateral-spring model of a moment frame.

    structures.py   Node / Spring / FrameModel, frame discretizer
    matrices.py     lateral stiffness, mass vector and K assembly
    modal.py        power-iteration frequency estimate, exact modal reference
    earthquakes.py  ground-motion synthesis and playback
    response.py     one-step dynamic integrator, reset, time history
    session.py      caller-owned simulation session
"""
from .errors import NumericalDegeneracyError, PreconditionError
from .structures import FrameModel, build_model
from .matrices import assemble_matrices
from .modal import estimate_natural_frequency
from .earthquakes import GroundMotion, build_ground_motion
from .response import reset_state, simulate_step
from .session import SimulationSession

__version__ = "0.1.0"
