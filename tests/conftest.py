"""
Shared fixtures for the frame engine tests.
"""
import pytest

from frame_core.structures import ANCHORED, Free, FrameModel, Node, Spring, build_model


@pytest.fixture
def portal_frame():
    """1 story, 1 bay: H = L = 10, level mass 1, EI_c = EI_b = 1e5 (k = 1200)."""
    return build_model(stories=1, bays=1, story_height=10.0, bay_width=10.0,
                       segments=1, story_mass=1.0, column_ei=1.0e5, beam_ei=1.0e5)


@pytest.fixture
def three_story_frame():
    return build_model(stories=3, bays=2, story_height=3.0, bay_width=6.0,
                       segments=1, story_mass=90.0, column_ei=5.0e4, beam_ei=8.0e4)


@pytest.fixture
def subdivided_frame():
    return build_model(stories=2, bays=2, story_height=4.0, bay_width=6.0,
                       segments=2, story_mass=30.0, column_ei=2.0e4, beam_ei=3.0e4)


def make_sdof(m: float, k: float) -> FrameModel:
    """One anchored node below one free node of mass m, joined by a column spring k."""
    nodes = [Node(0.0, 0.0, ANCHORED), Node(0.0, 1.0, Free(m))]
    return FrameModel(nodes=nodes, springs=[Spring(0, 1, k, "column")], rows=2, cols=1)


@pytest.fixture
def sdof_factory():
    return make_sdof
