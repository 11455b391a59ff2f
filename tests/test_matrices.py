import numpy as np

from frame_core.matrices import assemble_matrices, free_partition
from frame_core.structures import ANCHORED, Free, FrameModel, Node, Spring


def test_stiffness_matrix_symmetric(three_story_frame, subdivided_frame):
    for model in (three_story_frame, subdivided_frame):
        _, K = assemble_matrices(model)
        assert K.shape == (model.n_nodes, model.n_nodes)
        assert np.array_equal(K, K.T)


def test_rows_sum_to_zero_without_elimination(three_story_frame, subdivided_frame):
    """A uniform displacement of every node stretches no spring."""
    for model in (three_story_frame, subdivided_frame):
        _, K = assemble_matrices(model)
        assert np.allclose(K.sum(axis=1), 0.0, atol=1e-9 * np.abs(K).max())


def test_stiffness_is_positive_semidefinite(three_story_frame):
    _, K = assemble_matrices(three_story_frame)
    eigvals = np.linalg.eigvalsh(K)
    assert eigvals.min() > -1e-8 * eigvals.max()


def test_direct_stiffness_entries(portal_frame):
    _, K = assemble_matrices(portal_frame)
    k = 1200.0
    # node 2 (top-left): column to node 0, beam to node 3
    assert np.isclose(K[2, 2], 2 * k)
    assert np.isclose(K[2, 0], -k)
    assert np.isclose(K[2, 3], -k)
    assert np.isclose(K[2, 1], 0.0)


def test_unconnected_node_has_zero_row_and_column():
    nodes = [Node(0.0, 0.0, ANCHORED), Node(0.0, 1.0, Free(1.0)), Node(1.0, 1.0, Free(1.0))]
    model = FrameModel(nodes=nodes, springs=[Spring(0, 1, 50.0)], rows=1, cols=3)
    _, K = assemble_matrices(model)
    assert np.all(K[2, :] == 0.0)
    assert np.all(K[:, 2] == 0.0)


def test_mass_vector_tags_anchored_nodes(portal_frame):
    mass, _ = assemble_matrices(portal_frame)
    assert mass.anchored.tolist() == [True, True, False, False]
    assert np.all(np.isinf(mass.values[:2]))
    assert np.allclose(mass.free_values, [0.5, 0.5])
    assert mass.as_dict()["values"] == [None, None, 0.5, 0.5]


def test_free_partition_eliminates_anchored_dofs(three_story_frame):
    mass, K = assemble_matrices(three_story_frame)
    m, K_ff = free_partition(mass, K)
    free = three_story_frame.free_indices
    assert m.shape == (len(free),)
    assert K_ff.shape == (len(free), len(free))
    assert np.allclose(K_ff, K[np.ix_(free, free)])
    assert np.all(np.isfinite(m))


def test_reassembly_reflects_changed_springs(portal_frame):
    _, K_before = assemble_matrices(portal_frame)
    portal_frame.springs[0].stiffness *= 2.0
    _, K_after = assemble_matrices(portal_frame)
    assert not np.allclose(K_before, K_after)
