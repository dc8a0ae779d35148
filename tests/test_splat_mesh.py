import numpy as np
import pytest

from splat_mesh import SplatMesh, SplatScene


def test_global_indexes_span_scenes(make_scene):
    mesh = SplatMesh(
        [
            make_scene([[0, 0, 0], [1, 0, 0]]),
            make_scene(np.zeros((0, 3))),
            make_scene([[0, 1, 0], [0, 2, 0], [0, 3, 0]]),
        ]
    )
    assert mesh.splat_count == 5
    assert mesh.scene_count == 3
    assert mesh.scene_offsets().tolist() == [0, 2, 2]
    assert mesh.get_scene_index_for_splat(0) == (0, 0)
    assert mesh.get_scene_index_for_splat(1) == (0, 1)
    assert mesh.get_scene_index_for_splat(2) == (2, 0)
    assert mesh.get_scene_index_for_splat(4) == (2, 2)
    assert np.allclose(mesh.get_splat_center(3), [0.0, 2.0, 0.0])


def test_out_of_range_index_raises(make_scene):
    mesh = SplatMesh([make_scene([[0, 0, 0]])])
    with pytest.raises(IndexError):
        mesh.get_splat_center(1)
    with pytest.raises(IndexError):
        mesh.get_splat_color(-1)


def test_accessors_return_copies(make_scene):
    mesh = SplatMesh([make_scene([[1, 2, 3]], scales=[[0.5, 1.0, 2.0]], opacities=[0.25])])
    center = mesh.get_splat_center(0)
    center[:] = 0.0
    assert np.allclose(mesh.get_splat_center(0), [1.0, 2.0, 3.0])
    scale, rotation = mesh.get_splat_scale_and_rotation(0)
    assert np.allclose(scale, [0.5, 1.0, 2.0])
    assert np.allclose(rotation, [0.0, 0.0, 0.0, 1.0])
    assert np.isclose(mesh.get_splat_color(0)[3], 0.25)


def test_scene_transform_applied_on_request(make_scene):
    scene = make_scene([[1, 0, 0]], position=[0.0, 0.0, -3.0], scale=[2.0, 2.0, 2.0])
    mesh = SplatMesh([scene])
    assert np.allclose(mesh.get_splat_center(0), [1.0, 0.0, 0.0])
    assert np.allclose(mesh.get_splat_center(0, apply_scene_transform=True), [2.0, 0.0, -3.0])
    assert np.allclose(mesh.get_scene_transform(0)[:3, 3], [0.0, 0.0, -3.0])


def test_scene_rejects_bad_shapes():
    with pytest.raises(ValueError):
        SplatScene(np.zeros((2, 3)), np.ones((2, 3)), np.zeros((2, 3)), np.ones((2, 4)))
    with pytest.raises(ValueError):
        SplatScene(np.zeros((2, 3)), np.ones((1, 3)), np.zeros((2, 4)), np.ones((2, 4)))


def test_adding_scene_invalidates_tree(make_scene):
    mesh = SplatMesh([make_scene([[0, 0, 0]])])
    first_tree = mesh.get_splat_tree()
    assert mesh.get_splat_tree() is first_tree
    mesh.add_scene(make_scene([[0, 0, 5]]))
    assert mesh.get_splat_tree() is not first_tree
    assert len(mesh.get_splat_tree().sub_trees) == 2


def test_scene_offsets_cached_until_scene_added(make_scene):
    mesh = SplatMesh([make_scene([[0, 0, 0], [1, 0, 0]])])
    offsets = mesh.scene_offsets()
    assert mesh.scene_offsets() is offsets
    assert not offsets.flags.writeable

    mesh.add_scene(make_scene([[0, 0, 5], [0, 0, 6], [0, 0, 7]]))
    assert mesh.scene_offsets() is not offsets
    assert mesh.scene_offsets().tolist() == [0, 2]
    assert mesh.splat_count == 5
    assert mesh.get_scene_index_for_splat(4) == (1, 2)
    assert np.allclose(mesh.get_splat_center(3), [0.0, 0.0, 6.0])
