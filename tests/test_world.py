import itertools
from concurrent.futures import wait

import pytest

from voxelterrain.chunk import CHUNK_SHAPE, Block, Pipeline
from voxelterrain.world import VoxelWorld


@pytest.fixture
def world():
    with VoxelWorld(1, 1) as w:
        yield w


def _results(futures):
    wait(futures)
    return [f.result() for f in futures]


def test_zero_radius_rejected():
    with pytest.raises(ValueError):
        VoxelWorld(0, 4)


def test_queue_chunks_around_camera_nearest_first(world):
    world.queue_chunks_to_mesh((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
    queued = list(world.mesh_queue)
    assert queued[0] == (0, 0, 0)
    assert set(queued) == set(itertools.product((-1, 0), repeat=3))
    distances = [sum(c * c for c in v) for v in queued]
    assert distances == sorted(distances)


def test_queue_is_bounded(world):
    world.queue_chunks_to_mesh((0.0, 0.0, 0.0), (0.0, 0.0, 1.0))
    world.queue_chunks_to_mesh((0.0, 0.0, 0.0), (0.0, 0.0, 1.0))
    assert len(world.mesh_queue) == 8


def test_add_change_creates_chunk_and_queues_it(world):
    old = world.add_change((-1, 0, 0), Block.STONE)
    assert old is Block.NONE
    assert (-1, 0, 0) in world.chunks
    assert world.chunks[(-1, 0, 0)].pipeline is Pipeline.NEEDS_MESH
    assert list(world.mesh_queue) == [(-1, 0, 0)]
    assert world.add_change((-1, 0, 0), Block.GRASS) is Block.STONE


def test_mesh_single_block(world):
    world.add_change((5, 5, 5), Block.STONE)
    futures = world.mesh_queued_chunks((0, 0, 0), False)
    (mesh,) = _results(futures)
    assert len(mesh.positions) == 24
    assert len(mesh.indices) == 36
    assert len(mesh.tangents) == 4 * len(mesh.positions)
    assert set(mesh.layers) == {Block.STONE.layer_idx()}
    for axis in range(3):
        coords = [p[axis] for p in mesh.positions]
        assert min(coords) == 5.0
        assert max(coords) == 6.0
    assert world.render_queue[(0, 0, 0)] is mesh
    assert not world.mesh_queue


def test_mesh_is_placed_at_chunk_offset(world):
    world.add_change((37, 2, 3), Block.GRASS)
    (mesh,) = _results(world.mesh_queued_chunks((0, 0, 0), False))
    xs = [p[0] for p in mesh.positions]
    assert (min(xs), max(xs)) == (37.0, 38.0)
    assert set(mesh.layers) == {Block.GRASS.layer_idx()}


def test_empty_chunk_produces_no_mesh(world):
    world.mesh_queue.append((3, 3, 3))
    results = _results(world.mesh_queued_chunks((0, 0, 0), False))
    assert results == [None]
    assert (3, 3, 3) in world.chunks
    assert world.render_queue == {}


def test_chunk_in_progress_is_not_meshed_again(world):
    world.add_change((1, 1, 1), Block.DIRT)
    _results(world.mesh_queued_chunks((0, 0, 0), False))
    world.mesh_queue.append((0, 0, 0))
    assert world.mesh_queued_chunks((0, 0, 0), False) == []


def test_reset_mesh(world):
    world.add_change((1, 1, 1), Block.DIRT)
    _results(world.mesh_queued_chunks((0, 0, 0), False))
    world.reset_mesh()
    assert world.render_queue == {}
    assert world.chunks[(0, 0, 0)].pipeline is Pipeline.NEEDS_MESH


def test_remove_generated(world):
    world.add_change((1, 1, 1), Block.DIRT)
    world.mesh_queue.append((2, 0, 0))
    _results(world.mesh_queued_chunks((0, 0, 0), False))
    before = world.chunks[(2, 0, 0)].pipeline
    world.remove_generated()
    edited = world.chunks[(0, 0, 0)]
    assert edited.pipeline is Pipeline.NEEDS_MESH
    assert edited.generated is False
    assert all(b is Block.NONE for b in edited.voxels)
    assert world.chunks[(2, 0, 0)].pipeline is before
    assert world.render_queue == {}


def test_remeshing_after_remove_generated_keeps_edit(world):
    world.add_change((5, 5, 5), Block.SNOW)
    _results(world.mesh_queued_chunks((0, 0, 0), False))
    world.remove_generated()
    mesh = world.mesh_chunk((0, 0, 0), False)
    assert len(mesh.positions) == 24
    assert set(mesh.layers) == {Block.SNOW.layer_idx()}


def test_mesh_chunk_unknown_chunk(world):
    with pytest.raises(KeyError):
        world.mesh_chunk((9, 9, 9), False)


def test_procedural_deep_chunk_is_solid_dirt(world):
    world.mesh_queue.append((0, -2, 0))
    (mesh,) = _results(world.mesh_queued_chunks((0, 0, 0), True))
    chunk = world.chunks[(0, -2, 0)]
    assert chunk.generated is True
    assert chunk.solid_count == CHUNK_SHAPE.size
    assert all(b is Block.DIRT for b in chunk.voxels)
    assert mesh.positions == []
    assert world.render_queue[(0, -2, 0)] is mesh