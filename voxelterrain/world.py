"""A world of chunks that are generated, meshed and queued for rendering."""

from __future__ import annotations

import threading
from collections import deque
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Sequence

from voxelterrain.chunk import (
    CHUNK_SHAPE,
    CHUNK_SIZE,
    CHUNK_SIZE_PADDED,
    RIGHT_HANDED_Y_UP_FACES,
    Block,
    Chunk,
    ChunkMesh,
    IVec3,
    Pipeline,
    build_mesh_from_quads,
    cv_to_wv,
    greedy_quads,
    wv_to_cv,
)
from voxelterrain.terrain import HybridMulti, generate_chunk_noise

MESH_THREADS = 8
"""Number of worker threads that mesh chunks."""

SAMPLING_RATE = 4
"""Spacing, in voxels, of the coarse height-noise grid."""

SCALE_XZ = 1000.0
"""Horizontal scale applied to world positions before sampling noise."""

HEIGHT_SCALE = 100.0
"""Multiplier turning a noise value into a terrain height."""

DIRT_BELOW = -20
SNOW_FROM = 120
STONE_FROM = 60


def _as_ivec3(v: Sequence[float]) -> IVec3:
    x, y, z = v
    return (int(x), int(y), int(z))


def _default_noise() -> HybridMulti:
    return HybridMulti(
        seed=1234,
        octaves=5,
        frequency=1.1,
        lacunarity=2.8,
        persistence=0.4,
    )


class VoxelWorld:
    """Chunks around a camera, meshed on a pool of worker threads.

    Meshes that are ready wait in ``render_queue`` keyed by chunk position.
    Use the world as a context manager to shut its worker pool down.
    """

    def __init__(self, radius_h: int, radius_v: int) -> None:
        capacity = 2 * radius_h * 2 * radius_h * 2 * radius_v
        if capacity <= 0:
            raise ValueError("radius_h and radius_v must both be positive")
        self.radius_h = radius_h
        self.radius_v = radius_v
        self.chunks: dict[IVec3, Chunk] = {}
        self.render_queue: dict[IVec3, ChunkMesh] = {}
        self.mesh_queue: deque[IVec3] = deque(maxlen=capacity)
        self.noise = _default_noise()
        self._lock = threading.Lock()
        self._meshing = 0
        self._pool = ThreadPoolExecutor(max_workers=MESH_THREADS)

    def __enter__(self) -> VoxelWorld:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self._pool.shutdown(wait=True)

    def add_change(self, wv: Sequence[int], new_block: Block) -> Block:
        """Place ``new_block`` at world position ``wv``; return what was there."""
        chunk_v = wv_to_cv(wv)
        with self._lock:
            chunk = self.chunks.setdefault(chunk_v, Chunk.empty())
            old = chunk.add_change(wv, new_block)
        self.mesh_queue.append(chunk_v)
        return old

    def reset_mesh(self) -> None:
        """Drop pending meshes and mark every chunk for meshing again."""
        with self._lock:
            self.render_queue.clear()
            for chunk in self.chunks.values():
                chunk.pipeline = Pipeline.NEEDS_MESH

    def remove_generated(self) -> None:
        """Forget generated terrain; chunks with edits are queued for meshing."""
        with self._lock:
            self.render_queue.clear()
            for chunk in self.chunks.values():
                chunk.voxels = Chunk.empty().voxels
                chunk.solid_count = 0
                chunk.generated = False
                if chunk.changes:
                    chunk.pipeline = Pipeline.NEEDS_MESH

    def queue_chunks_to_mesh(
        self, camera_pos: Sequence[float], camera_dir: Sequence[float]
    ) -> None:
        """Queue the chunks around the camera, nearest first."""
        cx, cy, cz = _as_ivec3(camera_pos)
        camera_chunk = wv_to_cv((cx, cy, cz))
        rh, rv = self.radius_h, self.radius_v
        chunk_vs = [
            wv_to_cv((cx + x * CHUNK_SIZE, cy + y * CHUNK_SIZE, cz + z * CHUNK_SIZE))
            for x in range(-rh, rh)
            for y in range(-rv, rv)
            for z in range(-rh, rh)
        ]
        chunk_vs.sort(
            key=lambda v: sum((a - b) ** 2 for a, b in zip(camera_chunk, v))
        )
        self.mesh_queue.extend(chunk_vs)

    def mesh_queued_chunks(
        self, camera_pos: Sequence[int], procedural: bool
    ) -> list[Future]:
        """Start meshing every queued chunk that needs it.

        Returns one future per chunk started; each resolves to the chunk's
        mesh, or ``None`` when the chunk holds no solid voxels.
        """
        to_mesh: list[IVec3] = []
        with self._lock:
            for _ in range(len(self.mesh_queue)):
                if not self.mesh_queue:
                    break
                chunk_v = self.mesh_queue.popleft()
                if chunk_v not in self.chunks:
                    fresh = Chunk.empty()
                    fresh.pipeline = Pipeline.NEEDS_MESH
                    self.chunks[chunk_v] = fresh
                if self.chunks[chunk_v].pipeline is Pipeline.NEEDS_MESH:
                    to_mesh.append(chunk_v)
            for chunk_v in to_mesh:
                self.chunks[chunk_v].pipeline = Pipeline.MESHING
                self._meshing += 1
        return [
            self._pool.submit(self._mesh_in_flight, chunk_v, procedural)
            for chunk_v in to_mesh
        ]

    def _mesh_in_flight(self, chunk_v: IVec3, procedural: bool) -> ChunkMesh | None:
        try:
            return self.mesh_chunk(chunk_v, procedural)
        finally:
            with self._lock:
                self._meshing -= 1

    def mesh_chunk(self, chunk_v: Sequence[int], procedural: bool) -> ChunkMesh | None:
        """Generate (if asked), merge edits into and mesh one existing chunk.

        The mesh is also stored in ``render_queue``. Returns ``None`` without
        meshing when the chunk holds no solid voxels.
        """
        key = _as_ivec3(chunk_v)
        with self._lock:
            if key not in self.chunks:
                raise KeyError(f"no chunk at {key}")
            working = self.chunks[key].copy()

        if procedural and not working.generated:
            working.solid_count = 0
            self._generate(working, key)
            working.generated = True

        working.merge_changes()

        with self._lock:
            self.chunks[key] = working.copy()

        if working.is_empty():
            return None

        last = CHUNK_SIZE_PADDED - 1
        groups = greedy_quads(
            working.voxels,
            CHUNK_SHAPE,
            (0, 0, 0),
            (last, last, last),
            RIGHT_HANDED_Y_UP_FACES,
        )
        if not any(groups):
            mesh = ChunkMesh()
        else:
            offset = tuple(float(c * CHUNK_SIZE) for c in key)
            mesh = build_mesh_from_quads(groups, working, RIGHT_HANDED_Y_UP_FACES, offset)

        with self._lock:
            self.render_queue[key] = mesh
        return mesh

    def _generate(self, chunk: Chunk, chunk_v: IVec3) -> None:
        chunk_wv = cv_to_wv(chunk_v)
        heights = generate_chunk_noise(
            chunk_wv, CHUNK_SHAPE, SAMPLING_RATE, SCALE_XZ, self.noise
        )
        _, base_y, _ = chunk_wv
        for idx, height in enumerate(heights):
            _, ly, _ = CHUNK_SHAPE.delinearize(idx)
            wy = base_y + ly - 1
            if wy < DIRT_BELOW:
                chunk.add_block(idx, Block.DIRT)
            elif wy < height * HEIGHT_SCALE:
                if wy >= SNOW_FROM:
                    chunk.add_block(idx, Block.SNOW)
                elif wy >= STONE_FROM:
                    chunk.add_block(idx, Block.STONE)
                else:
                    chunk.add_block(idx, Block.GRASS)