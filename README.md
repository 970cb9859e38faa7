# voxelterrain

A chunked voxel world with procedural terrain and greedy meshing. It is written
in plain Python and has no third-party dependencies.

The world is split into cubic chunks of 32 voxels per side. Each chunk stores a
one-voxel border on every side, so its faces are culled against the chunks next
to it. Terrain is a height field made from fractal Perlin noise (`HybridMulti`,
seed 1234). The noise is sampled on a coarse grid every 4 voxels and filled in
by bilinear interpolation. Chunks are meshed by merging visible faces into
greedy quads. The result is a `ChunkMesh`: flat lists of indices, positions,
normals, UVs, tangents and texture-array layers.

## Installation

```
pip install .
```

With the test dependencies:

```
pip install .[test]
```

## Modules

- `voxelterrain.terrain`
  - `lerp`: linear interpolation.
  - `Shape3`: maps 3-D points to flat indices with x varying fastest (`linearize`, `delinearize`).
  - `Perlin`: seeded 2-D gradient noise.
  - `HybridMulti`: a multifractal of Perlin octaves.
  - `generate_chunk_noise`: returns the interpolated height value of every cell of a padded chunk.
- `voxelterrain.chunk`
  - `Block` and `Pipeline`: block kinds and meshing stages. `Block.from_int` maps the codes 0–4 to `NONE`, `DIRT`, `GRASS`, `STONE` and `SNOW`.
  - `Chunk`: a padded voxel cube. It also holds edits that have not yet been merged into the voxels (`add_change`, `merge_changes`).
  - `wv_to_cv`, `cv_to_wv`, `wv_to_lv`: conversions between world, chunk and local coordinates.
  - `greedy_quads` and `build_mesh_from_quads`: turn chunk voxels into a `ChunkMesh`.
- `voxelterrain.world`
  - `VoxelWorld`: holds the loaded chunks, a bounded mesh queue and `render_queue`, a dict that maps each chunk position to its finished mesh. Meshing runs on a pool of 8 worker threads.
- `voxelterrain.mesh`
  - A simpler cube mesher that builds one face at a time for a 16×16 texture atlas: `Face`, `BlockFace`, `AtlasBlock`, `generate_face` and `tex_coords_from_atlas`.

## Usage

```python
from concurrent.futures import wait

from voxelterrain.chunk import Block
from voxelterrain.world import VoxelWorld

with VoxelWorld(radius_h=1, radius_v=1) as world:
    # Record an edit; it is kept when generated terrain is discarded.
    previous = world.add_change((5, 10, 5), Block.STONE)

    # Queue the chunks around the camera, nearest first, then mesh them.
    world.queue_chunks_to_mesh((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
    futures = world.mesh_queued_chunks((0, 0, 0), procedural=True)
    wait(futures)

    for chunk_v, mesh in world.render_queue.items():
        print(chunk_v, len(mesh.positions), "vertices")
```

`mesh_queued_chunks` returns one future per chunk it starts. Each future
resolves to the chunk's mesh, or to `None` when the chunk has no solid voxels;
such chunks are not added to `render_queue`. To mesh a single existing chunk on
the calling thread, use `VoxelWorld.mesh_chunk`.

`reset_mesh` marks every chunk to be meshed again. `remove_generated` discards
generated terrain and queues the chunks that have edits for meshing.

Coordinates are plain tuples of three numbers. World positions map to chunk
positions by floor division, so negative coordinates land in the correct chunk.

## Limitations

- The package produces mesh data only. It does not draw anything, open a
  window or upload meshes to a GPU.
- Tangents in a `ChunkMesh` are filled with zeros. They are not computed.
- Chunks and edits are held in memory only. There is no saving or loading.
- `Perlin` is a self-contained implementation. Its values are deterministic
  for a given seed, but do not match other noise libraries.

## Tests

```
pytest
```