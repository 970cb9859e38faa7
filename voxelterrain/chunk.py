"""Chunk storage, block kinds and greedy meshing of chunk voxels."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Sequence

from voxelterrain.terrain import Shape3

CHUNK_SIZE = 32
"""Edge length of a chunk in voxels."""

CHUNK_VOLUME = CHUNK_SIZE**3

CHUNK_SIZE_PADDED = CHUNK_SIZE + 2
"""Edge length of a chunk including its one-voxel border on each side."""

CHUNK_SHAPE = Shape3(CHUNK_SIZE_PADDED, CHUNK_SIZE_PADDED, CHUNK_SIZE_PADDED)

IVec3 = tuple[int, int, int]
Vec3 = tuple[float, float, float]
Vec2 = tuple[float, float]


class Block(Enum):
    """Kinds of voxel a chunk can hold."""

    NONE = auto()
    GRASS = auto()
    STONE = auto()
    DIRT = auto()
    SNOW = auto()

    @classmethod
    def from_int(cls, value: int) -> Block:
        """Map the external integer code of a block to its kind."""
        try:
            return _BLOCK_CODES[value]
        except KeyError:
            raise ValueError(f"No block for code {value}") from None

    def layer_idx(self) -> float:
        """Index of this block's texture layer."""
        if self is Block.NONE:
            raise ValueError("Block.NONE has no texture layer")
        return _LAYERS[self]

    def solid(self) -> int:
        """1 for a solid block, 0 for empty space."""
        return 0 if self is Block.NONE else 1

    def is_visible(self) -> bool:
        """Whether the block is opaque rather than empty."""
        return self is not Block.NONE


_BLOCK_CODES = {
    0: Block.NONE,
    1: Block.DIRT,
    2: Block.GRASS,
    3: Block.STONE,
    4: Block.SNOW,
}

_LAYERS = {
    Block.GRASS: 0.0,
    Block.DIRT: 1.0,
    Block.STONE: 2.0,
    Block.SNOW: 3.0,
}


class Pipeline(Enum):
    """Stage of a chunk on its way to the screen."""

    NONE = auto()
    NEEDS_MESH = auto()
    MESHING = auto()
    MESHED = auto()
    RENDERED = auto()


def wv_to_cv(wv: Sequence[int]) -> IVec3:
    """World voxel position to the position of the chunk holding it."""
    x, y, z = wv
    return (x // CHUNK_SIZE, y // CHUNK_SIZE, z // CHUNK_SIZE)


def cv_to_wv(chunk_v: Sequence[int]) -> IVec3:
    """Chunk position to the world position of its first voxel."""
    x, y, z = chunk_v
    return (x * CHUNK_SIZE, y * CHUNK_SIZE, z * CHUNK_SIZE)


def wv_to_lv(wv: Sequence[int]) -> IVec3:
    """World voxel position to its position inside its chunk."""
    x, y, z = wv
    return (x % CHUNK_SIZE, y % CHUNK_SIZE, z % CHUNK_SIZE)


@dataclass
class Chunk:
    """A padded cube of voxels plus user edits waiting to be merged."""

    voxels: list[Block]
    changes: dict[IVec3, Block] = field(default_factory=dict)
    generated: bool = False
    pipeline: Pipeline = Pipeline.NONE
    solid_count: int = 0

    @classmethod
    def empty(cls) -> Chunk:
        """A chunk with every voxel empty."""
        return cls(voxels=[Block.NONE] * CHUNK_SHAPE.size)

    @property
    def shape(self) -> Shape3:
        return CHUNK_SHAPE

    def add_change(self, wv: Sequence[int], new: Block) -> Block:
        """Record an edit at world position ``wv``; return the block it replaces."""
        lv = wv_to_lv(wv)
        old = self.changes.get(lv, self.voxels[self.linearize_lv(lv)])
        self.changes[lv] = new
        self.pipeline = Pipeline.NEEDS_MESH
        return old

    def add_block(self, idx: int, new: Block) -> None:
        """Write a block into a cell assumed to be empty."""
        self.voxels[idx] = new
        self.solid_count += new.solid()

    def replace_block(self, idx: int, new: Block) -> None:
        """Overwrite a cell, keeping the solid count exact."""
        old = self.voxels[idx]
        self.voxels[idx] = new
        self.solid_count = self.solid_count - old.solid() + new.solid()

    def merge_changes(self) -> None:
        """Apply every recorded edit to the voxel data."""
        for lv, block in list(self.changes.items()):
            self.replace_block(self.linearize_lv(wv_to_lv(lv)), block)

    def linearize_lv(self, p: Sequence[int]) -> int:
        """Flat index of local position ``p`` inside the padded chunk."""
        x, y, z = p
        return CHUNK_SHAPE.linearize((x + 1, y + 1, z + 1))

    def linearize(self, p: Sequence[int]) -> int:
        """Flat index of padded position ``p``."""
        return CHUNK_SHAPE.linearize(p)

    def is_empty(self) -> bool:
        return self.solid_count == 0

    def is_full(self) -> bool:
        return self.solid_count == CHUNK_VOLUME

    def copy(self) -> Chunk:
        """An independent copy of this chunk."""
        return Chunk(
            voxels=list(self.voxels),
            changes=dict(self.changes),
            generated=self.generated,
            pipeline=self.pipeline,
            solid_count=self.solid_count,
        )


class Axis(Enum):
    X = 0
    Y = 1
    Z = 2

    def unit(self) -> IVec3:
        v = [0, 0, 0]
        v[self.value] = 1
        return (v[0], v[1], v[2])


@dataclass(frozen=True)
class Quad:
    """An axis-aligned rectangle of voxel faces in padded chunk space."""

    minimum: IVec3
    width: int
    height: int


def _permutation_sign(axes: tuple[Axis, Axis, Axis]) -> int:
    order = tuple(a.value for a in axes)
    return 1 if order in ((0, 1, 2), (2, 0, 1), (1, 2, 0)) else -1


@dataclass(frozen=True)
class OrientedFace:
    """A face direction: normal axis with sign, plus the u and v axes."""

    n_sign: int
    permutation: tuple[Axis, Axis, Axis]

    @property
    def n_axis(self) -> Axis:
        return self.permutation[0]

    @property
    def u_axis(self) -> Axis:
        return self.permutation[1]

    @property
    def v_axis(self) -> Axis:
        return self.permutation[2]

    def signed_normal(self) -> IVec3:
        nx, ny, nz = self.n_axis.unit()
        return (nx * self.n_sign, ny * self.n_sign, nz * self.n_sign)

    def quad_mesh_indices(self, start: int) -> list[int]:
        """Six indices of the two triangles of a quad starting at ``start``."""
        s = start
        if self.n_sign * _permutation_sign(self.permutation) > 0:
            return [s, s + 1, s + 2, s + 1, s + 3, s + 2]
        return [s, s + 2, s + 1, s + 1, s + 2, s + 3]

    def quad_corners(self, quad: Quad) -> list[IVec3]:
        u = self.u_axis.unit()
        v = self.v_axis.unit()
        base = quad.minimum
        if self.n_sign > 0:
            n = self.n_axis.unit()
            base = tuple(b + d for b, d in zip(base, n))
        w_vec = tuple(c * quad.width for c in u)
        h_vec = tuple(c * quad.height for c in v)
        return [
            tuple(base),
            tuple(b + w for b, w in zip(base, w_vec)),
            tuple(b + h for b, h in zip(base, h_vec)),
            tuple(b + w + h for b, w, h in zip(base, w_vec, h_vec)),
        ]

    def quad_mesh_positions(self, quad: Quad, voxel_size: float) -> list[Vec3]:
        """Four corner positions of ``quad`` scaled by ``voxel_size``."""
        return [
            (voxel_size * x, voxel_size * y, voxel_size * z)
            for x, y, z in self.quad_corners(quad)
        ]

    def quad_mesh_normals(self) -> list[Vec3]:
        x, y, z = self.signed_normal()
        normal = (float(x), float(y), float(z))
        return [normal] * 4

    def tex_coords(self, u_flip_face: Axis, flip_v: bool, quad: Quad) -> list[Vec2]:
        """Texture coordinates of the four corners, repeating once per voxel."""
        if self.n_sign < 0:
            flip_u = u_flip_face != self.n_axis
        else:
            flip_u = u_flip_face == self.n_axis
        w, h = float(quad.width), float(quad.height)
        if not flip_u and not flip_v:
            return [(0.0, 0.0), (w, 0.0), (0.0, h), (w, h)]
        if flip_u and not flip_v:
            return [(w, 0.0), (0.0, 0.0), (w, h), (0.0, h)]
        if not flip_u and flip_v:
            return [(0.0, h), (w, h), (0.0, 0.0), (w, 0.0)]
        return [(w, h), (0.0, h), (w, 0.0), (0.0, 0.0)]


RIGHT_HANDED_Y_UP_FACES: tuple[OrientedFace, ...] = (
    OrientedFace(-1, (Axis.X, Axis.Z, Axis.Y)),
    OrientedFace(-1, (Axis.Y, Axis.Z, Axis.X)),
    OrientedFace(-1, (Axis.Z, Axis.X, Axis.Y)),
    OrientedFace(1, (Axis.X, Axis.Z, Axis.Y)),
    OrientedFace(1, (Axis.Y, Axis.Z, Axis.X)),
    OrientedFace(1, (Axis.Z, Axis.X, Axis.Y)),
)
"""Face orientations of a right-handed, y-up coordinate system."""

U_FLIP_FACE = Axis.X


@dataclass
class ChunkMesh:
    """Vertex data of a meshed chunk."""

    indices: list[int] = field(default_factory=list)
    positions: list[Vec3] = field(default_factory=list)
    normals: list[Vec3] = field(default_factory=list)
    uvs: list[Vec2] = field(default_factory=list)
    layers: list[float] = field(default_factory=list)
    tangents: list[float] = field(default_factory=list)


def _greedy_face(
    voxels: Sequence[Block],
    shape: Shape3,
    lo: list[int],
    hi: list[int],
    face: OrientedFace,
) -> list[Quad]:
    n, u, v = (a.value for a in face.permutation)
    step = [0, 0, 0]
    step[n] = face.n_sign
    us = range(lo[u], hi[u] + 1)
    vs = range(lo[v], hi[v] + 1)
    quads: list[Quad] = []

    def point(pn: int, pu: int, pv: int) -> list[int]:
        p = [0, 0, 0]
        p[n], p[u], p[v] = pn, pu, pv
        return p

    for pn in range(lo[n], hi[n] + 1):
        mask: dict[tuple[int, int], Block] = {}
        for pv in vs:
            for pu in us:
                p = point(pn, pu, pv)
                block = voxels[shape.linearize(p)]
                if not block.is_visible():
                    continue
                neighbour = voxels[shape.linearize([c + s for c, s in zip(p, step)])]
                if not neighbour.is_visible():
                    mask[(pu, pv)] = block

        visited: set[tuple[int, int]] = set()

        def free(cell: tuple[int, int], block: Block) -> bool:
            return cell not in visited and mask.get(cell) is block

        for pv in vs:
            for pu in us:
                block = mask.get((pu, pv))
                if block is None or (pu, pv) in visited:
                    continue
                width = 1
                while pu + width <= hi[u] and free((pu + width, pv), block):
                    width += 1
                height = 1
                while pv + height <= hi[v] and all(
                    free((pu + du, pv + height), block) for du in range(width)
                ):
                    height += 1
                visited.update(
                    (pu + du, pv + dv) for dv in range(height) for du in range(width)
                )
                p = point(pn, pu, pv)
                quads.append(Quad((p[0], p[1], p[2]), width, height))
    return quads


def greedy_quads(
    voxels: Sequence[Block],
    shape: Shape3,
    minimum: Sequence[int],
    maximum: Sequence[int],
    faces: Sequence[OrientedFace],
) -> list[list[Quad]]:
    """Merge visible voxel faces into maximal rectangles, one list per face.

    Only voxels strictly inside the inclusive box ``minimum``..``maximum``
    produce quads; the border voxels serve as neighbours only.
    """
    lo = [m + 1 for m in minimum]
    hi = [m - 1 for m in maximum]
    return [_greedy_face(voxels, shape, lo, hi, face) for face in faces]


def build_mesh_from_quads(
    groups: Sequence[Sequence[Quad]],
    chunk: Chunk,
    faces: Sequence[OrientedFace],
    chunk_offset: Sequence[float],
) -> ChunkMesh:
    """Turn greedy quads into vertex arrays placed at ``chunk_offset``."""
    mesh = ChunkMesh()
    for group, face in zip(groups, faces):
        normals = face.quad_mesh_normals()
        for quad in group:
            indices = face.quad_mesh_indices(len(mesh.positions))
            indices[1], indices[2] = indices[2], indices[1]
            indices[4], indices[5] = indices[5], indices[4]
            positions = [
                (x - 1.0 + chunk_offset[0], y - 1.0 + chunk_offset[1], z - 1.0 + chunk_offset[2])
                for x, y, z in face.quad_mesh_positions(quad, 1.0)
            ]
            layer = chunk.voxels[chunk.linearize(quad.minimum)].layer_idx()
            mesh.indices.extend(indices)
            mesh.positions.extend(positions)
            mesh.normals.extend(normals)
            mesh.uvs.extend(face.tex_coords(U_FLIP_FACE, True, quad))
            mesh.layers.extend([layer] * 4)
    mesh.tangents = [0.0] * (len(mesh.positions) * 4)
    return mesh