"""Single-block face geometry and texture-atlas lookups."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

Vec2 = tuple[float, float]
Vec3 = tuple[float, float, float]

ATLAS_STEP = 1.0 / 16.0
"""Width of one cell in the 16 x 16 texture atlas."""

ATLAS_ADJ = ATLAS_STEP * ATLAS_STEP
"""Inset applied to each atlas cell to avoid bleeding from neighbours."""

DEFAULT_TEX_COORDS: tuple[Vec2, Vec2, Vec2, Vec2] = (
    (0.0, 0.0),
    (1.0 / 16.0, 0.0),
    (1.0 / 16.0, 1.0 / 16.0),
    (0.0, 1.0 / 16.0),
)

_UNIT_TEX_COORDS: tuple[Vec2, Vec2, Vec2, Vec2] = (
    (0.0, 0.0),
    (1.0, 0.0),
    (1.0, 1.0),
    (0.0, 1.0),
)


@dataclass(frozen=True)
class ModelVertex:
    """A vertex with position, texture coordinates and normal."""

    position: Vec3
    tex_coords: Vec2
    normal: Vec3


class Face(Enum):
    """The six faces of a cube."""

    FRONT = "front"
    BACK = "back"
    LEFT = "left"
    RIGHT = "right"
    TOP = "top"
    BOTTOM = "bottom"


class AtlasBlock(Enum):
    """Block kinds that are textured from the atlas."""

    GRASS = "grass"
    NONE = "none"
    STONE = "stone"

    def atlas_uv(self, face: Face, above: AtlasBlock | None = None) -> tuple[int, int]:
        """Return the atlas cell (column, row) used for ``face`` of this block."""
        if self is AtlasBlock.GRASS:
            if face is Face.TOP:
                return (0, 0)
            if face is Face.BOTTOM:
                return (2, 0)
            return (2, 0) if above is AtlasBlock.GRASS else (3, 0)
        if self is AtlasBlock.STONE:
            return (0, 1)
        raise ValueError(f"No texture available for {self.name}")


@dataclass(frozen=True)
class BlockFace:
    """Geometry of one face of the unit cube."""

    face: Face
    vertices: tuple[Vec3, Vec3, Vec3, Vec3]
    normal: Vec3
    tex_coords: tuple[Vec2, Vec2, Vec2, Vec2] = _UNIT_TEX_COORDS


FRONT_FACE = BlockFace(
    Face.FRONT,
    ((0.0, 0.0, 1.0), (1.0, 0.0, 1.0), (1.0, 1.0, 1.0), (0.0, 1.0, 1.0)),
    (0.0, 0.0, 1.0),
)
BACK_FACE = BlockFace(
    Face.BACK,
    ((1.0, 0.0, 0.0), (0.0, 0.0, 0.0), (0.0, 1.0, 0.0), (1.0, 1.0, 0.0)),
    (0.0, 0.0, -1.0),
)
LEFT_FACE = BlockFace(
    Face.LEFT,
    ((0.0, 0.0, 0.0), (0.0, 0.0, 1.0), (0.0, 1.0, 1.0), (0.0, 1.0, 0.0)),
    (-1.0, 0.0, 0.0),
)
RIGHT_FACE = BlockFace(
    Face.RIGHT,
    ((1.0, 0.0, 1.0), (1.0, 0.0, 0.0), (1.0, 1.0, 0.0), (1.0, 1.0, 1.0)),
    (1.0, 0.0, 0.0),
)
TOP_FACE = BlockFace(
    Face.TOP,
    ((0.0, 1.0, 1.0), (1.0, 1.0, 1.0), (1.0, 1.0, 0.0), (0.0, 1.0, 0.0)),
    (0.0, 1.0, 0.0),
)
BOTTOM_FACE = BlockFace(
    Face.BOTTOM,
    ((0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (1.0, 0.0, 1.0), (0.0, 0.0, 1.0)),
    (0.0, -1.0, 0.0),
)

ALL_FACES: tuple[BlockFace, ...] = (
    FRONT_FACE,
    BACK_FACE,
    LEFT_FACE,
    RIGHT_FACE,
    TOP_FACE,
    BOTTOM_FACE,
)


def tex_coords_from_atlas(x: int, y: int) -> tuple[Vec2, Vec2, Vec2, Vec2]:
    """Return the four inset texture coordinates of atlas cell (x, y)."""
    xmin, ymin = ATLAS_STEP * x, ATLAS_STEP * y
    xmax, ymax = xmin + ATLAS_STEP, ymin + ATLAS_STEP
    xmin, ymin = xmin + ATLAS_ADJ, ymin + ATLAS_ADJ
    xmax, ymax = xmax - ATLAS_ADJ, ymax - ATLAS_ADJ
    return ((xmin, ymax), (xmax, ymax), (xmax, ymin), (xmin, ymin))


def generate_face(
    face: BlockFace,
    start_index: int = 0,
    offset: tuple[int, int, int] | None = None,
    texture: tuple[int, int] | None = None,
) -> tuple[list[ModelVertex], list[int]]:
    """Build the four vertices and six indices of ``face``.

    ``start_index`` is the number of vertices already in the target buffer,
    ``offset`` moves the face to a block position and ``texture`` selects
    an atlas cell.
    """
    ox, oy, oz = offset if offset is not None else (0, 0, 0)
    coords = tex_coords_from_atlas(*texture) if texture is not None else DEFAULT_TEX_COORDS
    vertices = [
        ModelVertex(
            position=(px + ox, py + oy, pz + oz),
            tex_coords=uv,
            normal=face.normal,
        )
        for (px, py, pz), uv in zip(face.vertices, coords)
    ]
    s = start_index
    indices = [s, s + 1, s + 2, s, s + 2, s + 3]
    return vertices, indices