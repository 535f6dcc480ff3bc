# mini_fair/surface/model.py
"""
SURFACE MODEL: Triangle Mesh with Per-Vertex Properties
=======================================================

PURPOSE:
--------
This module defines the surface the fairing kernel works on:
- Vertices: stable integer handles 0..n-1
- Faces: triangles (a, b, c) given as vertex handles
- Properties: named per-vertex arrays ("v:point", "v:selected", ...)

The kernel only needs a narrow contract from the mesh:

    vertices()            iterate handles
    neighbors(v)          one-ring of v
    is_boundary(v)        v touches an edge with a single incident face
    is_isolated(v)        v has no incident face
    get_vertex_property   look up a named property (None when absent)

Everything topological (one-rings, boundary edges) is derived from the face
list on first use and cached until the mesh changes.

USAGE:
------
    mesh = SurfaceMesh()
    a = mesh.add_vertex([0.0, 0.0, 0.0])
    b = mesh.add_vertex([1.0, 0.0, 0.0])
    c = mesh.add_vertex([0.0, 1.0, 0.0])
    mesh.add_triangle(a, b, c)

    selected = mesh.add_vertex_property("v:selected", False)
    selected[a] = True
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Set, Tuple

import numpy as np

POINT_PROPERTY = "v:point"


@dataclass(frozen=True)
class _Topology:
    """Cached adjacency derived from the face list."""
    neighbors: Tuple[Tuple[int, ...], ...]
    edges: np.ndarray        # (E, 2) with i < j
    edge_faces: np.ndarray   # (E,) number of incident faces per edge
    boundary: np.ndarray     # (n,) bool
    isolated: np.ndarray     # (n,) bool


class SurfaceMesh:
    """
    A triangulated surface with typed per-vertex property storage.

    Parameters:
    -----------
    points : array-like, optional
        Initial vertex positions, shape (n, 3)
    faces : array-like, optional
        Initial triangles, shape (m, 3), as vertex handles

    Notes:
    ------
    - Positions are stored in the "v:point" property and can be edited in
      place through `mesh.points`.
    - Properties are numpy arrays indexed by vertex handle. Adding a vertex
      appends each property's default value.
    """

    def __init__(self, points=None, faces=None):
        self._props: Dict[str, np.ndarray] = {}
        self._defaults: Dict[str, object] = {}
        self._faces: List[Tuple[int, int, int]] = []
        self._topology: Optional[_Topology] = None

        self._props[POINT_PROPERTY] = np.zeros((0, 3), dtype=float)
        self._defaults[POINT_PROPERTY] = np.zeros(3)

        if points is not None:
            for p in np.asarray(points, dtype=float).reshape(-1, 3):
                self.add_vertex(p)
        if faces is not None:
            for a, b, c in np.asarray(faces, dtype=int).reshape(-1, 3):
                self.add_triangle(a, b, c)

    # ------------------------------------------------------------------
    # Elements
    # ------------------------------------------------------------------

    @property
    def n_vertices(self) -> int:
        return len(self._props[POINT_PROPERTY])

    @property
    def n_faces(self) -> int:
        return len(self._faces)

    def vertices(self) -> range:
        return range(self.n_vertices)

    @property
    def faces(self) -> np.ndarray:
        """Triangles as an (m, 3) int array (a copy)."""
        if not self._faces:
            return np.zeros((0, 3), dtype=int)
        return np.array(self._faces, dtype=int)

    def add_vertex(self, point) -> int:
        """Append a vertex and return its handle."""
        p = np.asarray(point, dtype=float).reshape(3)
        for name, arr in self._props.items():
            value = p if name == POINT_PROPERTY else self._defaults[name]
            extended = np.empty((len(arr) + 1,) + arr.shape[1:], dtype=arr.dtype)
            extended[:-1] = arr
            extended[-1] = value
            self._props[name] = extended
        self._topology = None
        return self.n_vertices - 1

    def add_triangle(self, a: int, b: int, c: int) -> int:
        """Append a triangle (a, b, c) and return its face index."""
        tri = (int(a), int(b), int(c))
        n = self.n_vertices
        for v in tri:
            if v < 0 or v >= n:
                raise ValueError(f"Face {tri} references unknown vertex {v} (n_vertices={n})")
        if len(set(tri)) != 3:
            raise ValueError(f"Degenerate face {tri}: vertices must be distinct")
        self._faces.append(tri)
        self._topology = None
        return len(self._faces) - 1

    # ------------------------------------------------------------------
    # Positions
    # ------------------------------------------------------------------

    @property
    def points(self) -> np.ndarray:
        """Vertex positions, shape (n, 3). Writes go straight to the mesh."""
        return self._props[POINT_PROPERTY]

    def position(self, v: int) -> np.ndarray:
        return self._props[POINT_PROPERTY][v].copy()

    def set_position(self, v: int, point) -> None:
        self._props[POINT_PROPERTY][v] = np.asarray(point, dtype=float).reshape(3)

    # ------------------------------------------------------------------
    # Topology
    # ------------------------------------------------------------------

    def _build_topology(self) -> _Topology:
        n = self.n_vertices
        ring: List[Set[int]] = [set() for _ in range(n)]
        edge_count: Dict[Tuple[int, int], int] = {}

        for a, b, c in self._faces:
            for i, j in ((a, b), (b, c), (c, a)):
                ring[i].add(j)
                ring[j].add(i)
                key = (i, j) if i < j else (j, i)
                edge_count[key] = edge_count.get(key, 0) + 1

        if edge_count:
            edges = np.array(sorted(edge_count), dtype=int)
            edge_faces = np.array([edge_count[tuple(e)] for e in edges], dtype=int)
        else:
            edges = np.zeros((0, 2), dtype=int)
            edge_faces = np.zeros(0, dtype=int)

        boundary = np.zeros(n, dtype=bool)
        on_border = edges[edge_faces == 1]
        boundary[on_border.ravel()] = True

        isolated = np.array([len(r) == 0 for r in ring], dtype=bool)

        return _Topology(
            neighbors=tuple(tuple(sorted(r)) for r in ring),
            edges=edges,
            edge_faces=edge_faces,
            boundary=boundary,
            isolated=isolated,
        )

    @property
    def topology(self) -> _Topology:
        if self._topology is None:
            self._topology = self._build_topology()
        return self._topology

    def neighbors(self, v: int) -> Tuple[int, ...]:
        """One-ring neighbors of v, sorted by handle."""
        return self.topology.neighbors[v]

    def is_boundary(self, v: int) -> bool:
        return bool(self.topology.boundary[v])

    def is_isolated(self, v: int) -> bool:
        return bool(self.topology.isolated[v])

    def edges(self) -> np.ndarray:
        """Undirected edges as an (E, 2) array with i < j."""
        return self.topology.edges.copy()

    def boundary_mask(self) -> np.ndarray:
        return self.topology.boundary.copy()

    def isolated_mask(self) -> np.ndarray:
        return self.topology.isolated.copy()

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    def add_vertex_property(self, name: str, default=False, dtype=None) -> np.ndarray:
        """
        Create a per-vertex property filled with `default`.

        An array default (e.g. np.zeros(3)) gives one row of that shape per
        vertex.

        If the property already exists, the existing array is returned
        unchanged.
        """
        if name in self._props:
            return self._props[name]
        arr = np.full((self.n_vertices,) + np.shape(default), default, dtype=dtype)
        self._props[name] = arr
        self._defaults[name] = default
        return arr

    def get_vertex_property(self, name: str) -> Optional[np.ndarray]:
        """Return the named property array, or None if it was never created."""
        return self._props.get(name)

    def has_vertex_property(self, name: str) -> bool:
        return name in self._props

    def remove_vertex_property(self, name: str) -> None:
        if name == POINT_PROPERTY:
            raise ValueError("Cannot remove the vertex position property")
        self._props.pop(name, None)
        self._defaults.pop(name, None)

    def vertex_property_names(self) -> List[str]:
        return list(self._props)

    def copy(self) -> "SurfaceMesh":
        other = SurfaceMesh()
        other._props = {k: v.copy() for k, v in self._props.items()}
        other._defaults = dict(self._defaults)
        other._faces = list(self._faces)
        return other

    def __repr__(self) -> str:
        return f"SurfaceMesh(n_vertices={self.n_vertices}, n_faces={self.n_faces})"


def select_vertices(mesh: SurfaceMesh, vertices: Iterable[int],
                    name: str = "v:selected") -> np.ndarray:
    """
    Mark `vertices` as selected in the boolean property `name`.

    Creates the property if needed and returns it.
    """
    selected = mesh.add_vertex_property(name, False, dtype=bool)
    selected[list(vertices)] = True
    return selected
