"""Static board topology: which tiles, vertices and edges touch each other.

The standard board is a radius-2 hexagon of 19 tiles. Tile corners are
deduplicated into 54 vertices and consecutive corners into 72 edges. Nothing
here changes during a game; ownership lives on the game state.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Dict, List, Tuple

import networkx as nx

from .constants import PORT_SEQUENCE, PORT_SLOTS
from .errors import ContractError
from .types import PortType

AXIAL_RADIUS = 2

CORNER_OFFSETS = [
    (0, 4),
    (2, 2),
    (2, -2),
    (0, -4),
    (-2, -2),
    (-2, 2),
]

AXIAL_DIRECTIONS = [
    (1, 0),
    (1, -1),
    (0, -1),
    (-1, 0),
    (-1, 1),
    (0, 1),
]


@dataclass(frozen=True)
class TileTopology:
    tile_id: int
    axial: Tuple[int, int]
    vertex_ids: Tuple[int, ...]
    edge_ids: Tuple[int, ...]
    neighbor_ids: Tuple[int, ...]


@dataclass(frozen=True)
class VertexTopology:
    vertex_id: int
    tile_ids: Tuple[int, ...]
    edge_ids: Tuple[int, ...]
    vertex_ids: Tuple[int, ...]


@dataclass(frozen=True)
class EdgeTopology:
    edge_id: int
    vertex_ids: Tuple[int, int]
    tile_ids: Tuple[int, ...]
    edge_ids: Tuple[int, ...]


@dataclass(frozen=True)
class PortLocation:
    port_type: PortType
    vertex_ids: Tuple[int, int]


@dataclass(frozen=True)
class BoardTopology:
    tiles: Tuple[TileTopology, ...]
    vertices: Tuple[VertexTopology, ...]
    edges: Tuple[EdgeTopology, ...]
    ports: Tuple[PortLocation, ...]

    def tile(self, tile_id: int) -> TileTopology:
        return _lookup(self.tiles, tile_id, "tile")

    def vertex(self, vertex_id: int) -> VertexTopology:
        return _lookup(self.vertices, vertex_id, "vertex")

    def edge(self, edge_id: int) -> EdgeTopology:
        return _lookup(self.edges, edge_id, "edge")

    def port_for_vertex(self, vertex_id: int) -> PortType:
        self.vertex(vertex_id)
        for port in self.ports:
            if vertex_id in port.vertex_ids:
                return port.port_type
        return PortType.NONE

    def edge_between(self, vertex_a: int, vertex_b: int) -> int | None:
        for edge_id in self.vertex(vertex_a).edge_ids:
            if vertex_b in self.edges[edge_id].vertex_ids:
                return edge_id
        return None


def _lookup(items, item_id, label):
    if not isinstance(item_id, int) or isinstance(item_id, bool) or not 0 <= item_id < len(items):
        raise ContractError(f"Unknown {label} id: {item_id!r}")
    return items[item_id]


def axial_coords(radius: int = AXIAL_RADIUS) -> List[Tuple[int, int]]:
    coords: List[Tuple[int, int]] = []
    for q in range(-radius, radius + 1):
        for r in range(-radius, radius + 1):
            if -radius <= q + r <= radius:
                coords.append((q, r))
    return coords


def axial_center(q: int, r: int) -> Tuple[int, int]:
    size = 2
    return (size * (2 * q + r), size * (3 * r))


def build_tile_neighbors(coords: List[Tuple[int, int]]) -> Dict[int, List[int]]:
    coord_to_id = {coord: tile_id for tile_id, coord in enumerate(coords)}
    neighbors: Dict[int, List[int]] = {}
    for tile_id, (q, r) in enumerate(coords):
        tile_neighbors: List[int] = []
        for dq, dr in AXIAL_DIRECTIONS:
            neighbor_coord = (q + dq, r + dr)
            if neighbor_coord in coord_to_id:
                tile_neighbors.append(coord_to_id[neighbor_coord])
        neighbors[tile_id] = tile_neighbors
    return neighbors


def _coastline(graph: nx.Graph, edge_tiles: Dict[int, List[int]]) -> List[int]:
    """Edge ids of the coast, walked in order from the lowest coastal vertex."""
    coast = nx.Graph()
    for a, b, data in graph.edges(data=True):
        if len(edge_tiles[data["edge_id"]]) == 1:
            coast.add_edge(a, b, edge_id=data["edge_id"])
    cycle = nx.find_cycle(coast, source=min(coast.nodes))
    return [coast.edges[a, b]["edge_id"] for a, b in cycle]


def build_topology(radius: int = AXIAL_RADIUS) -> BoardTopology:
    coords = axial_coords(radius)
    neighbors = build_tile_neighbors(coords)

    vertex_map: Dict[Tuple[int, int], int] = {}
    edge_map: Dict[Tuple[int, int], int] = {}
    tile_vertices: Dict[int, List[int]] = {}
    tile_edges: Dict[int, List[int]] = {}
    vertex_tiles: Dict[int, List[int]] = {}
    edge_tiles: Dict[int, List[int]] = {}
    graph = nx.Graph()

    def vertex_id_for(coord: Tuple[int, int]) -> int:
        if coord not in vertex_map:
            vid = len(vertex_map)
            vertex_map[coord] = vid
            vertex_tiles[vid] = []
            graph.add_node(vid)
        return vertex_map[coord]

    for tile_id, (q, r) in enumerate(coords):
        cx, cy = axial_center(q, r)
        vertex_ids = [vertex_id_for((cx + ox, cy + oy)) for ox, oy in CORNER_OFFSETS]
        for vid in vertex_ids:
            vertex_tiles[vid].append(tile_id)
        tile_vertices[tile_id] = vertex_ids

        edge_ids: List[int] = []
        for i in range(6):
            a = vertex_ids[i]
            b = vertex_ids[(i + 1) % 6]
            edge_key = (min(a, b), max(a, b))
            if edge_key not in edge_map:
                eid = len(edge_map)
                edge_map[edge_key] = eid
                edge_tiles[eid] = []
                graph.add_edge(a, b, edge_id=eid)
            edge_tiles[edge_map[edge_key]].append(tile_id)
            edge_ids.append(edge_map[edge_key])
        tile_edges[tile_id] = edge_ids

    tiles = tuple(
        TileTopology(
            tile_id=tile_id,
            axial=coords[tile_id],
            vertex_ids=tuple(tile_vertices[tile_id]),
            edge_ids=tuple(tile_edges[tile_id]),
            neighbor_ids=tuple(sorted(neighbors[tile_id])),
        )
        for tile_id in range(len(coords))
    )

    vertices = tuple(
        VertexTopology(
            vertex_id=vid,
            tile_ids=tuple(sorted(vertex_tiles[vid])),
            edge_ids=tuple(sorted(graph.edges[vid, other]["edge_id"] for other in graph.neighbors(vid))),
            vertex_ids=tuple(sorted(graph.neighbors(vid))),
        )
        for vid in range(graph.number_of_nodes())
    )

    edges_by_id = {eid: key for key, eid in edge_map.items()}
    edges: List[EdgeTopology] = []
    for eid in range(len(edges_by_id)):
        a, b = edges_by_id[eid]
        touching = set(vertices[a].edge_ids) | set(vertices[b].edge_ids)
        touching.discard(eid)
        edges.append(
            EdgeTopology(
                edge_id=eid,
                vertex_ids=(a, b),
                tile_ids=tuple(sorted(edge_tiles[eid])),
                edge_ids=tuple(sorted(touching)),
            )
        )

    coastline = _coastline(graph, edge_tiles)
    ports = tuple(
        PortLocation(port_type=port_type, vertex_ids=edges_by_id[coastline[slot]])
        for slot, port_type in zip(PORT_SLOTS, PORT_SEQUENCE)
    )

    return BoardTopology(tiles=tiles, vertices=vertices, edges=tuple(edges), ports=ports)


@lru_cache(maxsize=1)
def standard_topology() -> BoardTopology:
    return build_topology(AXIAL_RADIUS)
