from __future__ import annotations

from typing import Dict, FrozenSet, Iterable, List, Sequence, Tuple

from .game_state import Edge, Vertex
from .topology import BoardTopology, standard_topology
from .types import PlayerId


def distance_rule_ok(vertices: Sequence[Vertex], vertex_id: int) -> bool:
    """True iff no vertex adjacent to ``vertex_id`` is owned."""
    return all(vertices[neighbor].owner is None for neighbor in vertices[vertex_id].vertex_ids)


def longest_road(edges: Iterable[Edge], player_id: PlayerId) -> int:
    """Length in edges of the longest trail through ``player_id``'s roads.

    Every owned edge is tried as a start, heading out of each endpoint. A
    branch extends only at its frontier vertex and carries its own visited set,
    so at a junction each pair of arms is explored separately. A closed loop
    counts every edge of the loop.
    """
    owned = [edge for edge in edges if edge.owner is not None and edge.owner == player_id]
    if not owned:
        return 0

    vertex_edges: Dict[int, List[Edge]] = {}
    for edge in owned:
        for vertex_id in edge.vertex_ids:
            vertex_edges.setdefault(vertex_id, []).append(edge)

    best = 0
    for start in owned:
        a, b = start.vertex_ids
        stack: List[Tuple[int, FrozenSet[int], int]] = [
            (b, frozenset((start.edge_id,)), 1),
            (a, frozenset((start.edge_id,)), 1),
        ]
        while stack:
            frontier, visited, length = stack.pop()
            best = max(best, length)
            for edge in vertex_edges[frontier]:
                if edge.edge_id in visited:
                    continue
                v1, v2 = edge.vertex_ids
                following = v2 if v1 == frontier else v1
                stack.append((following, visited | {edge.edge_id}, length + 1))
    return best


class BoardGraph:
    """Neighbor queries over the static topology plus ownership-aware checks."""

    def __init__(self, topology: BoardTopology | None = None):
        self.topology = topology or standard_topology()

    def tiles_for_vertex(self, vertex_id: int) -> Tuple[int, ...]:
        return self.topology.vertex(vertex_id).tile_ids

    def vertices_adjacent_to(self, vertex_id: int) -> Tuple[int, ...]:
        return self.topology.vertex(vertex_id).vertex_ids

    def edges_for_vertex(self, vertex_id: int) -> Tuple[int, ...]:
        return self.topology.vertex(vertex_id).edge_ids

    def vertices_for_tile(self, tile_id: int) -> Tuple[int, ...]:
        return self.topology.tile(tile_id).vertex_ids

    def edges_for_tile(self, tile_id: int) -> Tuple[int, ...]:
        return self.topology.tile(tile_id).edge_ids

    def tile_neighbors(self, tile_id: int) -> Tuple[int, ...]:
        return self.topology.tile(tile_id).neighbor_ids

    def vertices_for_edge(self, edge_id: int) -> Tuple[int, int]:
        return self.topology.edge(edge_id).vertex_ids

    def edges_adjacent_to(self, edge_id: int) -> Tuple[int, ...]:
        return self.topology.edge(edge_id).edge_ids

    def edge_between(self, vertex_a: int, vertex_b: int) -> int | None:
        return self.topology.edge_between(vertex_a, vertex_b)

    def satisfies_distance_rule(self, vertices: Sequence[Vertex], vertex_id: int) -> bool:
        self.topology.vertex(vertex_id)
        return distance_rule_ok(vertices, vertex_id)

    def longest_road(self, edges: Iterable[Edge], player_id: PlayerId) -> int:
        return longest_road(edges, player_id)
