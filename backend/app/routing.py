import heapq
import logging
from typing import Dict, List, Optional, Sequence, Set, Tuple

from .errors import NodeNotFound, NoPathFound
from .graph_loader import MapGraph, Node

LOGGER = logging.getLogger(__name__)


def find_local_path(graph: MapGraph, start_id: str, end_id: str) -> List[str]:
    """Shortest (minimum total weight) node-id path from start_id to end_id within one map.

    Raises NodeNotFound if either id is not a node of `graph`, NoPathFound if
    end_id is unreachable. Ties between equal-distance nodes are broken by
    node id so repeated calls return the same path.
    """
    for label, node_id in (("Start", start_id), ("End", end_id)):
        if not graph.has_node(node_id):
            raise NodeNotFound(f"{label} node '{node_id}' not found in map '{graph.id}'")

    if start_id == end_id:
        return [start_id]

    INF = float("inf")
    dist: Dict[str, float] = {nid: INF for nid in graph.node_index}
    prev: Dict[str, Optional[str]] = {nid: None for nid in graph.node_index}
    visited: Set[str] = set()

    dist[start_id] = 0.0
    pq: List[Tuple[float, str]] = [(0.0, start_id)]

    while pq:
        d, u = heapq.heappop(pq)
        if u in visited:
            continue
        visited.add(u)
        if u == end_id:
            break
        for edge in graph.edges_from(u):
            v = edge.target
            if v in visited:
                continue
            if v not in dist:
                # adjacency may reference ids that are not nodes of this map
                LOGGER.debug("Skipping edge %s -> %s in map %s: unknown target", u, v, graph.id)
                continue
            nd = d + edge.weight
            if nd < dist[v]:
                dist[v] = nd
                prev[v] = u
                heapq.heappush(pq, (nd, v))

    # Walk predecessors back from the end node
    path_rev: List[str] = []
    cur: Optional[str] = end_id
    while cur is not None:
        path_rev.append(cur)
        cur = prev[cur]
    path = list(reversed(path_rev))

    if path[0] != start_id:
        raise NoPathFound(f"No path exists from '{start_id}' to '{end_id}' in map '{graph.id}'")
    return path


def calculate_path_distance(graph: MapGraph, path: Sequence[str]) -> float:
    # Missing edges contribute zero; this does not detect disconnected paths.
    # With parallel edges the cheapest one counts, as it is the one Dijkstra relaxed.
    total = 0.0
    for u, v in zip(path, path[1:]):
        weights = [e.weight for e in graph.edges_from(u) if e.target == v]
        if weights:
            total += min(weights)
    return total


def get_path_nodes(graph: MapGraph, path: Sequence[str]) -> List[Node]:
    """Resolve node ids to Node objects, dropping ids the map does not contain."""
    return [graph.node_index[nid] for nid in path if nid in graph.node_index]
