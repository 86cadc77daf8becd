from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Dict, List, Sequence, Set, Tuple

from .errors import MapNotFound, NoRouteBetweenMaps
from .graph_loader import MapGraph


@dataclass(frozen=True)
class MapConnection:
    from_map_id: str
    to_map_id: str
    gateway_node_id: str
    target_node_id: str


@dataclass
class GlobalGraph:
    map_ids: List[str]
    connections: Dict[str, Set[str]]
    connection_details: List[MapConnection] = field(default_factory=list)


def build_meta_graph(maps: Sequence[MapGraph]) -> Dict[str, Set[str]]:
    """map id -> ids of maps reachable through at least one valid gateway. Every map gets a key."""
    meta: Dict[str, Set[str]] = {m.id: set() for m in maps}
    for m in maps:
        for node in m.gateways():
            meta[m.id].add(node.gateway.map_id)
    return meta


def build_global_graph(maps: Sequence[MapGraph]) -> GlobalGraph:
    details = [
        MapConnection(
            from_map_id=m.id,
            to_map_id=node.gateway.map_id,
            gateway_node_id=node.id,
            target_node_id=node.gateway.node_id,
        )
        for m in maps
        for node in m.gateways()
    ]
    return GlobalGraph(map_ids=[m.id for m in maps], connections=build_meta_graph(maps), connection_details=details)


def find_map_chain(start_map_id: str, end_map_id: str, maps: Sequence[MapGraph]) -> List[str]:
    """Fewest-hop sequence of map ids from start_map_id to end_map_id (BFS over the meta-graph)."""
    if start_map_id == end_map_id:
        return [start_map_id]

    meta = build_meta_graph(maps)
    if start_map_id not in meta:
        raise MapNotFound(f"Start map '{start_map_id}' not found")
    if end_map_id not in meta:
        raise MapNotFound(f"End map '{end_map_id}' not found")

    visited: Set[str] = {start_map_id}
    queue: Deque[Tuple[str, List[str]]] = deque([(start_map_id, [start_map_id])])
    while queue:
        current, path = queue.popleft()
        if current == end_map_id:
            return path
        # sorted for a reproducible choice among equally short chains
        for nxt in sorted(meta.get(current, ())):
            if nxt not in visited:
                visited.add(nxt)
                queue.append((nxt, path + [nxt]))

    raise NoRouteBetweenMaps(f"No route exists from map '{start_map_id}' to map '{end_map_id}'")
