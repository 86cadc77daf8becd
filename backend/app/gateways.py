import logging
from dataclasses import dataclass
from typing import List, Optional

from .errors import PathfinderError
from .graph_loader import MapGraph, Node
from .routing import calculate_path_distance, find_local_path

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class GatewayChoice:
    gateway: Node
    path: List[str]
    cost: float


def find_gateways_to_map(graph: MapGraph, target_map_id: str) -> List[Node]:
    return [n for n in graph.gateways() if n.gateway.map_id == target_map_id]


def find_best_gateway(graph: MapGraph, start_node_id: str, target_map_id: str) -> Optional[GatewayChoice]:
    """Cheapest reachable gateway in `graph` leading to `target_map_id`, or None if there is none.

    Candidates are tried in node order and only a strictly cheaper one
    replaces the current best, so ties go to the earlier node.
    """
    candidates = find_gateways_to_map(graph, target_map_id)
    LOGGER.debug(
        "Map %s: %d gateway(s) to %s: %s",
        graph.id, len(candidates), target_map_id, [n.id for n in candidates],
    )

    best: Optional[GatewayChoice] = None
    for gw in candidates:
        try:
            path = find_local_path(graph, start_node_id, gw.id)
        except PathfinderError as e:
            LOGGER.debug("Gateway %s unusable from %s: %s", gw.id, start_node_id, e)
            continue
        cost = calculate_path_distance(graph, path)
        if best is None or cost < best.cost:
            best = GatewayChoice(gateway=gw, path=path, cost=cost)

    return best
