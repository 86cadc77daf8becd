"""Multi-map route assembly.

`generate_navigation_path` resolves which maps to cross, picks the cheapest
gateway on every intermediate map and stitches the per-map shortest paths
into one list of segments. It never raises for expected failures: the
caller gets a `NavigationResult` and must check `success` before reading
the segments.
"""
import logging
import time
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

from .errors import INTERNAL_ERROR, GatewayNotFound, InvalidInput, MapNotFound, NodeNotFound, PathfinderError
from .gateways import find_best_gateway
from .map_store import MapStore, get_default_store
from .meta_graph import find_map_chain
from .routing import find_local_path

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class NodeRef:
    map_id: str
    node_id: str


@dataclass
class NavigationSegment:
    map_id: str
    path_node_ids: List[str]
    transition_target: Optional[NodeRef] = None  # None on the final segment


@dataclass
class NavigationResult:
    success: bool
    total_maps: int = 0
    # Sum of segment path lengths; a transition node is counted in both segments it joins.
    total_nodes: int = 0
    segments: List[NavigationSegment] = field(default_factory=list)
    start: Optional[NodeRef] = None
    end: Optional[NodeRef] = None
    error: Optional[str] = None
    error_code: Optional[str] = None

    @classmethod
    def failure(cls, message: str, code: str) -> "NavigationResult":
        return cls(success=False, error=message, error_code=code)

    def to_json_dict(self) -> Dict[str, Any]:
        return asdict(self)


async def _assemble(
    store: MapStore,
    start_map_id: str,
    start_node_id: str,
    end_map_id: str,
    end_node_id: str,
) -> NavigationResult:
    if not (start_map_id and start_node_id and end_map_id and end_node_id):
        raise InvalidInput("All parameters (start_map_id, start_node_id, end_map_id, end_node_id) are required")

    all_maps = await store.get_all_maps()
    chain = find_map_chain(start_map_id, end_map_id, all_maps)

    segments: List[NavigationSegment] = []
    entry_node_id = start_node_id

    for i, map_id in enumerate(chain):
        graph = await store.get_map(map_id)
        if graph is None:
            raise MapNotFound(f"Map '{map_id}' not found")
        if not graph.has_node(entry_node_id):
            raise NodeNotFound(f"Node '{entry_node_id}' not found in map '{map_id}'")

        if i == len(chain) - 1:
            path = find_local_path(graph, entry_node_id, end_node_id)
            segments.append(NavigationSegment(map_id=map_id, path_node_ids=path))
            break

        next_map_id = chain[i + 1]
        choice = find_best_gateway(graph, entry_node_id, next_map_id)
        if choice is None:
            raise GatewayNotFound(f"No gateway found from map '{map_id}' to map '{next_map_id}'")

        target = choice.gateway.gateway
        segments.append(NavigationSegment(
            map_id=map_id,
            path_node_ids=choice.path,
            transition_target=NodeRef(map_id=target.map_id, node_id=target.node_id),
        ))
        entry_node_id = target.node_id

    return NavigationResult(
        success=True,
        total_maps=len(chain),
        total_nodes=sum(len(s.path_node_ids) for s in segments),
        segments=segments,
        start=NodeRef(map_id=start_map_id, node_id=start_node_id),
        end=NodeRef(map_id=end_map_id, node_id=end_node_id),
    )


async def generate_navigation_path(
    start_map_id: str,
    start_node_id: str,
    end_map_id: str,
    end_node_id: str,
    store: Optional[MapStore] = None,
) -> NavigationResult:
    store = store if store is not None else get_default_store()
    t0_ns = time.perf_counter_ns()

    try:
        result = await _assemble(store, start_map_id, start_node_id, end_map_id, end_node_id)
    except PathfinderError as e:
        result = NavigationResult.failure(e.message, e.code)
    except Exception as e:
        LOGGER.exception("Unexpected error while routing %s/%s -> %s/%s", start_map_id, start_node_id, end_map_id, end_node_id)
        result = NavigationResult.failure(str(e) or "Unknown pathfinding error", INTERNAL_ERROR)

    duration_ms = int((time.perf_counter_ns() - t0_ns) / 1_000_000)
    LOGGER.info(
        "generate_navigation_path: start=%s/%s end=%s/%s outcome=%s maps=%d nodes=%d duration_ms=%d",
        start_map_id,
        start_node_id,
        end_map_id,
        end_node_id,
        "ok" if result.success else result.error_code,
        result.total_maps,
        result.total_nodes,
        duration_ms,
    )
    return result


def navigation_result_problems(result: NavigationResult) -> List[str]:
    """Reasons `result` is not a consistent, executable route; empty when it is."""
    if not result.success:
        return ["result is not marked successful"]
    segments = result.segments
    if not segments:
        return ["result has no segments"]

    problems = []
    for i, seg in enumerate(segments):
        if not seg.path_node_ids:
            problems.append(f"segment {i} ({seg.map_id}) has an empty path")

    for i, (cur, nxt) in enumerate(zip(segments, segments[1:])):
        t = cur.transition_target
        if t is None:
            problems.append(f"segment {i} ({cur.map_id}) has no transition target")
            continue
        if t.map_id != nxt.map_id:
            problems.append(f"segment {i} transitions to map '{t.map_id}' but segment {i + 1} is on '{nxt.map_id}'")
        if nxt.path_node_ids and nxt.path_node_ids[0] != t.node_id:
            problems.append(f"segment {i + 1} starts at '{nxt.path_node_ids[0]}', expected '{t.node_id}'")

    if segments[-1].transition_target is not None:
        problems.append("final segment has a transition target")

    first, last = segments[0], segments[-1]
    if result.start is not None and first.path_node_ids:
        if (first.map_id, first.path_node_ids[0]) != (result.start.map_id, result.start.node_id):
            problems.append("route does not begin at the requested start node")
    if result.end is not None and last.path_node_ids:
        if (last.map_id, last.path_node_ids[-1]) != (result.end.map_id, result.end.node_id):
            problems.append("route does not end at the requested end node")

    return problems


def validate_navigation_result(result: NavigationResult) -> bool:
    return not navigation_result_problems(result)
