# backend/tests/conftest.py
import json
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

import pytest

from backend.app.graph_loader import Edge, MapGraph, NodeType, make_node, map_from_document
from backend.app.map_store import InMemoryMapStore

SEED_FILE = Path(__file__).resolve().parents[2] / "data" / "seed" / "campus.json"


def _make_map(
    map_id: str,
    edges: Iterable[Tuple[str, str, float]],
    gateways: Optional[Dict[str, Tuple[str, str]]] = None,
    extra_nodes: Iterable[str] = (),
    bidirectional: bool = True,
) -> MapGraph:
    gateways = gateways or {}
    edges = list(edges)
    order: List[str] = []
    for nid in [x for u, v, _ in edges for x in (u, v)] + list(extra_nodes) + list(gateways):
        if nid not in order:
            order.append(nid)

    nodes = []
    for nid in order:
        if nid in gateways:
            target_map, target_node = gateways[nid]
            nodes.append(make_node(nid, NodeType.GATEWAY, target_map_id=target_map, target_node_id=target_node))
        else:
            nodes.append(make_node(nid))

    adjacency: Dict[str, List[Edge]] = {}
    for u, v, w in edges:
        adjacency.setdefault(u, []).append(Edge(target=v, weight=float(w)))
        if bidirectional:
            adjacency.setdefault(v, []).append(Edge(target=u, weight=float(w)))
    return MapGraph(id=map_id, name=map_id.upper(), image_url=f"/maps/{map_id}.png", nodes=nodes, adjacency=adjacency)


@pytest.fixture
def make_map():
    return _make_map


@pytest.fixture
def seed_maps() -> List[MapGraph]:
    with open(SEED_FILE) as f:
        return [map_from_document(doc) for doc in json.load(f)["maps"]]


@pytest.fixture
def seed_store(seed_maps) -> InMemoryMapStore:
    return InMemoryMapStore(seed_maps)


@pytest.fixture
def chain_maps(make_map) -> List[MapGraph]:
    """M1 -> M2 -> M3, one gateway per hop."""
    m1 = make_map("m1", [("m1_entry", "m1_hall", 3), ("m1_hall", "m1_gw", 4)], gateways={"m1_gw": ("m2", "m2_entry")})
    m2 = make_map("m2", [("m2_entry", "m2_hall", 2), ("m2_hall", "m2_gw", 2)], gateways={"m2_gw": ("m3", "m3_entry")})
    m3 = make_map("m3", [("m3_entry", "m3_corridor", 5), ("m3_corridor", "m3_room", 1)])
    return [m1, m2, m3]
