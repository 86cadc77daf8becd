# backend/app/graph_loader.py
import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

import numpy as np
import pandas as pd

NODE_COLUMNS = ["node_id", "type", "name", "description", "x", "y", "target_map_id", "target_node_id"]
EDGE_COLUMNS = ["source", "target", "weight"]


class NodeType(str, Enum):
    NORMAL = "NORMAL"
    ROOM = "ROOM"
    GATEWAY = "GATEWAY"


@dataclass(frozen=True)
class GatewayTarget:
    map_id: str
    node_id: str


@dataclass(frozen=True)
class Node:
    id: str
    type: NodeType
    name: str
    description: Optional[str] = None
    x: Optional[float] = None
    y: Optional[float] = None
    # Only set for well-formed gateways; a GATEWAY-typed node without a
    # complete target keeps gateway=None and routes like any other node.
    gateway: Optional[GatewayTarget] = None

    @property
    def is_gateway(self) -> bool:
        return self.gateway is not None


@dataclass(frozen=True)
class Edge:
    target: str
    weight: float


@dataclass
class MapGraph:
    id: str
    name: str
    image_url: str
    nodes: List[Node]
    adjacency: Dict[str, List[Edge]]  # node_id -> outgoing edges; missing key = no edges
    node_index: Dict[str, Node] = field(init=False, repr=False)

    def __post_init__(self):
        self.node_index = {n.id: n for n in self.nodes}

    def has_node(self, node_id: str) -> bool:
        return node_id in self.node_index

    def get_node(self, node_id: str) -> Optional[Node]:
        return self.node_index.get(node_id)

    def edges_from(self, node_id: str) -> List[Edge]:
        return self.adjacency.get(node_id, [])

    def gateways(self) -> List[Node]:
        return [n for n in self.nodes if n.is_gateway]

    def nodes_of_type(self, node_type: NodeType) -> List[Node]:
        return [n for n in self.nodes if n.type == node_type]

    def to_document(self) -> Dict[str, Any]:
        nodes = []
        for n in self.nodes:
            doc: Dict[str, Any] = {"id": n.id, "type": n.type.value, "name": n.name}
            if n.description is not None:
                doc["description"] = n.description
            if n.x is not None and n.y is not None:
                doc["x"], doc["y"] = n.x, n.y
            if n.gateway is not None:
                doc["gatewayConfig"] = {"targetMapId": n.gateway.map_id, "targetNodeId": n.gateway.node_id}
            nodes.append(doc)
        return {
            "id": self.id,
            "name": self.name,
            "imageUrl": self.image_url,
            "nodes": nodes,
            "adjacencyList": {
                u: [{"targetNodeId": e.target, "weight": e.weight} for e in edges]
                for u, edges in self.adjacency.items()
            },
        }


def _opt_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str) and pd.isna(value):
        return None
    return str(value)


def _opt_float(value: Any) -> Optional[float]:
    if value is None or pd.isna(value):
        return None
    return float(value)


def parse_node_type(value: Any) -> NodeType:
    raw = _opt_str(value)
    if raw is None or not raw.strip():
        return NodeType.NORMAL
    return NodeType(raw.strip().upper())  # ValueError on unknown classification


def parse_gateway(node_type: NodeType, target_map_id: Any, target_node_id: Any) -> Optional[GatewayTarget]:
    if node_type != NodeType.GATEWAY:
        return None
    if not (isinstance(target_map_id, str) and isinstance(target_node_id, str)):
        return None
    if not target_map_id.strip() or not target_node_id.strip():
        return None
    return GatewayTarget(map_id=target_map_id, node_id=target_node_id)


def make_node(
    node_id: str,
    node_type: Any = NodeType.NORMAL,
    name: Optional[str] = None,
    description: Optional[str] = None,
    x: Any = None,
    y: Any = None,
    target_map_id: Any = None,
    target_node_id: Any = None,
) -> Node:
    ntype = node_type if isinstance(node_type, NodeType) else parse_node_type(node_type)
    return Node(
        id=str(node_id),
        type=ntype,
        name=name if name is not None else str(node_id),
        description=_opt_str(description),
        x=_opt_float(x),
        y=_opt_float(y),
        gateway=parse_gateway(ntype, target_map_id, target_node_id),
    )


def map_from_document(doc: Mapping[str, Any]) -> MapGraph:
    """Build a MapGraph from a stored map document (camelCase keys, adjacencyList of {targetNodeId, weight})."""
    nodes = []
    for nd in doc.get("nodes") or []:
        gw = nd.get("gatewayConfig") or {}
        nodes.append(make_node(
            nd["id"],
            nd.get("type"),
            name=nd.get("name"),
            description=nd.get("description"),
            x=nd.get("x"),
            y=nd.get("y"),
            target_map_id=gw.get("targetMapId"),
            target_node_id=gw.get("targetNodeId"),
        ))

    adjacency: Dict[str, List[Edge]] = {}
    for u, edges in (doc.get("adjacencyList") or {}).items():
        adjacency[str(u)] = [Edge(target=str(e["targetNodeId"]), weight=float(e["weight"])) for e in edges]

    return MapGraph(
        id=str(doc["id"]),
        name=str(doc.get("name") or doc["id"]),
        image_url=str(doc.get("imageUrl") or ""),
        nodes=nodes,
        adjacency=adjacency,
    )


def check_edge_weights(edges_df: pd.DataFrame) -> np.ndarray:
    """Return the edge weights as floats, raising ValueError on negative or non-finite values."""
    weights = pd.to_numeric(edges_df["weight"], errors="coerce").to_numpy(dtype=float)
    bad = ~np.isfinite(weights) | (weights < 0)
    if bad.any():
        rows = np.flatnonzero(bad).tolist()
        raise ValueError(f"Invalid edge weights at rows {rows}: weights must be finite and >= 0")
    return weights


def build_map(map_id: str, nodes_df: pd.DataFrame, edges_df: pd.DataFrame, meta: Mapping[str, Any]) -> MapGraph:
    nodes = [
        make_node(
            r["node_id"],
            r.get("type"),
            name=_opt_str(r.get("name")),
            description=r.get("description"),
            x=r.get("x"),
            y=r.get("y"),
            target_map_id=_opt_str(r.get("target_map_id")),
            target_node_id=_opt_str(r.get("target_node_id")),
        )
        for _, r in nodes_df.iterrows()
    ]

    adjacency: Dict[str, List[Edge]] = {}
    if len(edges_df):
        weights = check_edge_weights(edges_df)
        for (_, r), w in zip(edges_df.iterrows(), weights):
            adjacency.setdefault(str(r["source"]), []).append(Edge(target=str(r["target"]), weight=float(w)))

    return MapGraph(
        id=map_id,
        name=str(meta.get("name") or map_id),
        image_url=str(meta.get("image_url") or ""),
        nodes=nodes,
        adjacency=adjacency,
    )


def map_to_frames(graph: MapGraph) -> Tuple[pd.DataFrame, pd.DataFrame, Dict[str, Any]]:
    nodes_df = pd.DataFrame(
        [
            {
                "node_id": n.id,
                "type": n.type.value,
                "name": n.name,
                "description": n.description,
                "x": n.x,
                "y": n.y,
                "target_map_id": n.gateway.map_id if n.gateway else None,
                "target_node_id": n.gateway.node_id if n.gateway else None,
            }
            for n in graph.nodes
        ],
        columns=NODE_COLUMNS,
    )
    edges_df = pd.DataFrame(
        [{"source": u, "target": e.target, "weight": e.weight} for u, edges in graph.adjacency.items() for e in edges],
        columns=EDGE_COLUMNS,
    )
    meta = {"id": graph.id, "name": graph.name, "image_url": graph.image_url}
    return nodes_df, edges_df, meta


def read_map_frames(prefix: str) -> Tuple[pd.DataFrame, pd.DataFrame, Dict[str, Any]]:
    nodes = pd.read_parquet(prefix + ".nodes.parquet")
    edges = pd.read_parquet(prefix + ".edges.parquet")
    with open(prefix + ".meta.json") as f:
        meta = json.load(f)
    return nodes, edges, meta


def load_map(prefix: str, map_id: str) -> MapGraph:
    nodes, edges, meta = read_map_frames(prefix)
    return build_map(map_id, nodes, edges, meta)
