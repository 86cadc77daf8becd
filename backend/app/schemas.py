from pydantic import BaseModel
from typing import Dict, List, Optional

class GatewayConfigOut(BaseModel):
    target_map_id: str
    target_node_id: str

class NodeOut(BaseModel):
    id: str
    type: str
    name: str
    description: Optional[str] = None
    x: Optional[float] = None
    y: Optional[float] = None
    gateway: Optional[GatewayConfigOut] = None

class EdgeOut(BaseModel):
    target: str
    weight: float

class MapSummary(BaseModel):
    id: str
    name: str
    image_url: str
    node_count: int

class MapOut(BaseModel):
    id: str
    name: str
    image_url: str
    nodes: List[NodeOut]
    adjacency: Dict[str, List[EdgeOut]]

class NodeMatch(BaseModel):
    map_id: str
    node: NodeOut

class MapConnectionOut(BaseModel):
    from_map_id: str
    to_map_id: str
    gateway_node_id: str
    target_node_id: str

class GlobalGraphOut(BaseModel):
    map_ids: List[str]
    connections: Dict[str, List[str]]
    connection_details: List[MapConnectionOut]

class NavigateRequest(BaseModel):
    start_map_id: str
    start_node_id: str
    end_map_id: str
    end_node_id: str

class NodeRefOut(BaseModel):
    map_id: str
    node_id: str

class SegmentOut(BaseModel):
    map_id: str
    path_node_ids: List[str]
    transition_target: Optional[NodeRefOut] = None

class NavigationResponse(BaseModel):
    success: bool
    total_maps: int = 0
    total_nodes: int = 0
    segments: List[SegmentOut] = []
    start: Optional[NodeRefOut] = None
    end: Optional[NodeRefOut] = None
    error: Optional[str] = None
    error_code: Optional[str] = None
    valid: bool = False
