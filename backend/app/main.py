# backend/app/main.py
from dataclasses import asdict
from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from typing import Any, Dict, List, Optional

from .graph_loader import MapGraph, Node, NodeType
from .logging_config import setup_logging
from .map_store import MapStore, get_default_store, search_nodes
from .meta_graph import build_global_graph
from .navigation import generate_navigation_path, validate_navigation_result
from .schemas import GlobalGraphOut, MapOut, MapSummary, NavigateRequest, NavigationResponse, NodeMatch, NodeOut
from .settings import settings

setup_logging(settings.log_level)

app = FastAPI(title="Navigator API")
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

def get_store() -> MapStore:
    return get_default_store()

def node_out(node: Node) -> Dict[str, Any]:
    gw = None
    if node.gateway is not None:
        gw = {"target_map_id": node.gateway.map_id, "target_node_id": node.gateway.node_id}
    return {
        "id": node.id,
        "type": node.type.value,
        "name": node.name,
        "description": node.description,
        "x": node.x,
        "y": node.y,
        "gateway": gw,
    }

async def require_map(store: MapStore, map_id: str) -> MapGraph:
    graph = await store.get_map(map_id)
    if graph is None:
        raise HTTPException(status_code=404, detail=f"Map not found for id '{map_id}'")
    return graph

@app.get("/healthz")
def healthz():
    return {"status": "ok"}

@app.get("/maps", response_model=List[MapSummary])
async def list_maps(store: MapStore = Depends(get_store)):
    return [
        {"id": m.id, "name": m.name, "image_url": m.image_url, "node_count": len(m.nodes)}
        for m in await store.get_all_maps()
    ]

@app.get("/maps/{map_id}", response_model=MapOut)
async def get_map(map_id: str, store: MapStore = Depends(get_store)):
    graph = await require_map(store, map_id)
    return {
        "id": graph.id,
        "name": graph.name,
        "image_url": graph.image_url,
        "nodes": [node_out(n) for n in graph.nodes],
        "adjacency": {
            u: [{"target": e.target, "weight": e.weight} for e in edges]
            for u, edges in graph.adjacency.items()
        },
    }

@app.get("/maps/{map_id}/nodes", response_model=List[NodeOut])
async def list_nodes(
    map_id: str,
    node_type: Optional[str] = Query(None, alias="type"),
    store: MapStore = Depends(get_store),
):
    graph = await require_map(store, map_id)
    if node_type is None:
        return [node_out(n) for n in graph.nodes]
    try:
        wanted = NodeType(node_type.upper())
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Unknown node type '{node_type}'")
    return [node_out(n) for n in graph.nodes_of_type(wanted)]

@app.get("/graph", response_model=GlobalGraphOut)
async def global_graph(store: MapStore = Depends(get_store)):
    gg = build_global_graph(await store.get_all_maps())
    return {
        "map_ids": gg.map_ids,
        "connections": {k: sorted(v) for k, v in gg.connections.items()},
        "connection_details": [asdict(c) for c in gg.connection_details],
    }

@app.get("/nodes/search", response_model=List[NodeMatch])
async def search(q: str = Query(..., min_length=1), store: MapStore = Depends(get_store)):
    return [{"map_id": map_id, "node": node_out(n)} for map_id, n in await search_nodes(store, q)]

@app.post("/navigate", response_model=NavigationResponse)
async def navigate(req: NavigateRequest, store: MapStore = Depends(get_store)):
    result = await generate_navigation_path(
        req.start_map_id,
        req.start_node_id,
        req.end_map_id,
        req.end_node_id,
        store=store,
    )
    return {**result.to_json_dict(), "valid": validate_navigation_result(result)}
