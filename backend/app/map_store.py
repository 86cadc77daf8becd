# backend/app/map_store.py
import asyncio
import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Protocol, Tuple, Union

from .graph_loader import MapGraph, Node, NodeType, load_map
from .settings import settings

LOGGER = logging.getLogger(__name__)


class MapStore(Protocol):
    """Source of map snapshots consumed by the navigation core."""

    async def get_map(self, map_id: str) -> Optional[MapGraph]:
        ...

    async def get_all_maps(self) -> List[MapGraph]:
        ...


class InMemoryMapStore:
    def __init__(self, maps: Iterable[MapGraph] = ()):
        self._maps: Dict[str, MapGraph] = {m.id: m for m in maps}

    def put(self, graph: MapGraph) -> None:
        self._maps[graph.id] = graph

    async def get_map(self, map_id: str) -> Optional[MapGraph]:
        return self._maps.get(map_id)

    async def get_all_maps(self) -> List[MapGraph]:
        return list(self._maps.values())


class FileMapStore:
    """Maps stored as `<id>.nodes.parquet`, `<id>.edges.parquet` and `<id>.meta.json` in one directory.

    Loaded maps are cached per process; call `invalidate()` after the files change.
    """

    def __init__(self, data_dir: Union[str, Path]):
        self.data_dir = Path(data_dir)
        self._cache: Dict[str, MapGraph] = {}

    def map_ids(self) -> List[str]:
        return sorted(p.name[: -len(".meta.json")] for p in self.data_dir.glob("*.meta.json"))

    def _exists(self, map_id: str) -> bool:
        if not map_id or Path(map_id).name != map_id:
            return False
        prefix = self.data_dir / map_id
        return all(Path(str(prefix) + suffix).exists() for suffix in (".nodes.parquet", ".edges.parquet", ".meta.json"))

    def invalidate(self, map_id: Optional[str] = None) -> None:
        if map_id is None:
            self._cache.clear()
        else:
            self._cache.pop(map_id, None)

    async def get_map(self, map_id: str) -> Optional[MapGraph]:
        if map_id in self._cache:
            return self._cache[map_id]
        if not self._exists(map_id):
            return None
        LOGGER.info("Loading map '%s' from %s", map_id, self.data_dir)
        graph = await asyncio.to_thread(load_map, str(self.data_dir / map_id), map_id)
        self._cache[map_id] = graph
        return graph

    async def get_all_maps(self) -> List[MapGraph]:
        maps = []
        for map_id in self.map_ids():
            graph = await self.get_map(map_id)
            if graph is not None:
                maps.append(graph)
        return maps


_default_store: Optional[FileMapStore] = None


def get_default_store() -> FileMapStore:
    global _default_store
    if _default_store is None or _default_store.data_dir != Path(settings.maps_dir):
        _default_store = FileMapStore(settings.maps_dir)
    return _default_store


async def find_node_globally(store: MapStore, node_id: str) -> Optional[Tuple[str, Node]]:
    for graph in await store.get_all_maps():
        node = graph.get_node(node_id)
        if node is not None:
            return graph.id, node
    return None


async def search_nodes(store: MapStore, term: str) -> List[Tuple[str, Node]]:
    needle = term.lower()
    return [
        (graph.id, node)
        for graph in await store.get_all_maps()
        for node in graph.nodes
        if needle in node.name.lower()
    ]


async def _nodes_of_type(store: MapStore, map_id: str, node_type: NodeType) -> List[Node]:
    graph = await store.get_map(map_id)
    return graph.nodes_of_type(node_type) if graph is not None else []


async def get_gateway_nodes(store: MapStore, map_id: str) -> List[Node]:
    # By classification, so malformed gateways show up here too
    return await _nodes_of_type(store, map_id, NodeType.GATEWAY)


async def get_room_nodes(store: MapStore, map_id: str) -> List[Node]:
    return await _nodes_of_type(store, map_id, NodeType.ROOM)
