#!/usr/bin/env python3
"""Convert JSON map documents into the per-map parquet/meta files read by FileMapStore.

The input is either one map document or a list of them:
    {"id": ..., "name": ..., "imageUrl": ..., "nodes": [...], "adjacencyList": {...}}
"""
import argparse
import json
import pathlib
import sys
from typing import Any, Dict, List

from backend.app.graph_loader import MapGraph, map_from_document, map_to_frames


def read_documents(path: pathlib.Path) -> List[Dict[str, Any]]:
    with open(path) as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = data.get("maps", [data])
    return list(data)


def write_map(graph: MapGraph, out_dir: pathlib.Path) -> pathlib.Path:
    nodes, edges, meta = map_to_frames(graph)
    prefix = out_dir / graph.id
    nodes.to_parquet(str(prefix) + ".nodes.parquet", index=False)
    edges.to_parquet(str(prefix) + ".edges.parquet", index=False)
    with open(str(prefix) + ".meta.json", "w") as f:
        json.dump(meta, f, indent=2)
    return prefix


def main(argv=None) -> int:
    ap = argparse.ArgumentParser()
    ap.add_argument("--input", required=True, help="JSON file holding one map document or a list of them")
    ap.add_argument("--out-dir", default="data/maps")
    args = ap.parse_args(argv)

    out_dir = pathlib.Path(args.out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    for doc in read_documents(pathlib.Path(args.input)):
        graph = map_from_document(doc)
        prefix = write_map(graph, out_dir)
        n_edges = sum(len(v) for v in graph.adjacency.values())
        print(f"Wrote {prefix}.* ({len(graph.nodes)} nodes, {n_edges} edges, {len(graph.gateways())} gateways)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
