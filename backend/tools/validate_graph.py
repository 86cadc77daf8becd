#!/usr/bin/env python3
import argparse
import sys
from typing import Dict, List, Set

import numpy as np
import pandas as pd

from backend.app.graph_loader import MapGraph, NodeType, build_map, read_map_frames
from backend.app.map_store import FileMapStore


def frame_problems(map_id: str, nodes: pd.DataFrame, edges: pd.DataFrame) -> List[str]:
    problems = []
    if nodes["node_id"].duplicated().any():
        dups = sorted(nodes.loc[nodes["node_id"].duplicated(), "node_id"].astype(str).unique())
        problems.append(f"{map_id}: duplicate node ids {dups}")

    weights = pd.to_numeric(edges["weight"], errors="coerce").to_numpy(dtype=float)
    bad = ~np.isfinite(weights) | (weights < 0)
    if bad.any():
        problems.append(f"{map_id}: {int(bad.sum())} edge(s) with negative or non-finite weight")

    known = set(nodes["node_id"].astype(str))
    dangling = edges[~edges["source"].astype(str).isin(known) | ~edges["target"].astype(str).isin(known)]
    if len(dangling):
        problems.append(f"{map_id}: {len(dangling)} edge(s) reference unknown nodes")
    return problems


def gateway_problems(maps: Dict[str, MapGraph]) -> List[str]:
    problems = []
    node_ids: Dict[str, Set[str]] = {m.id: set(m.node_index) for m in maps.values()}
    for m in maps.values():
        for n in m.nodes_of_type(NodeType.GATEWAY):
            if n.gateway is None:
                problems.append(f"{m.id}: gateway '{n.id}' has no complete target and is ignored for routing")
            elif n.gateway.map_id not in node_ids:
                problems.append(f"{m.id}: gateway '{n.id}' targets unknown map '{n.gateway.map_id}'")
            elif n.gateway.node_id not in node_ids[n.gateway.map_id]:
                problems.append(
                    f"{m.id}: gateway '{n.id}' targets unknown node '{n.gateway.node_id}' in '{n.gateway.map_id}'"
                )
    return problems


def main(argv=None) -> int:
    ap = argparse.ArgumentParser()
    ap.add_argument("--data-dir", required=True, help="e.g., data/maps")
    args = ap.parse_args(argv)

    store = FileMapStore(args.data_dir)
    problems: List[str] = []
    maps: Dict[str, MapGraph] = {}

    for map_id in store.map_ids():
        nodes, edges, meta = read_map_frames(str(store.data_dir / map_id))
        print(f"{map_id}: {len(nodes)} nodes, {len(edges)} edges")
        problems += frame_problems(map_id, nodes, edges)
        try:
            maps[map_id] = build_map(map_id, nodes, edges, meta)
        except ValueError as e:
            problems.append(f"{map_id}: failed to load: {e}")

    problems += gateway_problems(maps)

    for p in problems:
        print("PROBLEM:", p)
    if problems:
        return 1
    print("OK")
    return 0


if __name__ == "__main__":
    sys.exit(main())
