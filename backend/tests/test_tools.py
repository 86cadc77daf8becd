import json

from backend.app.graph_loader import read_map_frames
from backend.tools import build_maps, validate_graph

SEED = {
    "maps": [
        {
            "id": "hall",
            "name": "Hall",
            "imageUrl": "/maps/hall.png",
            "nodes": [
                {"id": "door", "type": "NORMAL", "name": "Door"},
                {"id": "lift", "type": "GATEWAY", "name": "Lift",
                 "gatewayConfig": {"targetMapId": "roof", "targetNodeId": "landing"}},
            ],
            "adjacencyList": {"door": [{"targetNodeId": "lift", "weight": 4}]},
        },
        {
            "id": "roof",
            "name": "Roof",
            "imageUrl": "/maps/roof.png",
            "nodes": [{"id": "landing", "type": "NORMAL", "name": "Landing"}],
            "adjacencyList": {},
        },
    ]
}


def _build(tmp_path, seed):
    src = tmp_path / "seed.json"
    src.write_text(json.dumps(seed))
    out = tmp_path / "maps"
    assert build_maps.main(["--input", str(src), "--out-dir", str(out)]) == 0
    return out


def test_build_maps_writes_one_file_set_per_map(tmp_path):
    out = _build(tmp_path, SEED)

    nodes, edges, meta = read_map_frames(str(out / "hall"))
    assert meta == {"id": "hall", "name": "Hall", "image_url": "/maps/hall.png"}
    assert list(nodes["node_id"]) == ["door", "lift"]
    assert edges.to_dict("records") == [{"source": "door", "target": "lift", "weight": 4.0}]
    assert (out / "roof.meta.json").exists()


def test_validate_graph_accepts_consistent_maps(tmp_path, capsys):
    out = _build(tmp_path, SEED)

    assert validate_graph.main(["--data-dir", str(out)]) == 0
    assert "OK" in capsys.readouterr().out


def test_validate_graph_reports_dangling_gateway_and_edges(tmp_path, capsys):
    seed = json.loads(json.dumps(SEED))
    seed["maps"][0]["nodes"][1]["gatewayConfig"]["targetNodeId"] = "attic"
    seed["maps"][0]["adjacencyList"]["door"].append({"targetNodeId": "ghost", "weight": 1})
    out = _build(tmp_path, seed)

    assert validate_graph.main(["--data-dir", str(out)]) == 1
    printed = capsys.readouterr().out
    assert "targets unknown node 'attic'" in printed
    assert "reference unknown nodes" in printed
