import pytest

from backend.app.errors import MapNotFound, NoRouteBetweenMaps
from backend.app.graph_loader import MapGraph, NodeType, make_node
from backend.app.meta_graph import MapConnection, build_global_graph, build_meta_graph, find_map_chain


def test_meta_graph_has_a_key_for_every_map(chain_maps, make_map):
    lonely = make_map("lonely", [("x", "y", 1.0)])

    meta = build_meta_graph(chain_maps + [lonely])

    assert meta == {"m1": {"m2"}, "m2": {"m3"}, "m3": set(), "lonely": set()}


def test_meta_graph_ignores_malformed_gateways():
    m = MapGraph(
        id="m",
        name="M",
        image_url="",
        nodes=[
            make_node("a"),
            make_node("broken", NodeType.GATEWAY, target_map_id="other", target_node_id="  "),
            make_node("no_target", "GATEWAY"),
            make_node("not_a_gateway", NodeType.ROOM, target_map_id="other", target_node_id="x"),
        ],
        adjacency={},
    )

    assert build_meta_graph([m]) == {"m": set()}


def test_meta_graph_keeps_self_loops_and_dedupes(make_map):
    m = make_map(
        "m",
        [("a", "b", 1.0), ("b", "c", 1.0)],
        gateways={"a": ("m", "c"), "b": ("n", "x"), "c": ("n", "y")},
    )

    assert build_meta_graph([m]) == {"m": {"m", "n"}}


def test_same_map_chain_is_single_element(chain_maps):
    assert find_map_chain("m2", "m2", chain_maps) == ["m2"]


def test_chain_follows_gateways(chain_maps):
    assert find_map_chain("m1", "m3", chain_maps) == ["m1", "m2", "m3"]
    assert find_map_chain("m1", "m2", chain_maps) == ["m1", "m2"]


def test_direct_gateways_both_ways_give_two_map_chains(make_map):
    a = make_map("a", [("a1", "a_gw", 1.0)], gateways={"a_gw": ("b", "b_gw")})
    b = make_map("b", [("b1", "b_gw", 1.0)], gateways={"b_gw": ("a", "a_gw")})

    assert find_map_chain("a", "b", [a, b]) == ["a", "b"]
    assert find_map_chain("b", "a", [a, b]) == ["b", "a"]


def test_chain_picks_fewest_hops(make_map):
    # a -> b -> c -> d and a shortcut a -> d
    a = make_map("a", [("a0", "to_b", 1.0), ("a0", "to_d", 99.0)], gateways={"to_b": ("b", "b0"), "to_d": ("d", "d0")})
    b = make_map("b", [("b0", "to_c", 1.0)], gateways={"to_c": ("c", "c0")})
    c = make_map("c", [("c0", "to_d", 1.0)], gateways={"to_d": ("d", "d0")})
    d = make_map("d", [("d0", "d1", 1.0)])

    assert find_map_chain("a", "d", [a, b, c, d]) == ["a", "d"]


def test_unknown_maps_raise_map_not_found(chain_maps):
    with pytest.raises(MapNotFound):
        find_map_chain("nowhere", "m1", chain_maps)
    with pytest.raises(MapNotFound):
        find_map_chain("m1", "nowhere", chain_maps)


def test_one_way_connection_has_no_return_route(chain_maps):
    with pytest.raises(NoRouteBetweenMaps):
        find_map_chain("m3", "m1", chain_maps)


def test_gateway_to_missing_map_does_not_break_search(seed_maps):
    # campus_main has a gateway to block_b_lobby, which is not a loaded map
    assert find_map_chain("campus_main", "floor_1", seed_maps) == ["campus_main", "block_a_lobby", "floor_1"]
    with pytest.raises(MapNotFound):
        find_map_chain("campus_main", "block_b_lobby", seed_maps)


def test_global_graph_lists_every_gateway(chain_maps):
    gg = build_global_graph(chain_maps)

    assert gg.map_ids == ["m1", "m2", "m3"]
    assert gg.connections["m3"] == set()
    assert gg.connection_details == [
        MapConnection(from_map_id="m1", to_map_id="m2", gateway_node_id="m1_gw", target_node_id="m2_entry"),
        MapConnection(from_map_id="m2", to_map_id="m3", gateway_node_id="m2_gw", target_node_id="m3_entry"),
    ]
