import pytest

from flowbot.flows.services.graph import (
    FlowGraph,
    NodeType,
    build_node_map,
    find_branch_option_node,
    find_edge_by_handle,
    find_start_node,
    get_node,
    outgoing_edges,
)

from conftest import BRANCH_FLOW, make_graph


def test_from_dict_normalises_ids_and_types():
    graph = FlowGraph.from_dict({
        "nodes": [{"id": 1, "type": "message", "data": {"message": "hi"}}, {"id": 2, "type": "carousel"}],
        "edges": [{"source": 1, "target": 2}],
    })

    assert [node.id for node in graph.nodes] == ["1", "2"]
    assert graph.nodes[1].type is NodeType.UNKNOWN
    assert graph.nodes[1].raw_type == "carousel"
    assert graph.nodes[1].data == {}
    assert graph.edges[0].source == "1" and graph.edges[0].target == "2"
    assert graph.edges[0].source_handle is None


def test_from_dict_accepts_json_string_and_tolerates_garbage():
    graph = FlowGraph.from_dict('{"nodes": [{"id": "1", "type": "message"}], "edges": []}')
    assert len(graph.nodes) == 1

    assert FlowGraph.from_dict("{not json").nodes == []
    assert FlowGraph.from_dict(None).edges == []


def test_node_map_lookup_compares_ids_as_strings():
    node_map = build_node_map(make_graph([{"id": "7", "type": "message"}]))

    assert get_node(node_map, 7).id == "7"
    assert get_node(node_map, "8") is None
    assert get_node(node_map, None) is None


def test_outgoing_edges_keep_definition_order():
    graph = make_graph(
        [{"id": "1", "type": "branch"}],
        [
            {"source": "1", "target": "c"},
            {"source": "2", "target": "x"},
            {"source": "1", "target": "a"},
        ],
    )

    assert [edge.target for edge in outgoing_edges(graph.edges, "1")] == ["c", "a"]


def test_find_edge_by_handle_is_case_insensitive():
    graph = make_graph([], [
        {"source": "1", "target": "2", "sourceHandle": "Yes"},
        {"source": "1", "target": "3", "sourceHandle": "no"},
    ])

    assert find_edge_by_handle(graph.edges, "1", "YES").target == "2"
    assert find_edge_by_handle(graph.edges, "1", "yes").target == "2"
    assert find_edge_by_handle(graph.edges, "1", "No").target == "3"
    assert find_edge_by_handle(graph.edges, "1", "maybe") is None


def test_find_edge_by_handle_defaults_to_single_unlabeled_edge():
    single = make_graph([], [{"source": "1", "target": "2"}])
    assert find_edge_by_handle(single.edges, "1", "anything").target == "2"

    two = make_graph([], [{"source": "1", "target": "2"}, {"source": "1", "target": "3"}])
    assert find_edge_by_handle(two.edges, "1", "anything") is None

    labeled = make_graph([], [{"source": "1", "target": "2", "sourceHandle": "error"}])
    assert find_edge_by_handle(labeled.edges, "1", "success") is None


def test_find_start_node_prefers_id_one():
    graph = make_graph([{"id": "9", "type": "message"}, {"id": "1", "type": "message"}])
    assert find_start_node(graph).id == "1"

    graph = make_graph([{"id": "9", "type": "message"}, {"id": "4", "type": "message"}])
    assert find_start_node(graph).id == "9"

    assert find_start_node(make_graph([])) is None


def test_branch_selection_by_index_and_label_agree():
    node_map = build_node_map(FlowGraph.from_dict(BRANCH_FLOW))
    branch = node_map["2"]

    assert find_branch_option_node(node_map, branch, 0) == "3"
    assert find_branch_option_node(node_map, branch, "Yes") == "3"
    assert find_branch_option_node(node_map, branch, "1") == "4"
    assert find_branch_option_node(node_map, branch, "No") == "4"


def test_branch_selection_falls_back_to_conventional_option_id():
    graph = make_graph([
        {"id": "b", "type": "branch", "data": {"options": ["Red", "Blue"]}},
        {"id": "b-opt-1", "type": "branchOption", "data": {"label": "Something else"}},
    ])
    node_map = build_node_map(graph)

    assert find_branch_option_node(node_map, node_map["b"], 1) == "b-opt-1"
    assert find_branch_option_node(node_map, node_map["b"], 0) is None


def test_branch_selection_rejects_unknown_choices():
    node_map = build_node_map(FlowGraph.from_dict(BRANCH_FLOW))
    branch = node_map["2"]

    assert find_branch_option_node(node_map, branch, 5) is None
    assert find_branch_option_node(node_map, branch, "yes") is None
    assert find_branch_option_node(node_map, branch, "Maybe") is None


@pytest.mark.parametrize("selector", ["", "   "])
def test_blank_selector_does_not_pick_the_first_option(selector):
    node_map = build_node_map(FlowGraph.from_dict(BRANCH_FLOW))

    assert find_branch_option_node(node_map, node_map["2"], selector) is None
