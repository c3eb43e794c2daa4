"""
Flow Graph

Typed view over a bot's stored conversation flow plus the pure lookup helpers
the engine runs on:

    build_node_map(graph)                       → {node_id: Node}
    get_node(node_map, node_id)                 → Node | None
    outgoing_edges(edges, node_id)              → [Edge]   (definition order)
    find_edge_by_handle(edges, node_id, label)  → Edge | None
    find_start_node(graph)                      → Node | None
    find_branch_option_node(node_map, branch_node, selector) → node id | None

Node ids are compared as strings everywhere, so a flow authored with integer
ids still resolves.
"""

# Python Packages
import json
from enum import Enum
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

# Config
from ..config import flow_config





class NodeType(str, Enum):
    """ Closed set of node kinds the engine knows how to run... """

    MESSAGE = "message"
    QUESTION = "question"
    CONFIRMATION = "confirmation"
    BRANCH = "branch"
    BRANCH_OPTION = "branchOption"
    CODE = "code"
    REDIRECT = "redirect"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value) -> "NodeType":
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN



@dataclass(frozen = True)
class Node:
    """ One flow node; raw_type keeps the authored type string, even when unsupported... """

    id: str
    type: NodeType
    data: Dict[str, Any] = field(default_factory = dict)
    raw_type: Optional[str] = None

    @classmethod
    def from_dict(cls, payload: Dict) -> "Node":
        raw_type = payload.get("type")
        return cls(
            id = str(payload.get("id")),
            type = NodeType.parse(raw_type),
            data = dict(payload.get("data") or {}),
            raw_type = raw_type
        )



@dataclass(frozen = True)
class Edge:
    source: str
    target: str
    source_handle: Optional[str] = None

    @classmethod
    def from_dict(cls, payload: Dict) -> "Edge":
        return cls(
            source = str(payload.get("source")),
            target = str(payload.get("target")),
            source_handle = payload.get("sourceHandle") or None
        )



@dataclass(frozen = True)
class FlowGraph:
    """ Nodes and edges of one bot's flow. Never mutated during a run. """

    nodes: List[Node] = field(default_factory = list)
    edges: List[Edge] = field(default_factory = list)

    @classmethod
    def from_dict(cls, payload: Union[Dict, str, None]) -> "FlowGraph":
        """
        Build a graph from the stored JSON flow.

        A JSON string is decoded first; an unparsable string or a missing flow
        gives an empty graph.
        """

        if isinstance(payload, str):
            try:
                payload = json.loads(payload)
            except ValueError:
                payload = None

        if not isinstance(payload, dict):
            return cls()

        return cls(
            nodes = [Node.from_dict(n) for n in payload.get("nodes") or []],
            edges = [Edge.from_dict(e) for e in payload.get("edges") or []]
        )





# --------------------------------------------
# Node Map Index
# --------------------------------------------

def build_node_map(graph: FlowGraph) -> Dict[str, Node]:
    return {str(node.id): node for node in graph.nodes}


def get_node(node_map: Dict[str, Node], node_id) -> Optional[Node]:
    if node_id is None:
        return None
    return node_map.get(str(node_id))


def outgoing_edges(edges: List[Edge], node_id) -> List[Edge]:
    return [edge for edge in edges if edge.source == str(node_id)]


def find_edge_by_handle(edges: List[Edge], node_id, handle_value) -> Optional[Edge]:
    """
    Pick the outgoing edge whose handle matches *handle_value* (case-insensitive).

    When nothing matches and the node has exactly one outgoing edge without a
    handle, that edge is the default. Otherwise None.
    """

    outs = outgoing_edges(edges, node_id)
    normalized = str(handle_value).lower()

    for edge in outs:
        if edge.source_handle and str(edge.source_handle).lower() == normalized:
            return edge

    if len(outs) == 1 and not outs[0].source_handle:
        return outs[0]

    return None


def find_start_node(graph: FlowGraph) -> Optional[Node]:
    """ Node "1" if the flow has one, else the first declared node... """

    node = get_node(build_node_map(graph), flow_config.FLOW_START_NODE_ID)
    if node:
        return node

    return graph.nodes[0] if graph.nodes else None





# --------------------------------------------
# Branch Option Resolution
# --------------------------------------------

def _as_index(selector) -> Optional[int]:
    if isinstance(selector, bool):
        return None

    if isinstance(selector, int):
        return selector

    if isinstance(selector, float):
        return int(selector) if selector.is_integer() else None

    if isinstance(selector, str):
        # a blank selector is no index; it never means option 0
        try:
            return int(selector.strip())
        except ValueError:
            return None

    return None


def _find_option_by_label(node_map: Dict[str, Node], label: str) -> Optional[str]:
    for node in node_map.values():
        if node.type is NodeType.BRANCH_OPTION and node.data.get("label") == label:
            return node.id
    return None


def find_branch_option_node(node_map: Dict[str, Node], branch_node: Node, selector) -> Optional[str]:
    """
    Resolve a user's choice at a branch node to the id of a branchOption node.

    *selector* is either an index into the branch's options (int or numeric
    string) or an option label. An in-range index is matched by the option's
    label first, then by the conventional id "<branch id>-opt-<index>".
    Anything else is matched as an exact label. None means the selection is
    invalid.
    """

    options = branch_node.data.get("options") or []
    index = _as_index(selector)

    if index is not None and 0 <= index < len(options):
        option_id = _find_option_by_label(node_map, options[index])
        if option_id:
            return option_id

        guessed = flow_config.BRANCH_OPTION_ID_PATTERN.format(
            branch_id = branch_node.id, index = index
        )
        if get_node(node_map, guessed):
            return guessed

        return None

    return _find_option_by_label(node_map, str(selector))
