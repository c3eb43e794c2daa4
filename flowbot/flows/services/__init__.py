"""
Flow Services Package

Service responsibilities:
  graph                : FlowGraph / Node / Edge and the node map index helpers
  CodeSandboxService   : Runs code node scripts in isolated child processes
  FlowEngine           : Node-by-node traversal, pause / resume (the core)
  FlowSessionService   : Session persistence, history append and cleaning
  FlowService          : Start / respond orchestration used by FlowController
"""

from .graph import (
    Edge,
    FlowGraph,
    Node,
    NodeType,
    build_node_map,
    find_branch_option_node,
    find_edge_by_handle,
    find_start_node,
    get_node,
    outgoing_edges,
)
from .sandbox_service import CodeSandboxService, SandboxResult
from .flow_engine import FlowEngine, PauseDescriptor, RunOutput, RunResult, SessionState, run_from
from .session_service import FlowSessionService, clean_history
from .flow_service import FlowService

__all__ = [
    "Edge",
    "FlowGraph",
    "Node",
    "NodeType",
    "build_node_map",
    "find_branch_option_node",
    "find_edge_by_handle",
    "find_start_node",
    "get_node",
    "outgoing_edges",
    "CodeSandboxService",
    "SandboxResult",
    "FlowEngine",
    "PauseDescriptor",
    "RunOutput",
    "RunResult",
    "SessionState",
    "run_from",
    "FlowSessionService",
    "clean_history",
    "FlowService",
]
