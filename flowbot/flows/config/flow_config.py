"""
flow_config.py : Flow Engine Settings
======================================
Tunables for flow traversal and code nodes.

  - FLOW_START_NODE_ID       → node id preferred as the entry point
  - FLOW_MAX_STEPS           → ceiling on nodes visited in one run; only a
                               cycle of auto-advancing nodes can reach it
  - CODE_NODE_DEFAULT_TIMEOUT_MS → wall-clock budget for a code node script
"""

# Entry point of every flow, falls back to the first declared node
FLOW_START_NODE_ID = "1"

# Conventional id of the n-th option node under a branch
BRANCH_OPTION_ID_PATTERN = "{branch_id}-opt-{index}"

# Nodes visited per run before the engine gives up
FLOW_MAX_STEPS = 1000

# ── Code Node Settings ──────────────────────────────────────────────────────────
CODE_NODE_DEFAULT_TIMEOUT_MS = 5000

# Edge handles a code node routes on
CODE_SUCCESS_HANDLE = "success"
CODE_ERROR_HANDLE = "error"

# ── Display Settings ────────────────────────────────────────────────────────────
# Text shown for a paused node that has no message of its own
AWAITING_INPUT_FALLBACK_TEXT = "Please respond"
