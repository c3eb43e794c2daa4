"""
flows/config/__init__.py
========================
Public surface of the flow configuration package.

Config files:
  flow_config  : engine limits, code-node timeout, handle names, display text
"""

from . import flow_config
