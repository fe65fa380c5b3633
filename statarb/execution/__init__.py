"""
Execution collaborator interface.
"""

from statarb.execution.engine import ExecutionEngine

__all__ = ["ExecutionEngine"]
