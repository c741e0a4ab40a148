"""Binary-level dependency analysis for compiled Java classes."""

from .models import ClassState, ScanPolicy, TraversalResult
from .traversal import DependencyTraversal, analyze

__all__ = ["ClassState", "DependencyTraversal", "ScanPolicy", "TraversalResult", "analyze"]
