from .hierarchy import CascadeCounts, HierarchyManager

__all__ = ["CascadeCounts", "HierarchyManager"]
