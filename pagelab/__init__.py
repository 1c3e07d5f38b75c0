"""
PAGELAB — pages modulaires, blocs réutilisables et expériences A/B.

    >>> from pagelab import assign_variant, VariantAllocation
    >>> assign_variant("visitor_abc", "exp_123", [
    ...     VariantAllocation(variant_id="A", traffic_percent=50),
    ...     VariantAllocation(variant_id="B", traffic_percent=50),
    ... ]).variant_id
    'A'
"""
__version__ = "0.1.0"

from .assignment import AssignmentResult, VariantAllocation, assign_variant, hash_to_bucket
from .resolve import apply_variant, resolve_blocks, resolve_page
from .lookup import get_assigned_variant, get_resolved_page, get_resolved_page_with_variant
from .stats import compute_experiment_stats

__all__ = [
    "__version__",
    "AssignmentResult", "VariantAllocation", "assign_variant", "hash_to_bucket",
    "apply_variant", "resolve_blocks", "resolve_page",
    "get_assigned_variant", "get_resolved_page", "get_resolved_page_with_variant",
    "compute_experiment_stats",
]
