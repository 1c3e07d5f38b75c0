"""
Assignation déterministe visiteur → variant.

Le bucket [0, 100) dérive uniquement de "{visitor_id}:{experiment_id}" : aucun état,
aucune coordination, même résultat d'un process à l'autre. Les allocations sont
parcourues dans l'ordre en cumulant trafficPercent ; premier cumul > bucket gagnant.
"""
import logging
from typing import Sequence

from .blocks import CamelModel

log = logging.getLogger(__name__)

_MASK_32 = 2 ** 32


class VariantAllocation(CamelModel):
    variant_id:      str
    traffic_percent: float


class AssignmentResult(CamelModel):
    variant_id: str
    bucket:     int


def _utf16_units(value: str):
    data = value.encode("utf-16-be")
    for i in range(0, len(data), 2):
        yield int.from_bytes(data[i:i + 2], "big")


def hash_to_bucket(value: str) -> int:
    """Bucket 0-99. Hash polynomial base 31, chaque unité UTF-16 pondérée par sa position (anagrammes distincts)."""
    h = 0
    for position, code in enumerate(_utf16_units(value), start=1):
        h = (h * 31 + code * position) % _MASK_32
    return h % 100


def pick_allocation(bucket: int, allocations: Sequence[VariantAllocation]) -> VariantAllocation:
    """Parcours cumulatif ; à défaut (somme < 100) la dernière allocation."""
    if not allocations:
        raise ValueError("allocations ne peut pas être vide")
    cumulative = 0.0
    for allocation in allocations:
        cumulative += allocation.traffic_percent
        if bucket < cumulative:
            return allocation
    return allocations[-1]


def assign_variant(visitor_id: str, experiment_id: str,
                   allocations: Sequence[VariantAllocation]) -> AssignmentResult:
    """
    Assigne un visiteur à un variant.

    Args:
        visitor_id: id visiteur (cookie)
        experiment_id: id de l'expérience
        allocations: [(variant_id, traffic_percent)] dans l'ordre de l'expérience

    Returns:
        AssignmentResult(variant_id, bucket)

    Raises:
        ValueError: allocations vide
    """
    if not allocations:
        raise ValueError("allocations ne peut pas être vide")
    bucket = hash_to_bucket(f"{visitor_id}:{experiment_id}")
    chosen = pick_allocation(bucket, allocations)
    log.debug("Visiteur %s → variant %s (bucket %d, expérience %s)",
              visitor_id, chosen.variant_id, bucket, experiment_id)
    return AssignmentResult(variant_id=chosen.variant_id, bucket=bucket)
