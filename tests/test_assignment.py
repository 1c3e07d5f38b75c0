"""
Tests assignation déterministe — hash → bucket, parcours cumulatif, distribution.
"""
import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from collections import Counter

from pagelab.assignment import (
    AssignmentResult, VariantAllocation, assign_variant, hash_to_bucket, pick_allocation,
)


def _alloc(*pairs):
    return [VariantAllocation(variant_id=v, traffic_percent=p) for v, p in pairs]


# ── hash_to_bucket ─────────────────────────────────────────────────────

class TestHashToBucket:
    @pytest.mark.parametrize("value,bucket", [
        ("", 0),
        ("a", 97),
        ("ab", 3),
        ("visitor_abc:exp_123", 10),
    ])
    def test_valeurs_connues(self, value, bucket):
        assert hash_to_bucket(value) == bucket

    def test_unites_utf16(self):
        # Emoji hors BMP = 2 unités UTF-16 (paire de substitution)
        assert hash_to_bucket("😀") == 31

    def test_anagrammes_distincts(self):
        assert hash_to_bucket("ab") != hash_to_bucket("ba")

    def test_deterministe(self):
        first = hash_to_bucket("visitor_xyz:exp_9")
        assert all(hash_to_bucket("visitor_xyz:exp_9") == first for _ in range(100))

    def test_plage(self):
        for i in range(500):
            assert 0 <= hash_to_bucket(f"v{i}:e{i % 7}") < 100


# ── pick_allocation ────────────────────────────────────────────────────

class TestPickAllocation:
    def test_bornes_50_50(self):
        allocations = _alloc(("A", 50), ("B", 50))
        assert pick_allocation(0, allocations).variant_id == "A"
        assert pick_allocation(49, allocations).variant_id == "A"
        assert pick_allocation(50, allocations).variant_id == "B"
        assert pick_allocation(99, allocations).variant_id == "B"

    def test_trois_variants(self):
        allocations = _alloc(("A", 20), ("B", 30), ("C", 50))
        assert pick_allocation(19, allocations).variant_id == "A"
        assert pick_allocation(20, allocations).variant_id == "B"
        assert pick_allocation(49, allocations).variant_id == "B"
        assert pick_allocation(50, allocations).variant_id == "C"

    def test_somme_inferieure_a_100_dernier_variant(self):
        allocations = _alloc(("A", 40), ("B", 40))
        assert pick_allocation(95, allocations).variant_id == "B"

    def test_vide_leve(self):
        with pytest.raises(ValueError):
            pick_allocation(10, [])


# ── assign_variant ─────────────────────────────────────────────────────

class TestAssignVariant:
    def test_exemple_documente(self):
        result = assign_variant("visitor_abc", "exp_123", _alloc(("A", 50), ("B", 50)))
        assert result == AssignmentResult(variant_id="A", bucket=10)

    def test_bucket_depend_de_visiteur_et_experience(self):
        result = assign_variant("v1", "e1", _alloc(("A", 50), ("B", 50)))
        assert result.bucket == hash_to_bucket("v1:e1")

    def test_deterministe(self):
        allocations = _alloc(("A", 50), ("B", 50))
        first = assign_variant("visitor_42", "exp_1", allocations)
        for _ in range(100):
            assert assign_variant("visitor_42", "exp_1", allocations) == first

    def test_distribution_50_50(self):
        allocations = _alloc(("A", 50), ("B", 50))
        counts = Counter(assign_variant(f"visitor_{i}", "exp_123", allocations).variant_id
                         for i in range(1000))
        assert 350 <= counts["A"] <= 650
        assert counts["A"] + counts["B"] == 1000

    def test_distribution_70_30(self):
        allocations = _alloc(("control", 70), ("treatment", 30))
        counts = Counter(assign_variant(f"visitor_{i}", "exp_123", allocations).variant_id
                         for i in range(50))
        assert counts["control"] >= counts["treatment"]

    def test_100_0(self):
        allocations = _alloc(("A", 100), ("B", 0))
        assert {assign_variant(f"v{i}", "e", allocations).variant_id for i in range(200)} == {"A"}

    def test_vide_leve(self):
        with pytest.raises(ValueError):
            assign_variant("v", "e", [])
