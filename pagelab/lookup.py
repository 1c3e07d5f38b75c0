"""
Lookup — slug (+ visiteur ou variant explicite) → page résolue prête à rendre.

get_resolved_page               : page de base, références résolues
get_resolved_page_with_variant  : preview / QA avec un variant imposé
get_assigned_variant            : expérience running → variant assigné → page composée

Introuvable = None, jamais une exception. Seuls les états rendus impossibles par les
invariants d'écriture lèvent ExperimentIntegrityError.
"""
import logging
import os
from typing import Optional

from .assignment import VariantAllocation, assign_variant
from .database import DocumentStore
from .errors import ExperimentIntegrityError, VariantPageMismatchError
from .models import (
    AssignedVariantResult, Collection, Experiment, ExperimentStatus, Page, PageVariant,
    ResolvedPage, ResolvedPageWithVariant, relation_id,
)
from .resolve import apply_variant, resolve_page

log = logging.getLogger(__name__)

# Profondeur suffisante pour peupler les reusable-blocks référencés
RESOLVE_DEPTH = 2


def _strict_single_experiment() -> bool:
    return os.getenv("STRICT_SINGLE_EXPERIMENT", "0") == "1"


def get_resolved_page(store: DocumentStore, slug: str) -> Optional[ResolvedPage]:
    doc = store.find_by_slug(Collection.PAGES.value, slug, depth=RESOLVE_DEPTH)
    if doc is None:
        return None
    return resolve_page(Page.model_validate(doc))


def get_resolved_page_with_variant(store: DocumentStore, slug: str,
                                   variant_id: str) -> Optional[ResolvedPageWithVariant]:
    """
    Page + variant imposé.

    Returns:
        None si la page ou le variant est introuvable

    Raises:
        VariantPageMismatchError: le variant appartient à une autre page
    """
    page_doc = store.find_by_slug(Collection.PAGES.value, slug, depth=RESOLVE_DEPTH)
    if page_doc is None:
        return None

    variant_doc = store.find_by_id(Collection.PAGE_VARIANTS.value, variant_id, depth=RESOLVE_DEPTH)
    if variant_doc is None:
        return None

    page = Page.model_validate(page_doc)
    variant = PageVariant.model_validate(variant_doc)
    if relation_id(variant.page) != page.id:
        raise VariantPageMismatchError(variant_id, slug)

    return apply_variant(resolve_page(page), variant)


def _select_experiment(store: DocumentStore, page: dict, page_slug: str) -> Optional[Experiment]:
    docs = store.find_where(
        Collection.EXPERIMENTS.value,
        {"page": page["id"], "status": ExperimentStatus.RUNNING.value},
        depth=1,
    )
    if not docs:
        return None
    if len(docs) > 1:
        if _strict_single_experiment():
            raise ExperimentIntegrityError(
                f"{len(docs)} expériences running sur la page {page_slug!r}"
            )
        log.warning("%d expériences running sur la page %r — utilisation de la première : %s",
                    len(docs), page_slug, docs[0]["id"])
    return Experiment.model_validate(docs[0])


def get_assigned_variant(store: DocumentStore, page_slug: str,
                         visitor_id: str) -> Optional[AssignedVariantResult]:
    """
    Trouve l'expérience running de la page et assigne le visiteur à un variant.

    1. Page par slug (absente → None)
    2. Expériences running de la page (aucune → None ; plusieurs → la première + warning)
    3. Allocations depuis les variants de l'expérience (peuplés ou ids nus)
    4. Assignation déterministe
    5. Page résolue + overrides du variant assigné
    """
    page = store.find_by_slug(Collection.PAGES.value, page_slug)
    if page is None:
        return None

    experiment = _select_experiment(store, page, page_slug)
    if experiment is None:
        return None

    allocations = [
        VariantAllocation(variant_id=relation_id(v.variant), traffic_percent=v.traffic_percent or 0)
        for v in experiment.variants
    ]
    if not allocations:
        raise ExperimentIntegrityError(f"L'expérience {experiment.id} n'a aucun variant")

    assignment = assign_variant(visitor_id, experiment.id, allocations)

    try:
        resolved = get_resolved_page_with_variant(store, page_slug, assignment.variant_id)
    except VariantPageMismatchError as e:
        raise ExperimentIntegrityError(str(e)) from e
    if resolved is None:
        raise ExperimentIntegrityError(
            f"Variant {assignment.variant_id} introuvable pour la page {page_slug!r}"
        )

    return AssignedVariantResult(
        experiment_id=experiment.id,
        variant_id=assignment.variant_id,
        visitor_id=visitor_id,
        resolved_page=resolved,
    )
