"""
Hooks d'écriture (beforeChange) — exécutés par DocumentStore.create / update.

Signature commune : hook(data, operation, store) → data, operation ∈ {"create", "update"}.
Un invariant violé lève DocumentValidationError(message, path).
"""
import uuid
from datetime import datetime, timezone
from typing import Callable, Dict, List

from .errors import DocumentValidationError
from .models import Collection, ExperimentStatus, relation_id


BLOCK_ID_LENGTH = 12

_BLOCK_LISTS: Dict[str, tuple] = {
    Collection.PAGES.value:           ("hero", "content", "footer"),
    Collection.PAGE_VARIANTS.value:   ("heroOverride", "contentOverride", "footerOverride"),
    Collection.REUSABLE_BLOCKS.value: ("block",),
}


def new_block_id() -> str:
    return uuid.uuid4().hex[:BLOCK_ID_LENGTH]


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def ensure_block_ids(collection: str):
    """
    Génère settings.blockId à la création pour chaque bloc qui n'en a pas ; une valeur
    fournie est conservée. Rien en update : un blockId n'est jamais régénéré.
    """
    keys = _BLOCK_LISTS[collection]

    def hook(data: dict, operation: str, store) -> dict:
        if operation != "create":
            return data
        for key in keys:
            blocks = data.get(key)
            if not isinstance(blocks, list):
                continue
            for block in blocks:
                if not isinstance(block, dict):
                    continue
                settings = block.get("settings") or {}
                if not isinstance(settings, dict):
                    continue
                if not settings.get("blockId"):
                    settings["blockId"] = new_block_id()
                block["settings"] = settings
        return data

    return hook


def ensure_unique_slug(data: dict, operation: str, store) -> dict:
    slug = data.get("slug")
    if not slug or not isinstance(slug, str):
        return data
    existing = store.find_by_slug(Collection.PAGES.value, slug)
    if existing and existing["id"] != data.get("id"):
        raise DocumentValidationError(f"Slug déjà utilisé : {slug!r}", path="slug")
    return data


def _percent(value) -> float:
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0


def validate_experiment(data: dict, operation: str, store) -> dict:
    """
    1. Au moins 2 variants
    2. status = running → trafficPercent somme exactement 100
    3. Tous les variants appartiennent à la page de l'expérience
    """
    variants = [v for v in data.get("variants") or [] if isinstance(v, dict)]

    if len(variants) < 2:
        raise DocumentValidationError("Une expérience doit avoir au moins 2 variants", path="variants")

    if data.get("status") == ExperimentStatus.RUNNING.value:
        total = sum(_percent(v.get("trafficPercent")) for v in variants)
        if total != 100:
            raise DocumentValidationError(
                f"Les pourcentages de trafic doivent totaliser 100% en running (actuellement {total:g}%)",
                path="variants",
            )

    page_id = relation_id(data.get("page"))
    if not page_id:
        return data

    for entry in variants:
        variant_id = relation_id(entry.get("variant"))
        if not variant_id:
            continue
        variant = store.find_by_id(Collection.PAGE_VARIANTS.value, variant_id)
        if variant is None:
            raise DocumentValidationError(f"Variant introuvable : {variant_id}", path="variants")
        if relation_id(variant.get("page")) != page_id:
            raise DocumentValidationError(
                "Tous les variants doivent appartenir à la page de l'expérience", path="variants",
            )
    return data


def set_timestamp(data: dict, operation: str, store) -> dict:
    if operation == "create" and not data.get("timestamp"):
        data["timestamp"] = _now_iso()
    return data


def set_converted_at(data: dict, operation: str, store) -> dict:
    if operation == "create" and not data.get("convertedAt"):
        data["convertedAt"] = _now_iso()
    return data


BEFORE_CHANGE: Dict[str, List[Callable]] = {
    Collection.PAGES.value:            [ensure_unique_slug, ensure_block_ids(Collection.PAGES.value)],
    Collection.PAGE_VARIANTS.value:    [ensure_block_ids(Collection.PAGE_VARIANTS.value)],
    Collection.REUSABLE_BLOCKS.value:  [ensure_block_ids(Collection.REUSABLE_BLOCKS.value)],
    Collection.EXPERIMENTS.value:      [validate_experiment],
    Collection.ANALYTICS_EVENTS.value: [set_timestamp],
    Collection.LEADS.value:            [set_converted_at],
}


# Champs figés après création (ignorés par update)
IMMUTABLE_FIELDS: Dict[str, tuple] = {
    Collection.ANALYTICS_EVENTS.value: ("timestamp",),
}


def run_before_change(collection: str, data: dict, operation: str, store) -> dict:
    for hook in BEFORE_CHANGE.get(collection, []):
        data = hook(data, operation, store)
    return data
