"""
Statistiques d'expériences — impressions / conversions / taux par variant.

Lecture seule, hors pipeline de résolution. Seuls les événements impression et
conversion des variants déclarés par l'expérience sont comptés.
"""
import logging
import os
from typing import Dict, List

from .database import DocumentStore
from .models import (
    AnalyticsEvent, Collection, EventType, Experiment, ExperimentStats, ExperimentStatus,
    PageVariant, VariantMetrics, relation_id,
)

log = logging.getLogger(__name__)

# Plafond d'événements lus par expérience (au-delà : limite connue, pas d'erreur)
STATS_EVENT_LIMIT = int(os.getenv("STATS_EVENT_LIMIT", "10000"))

_REPORTED_STATUSES = [ExperimentStatus.RUNNING.value, ExperimentStatus.PAUSED.value]


def _variant_ids(experiment: Experiment):
    ids: List[str] = []
    names: Dict[str, str] = {}
    for entry in experiment.variants:
        variant_id = relation_id(entry.variant)
        if not variant_id:
            continue
        ids.append(variant_id)
        if isinstance(entry.variant, PageVariant) and entry.variant.name:
            names[variant_id] = entry.variant.name
    return ids, names


def experiment_stats(experiment: Experiment, events: List[AnalyticsEvent]) -> ExperimentStats:
    """Agrège les événements d'une expérience ; gagnant = meilleur taux parmi les variants convertis."""
    variant_ids, names = _variant_ids(experiment)
    counts = {vid: {"impressions": 0, "conversions": 0} for vid in variant_ids}

    for event in events:
        vid = relation_id(event.variant)
        if vid not in counts:
            continue
        if event.event_type == EventType.IMPRESSION:
            counts[vid]["impressions"] += 1
        elif event.event_type == EventType.CONVERSION:
            counts[vid]["conversions"] += 1

    metrics: List[VariantMetrics] = []
    winner = None
    best_rate = -1.0
    for vid in variant_ids:
        c = counts[vid]
        rate = c["conversions"] / c["impressions"] * 100 if c["impressions"] > 0 else 0.0
        metrics.append(VariantMetrics(
            variant_id=vid,
            variant_name=names.get(vid),
            impressions=c["impressions"],
            conversions=c["conversions"],
            conversion_rate=rate,
        ))
        # Strictement supérieur : à égalité, le premier rencontré reste gagnant
        if c["conversions"] > 0 and rate > best_rate:
            best_rate = rate
            winner = vid

    return ExperimentStats(
        experiment_id=experiment.id,
        experiment_name=experiment.name,
        status=experiment.status.value,
        variants=metrics,
        winning_variant_id=winner,
    )


def compute_experiment_stats(store: DocumentStore) -> List[ExperimentStats]:
    """Stats de toutes les expériences running ou paused."""
    experiments = store.find_where(
        Collection.EXPERIMENTS.value, {"status": _REPORTED_STATUSES}, depth=1,
    )
    stats: List[ExperimentStats] = []
    for doc in experiments:
        experiment = Experiment.model_validate(doc)
        event_docs = store.find_where(
            Collection.ANALYTICS_EVENTS.value, {"experiment": experiment.id}, limit=STATS_EVENT_LIMIT,
        )
        if len(event_docs) >= STATS_EVENT_LIMIT:
            log.warning("Expérience %s : plafond de %d événements atteint, stats tronquées",
                        experiment.id, STATS_EVENT_LIMIT)
        events = [AnalyticsEvent.model_validate(e) for e in event_docs]
        stats.append(experiment_stats(experiment, events))
    return stats
