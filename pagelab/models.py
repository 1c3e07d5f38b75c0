"""
Data models — Page, PageVariant, Experiment, ReusableBlock, AnalyticsEvent, Lead
SQLAlchemy (SQLite, table documents unique) + Pydantic v2 (camelCase) + Enums
"""
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Union

import sqlalchemy as sa
from pydantic import BaseModel, Field, conlist
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from .blocks import (
    BlockUnion, CamelModel, ContentSectionBlock, FooterBlock, HeroBlock, ReusableBlockDocument,
)


# ── ENUMS ──────────────────────────────────────────────────────────────

class Collection(str, Enum):
    PAGES            = "pages"
    PAGE_VARIANTS    = "page-variants"
    EXPERIMENTS      = "experiments"
    REUSABLE_BLOCKS  = "reusable-blocks"
    ANALYTICS_EVENTS = "analytics-events"
    LEADS            = "leads"


class VariantStatus(str, Enum):
    DRAFT    = "draft"
    ACTIVE   = "active"
    ARCHIVED = "archived"


class ExperimentStatus(str, Enum):
    DRAFT     = "draft"
    RUNNING   = "running"
    PAUSED    = "paused"
    COMPLETED = "completed"


class EventType(str, Enum):
    IMPRESSION = "impression"
    CONVERSION = "conversion"
    CLICK      = "click"
    CUSTOM     = "custom"


# ── ORM ────────────────────────────────────────────────────────────────

def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class DocumentDB(Base):
    """Un document JSON par ligne ; pk auto-incrément = ordre de création."""
    __tablename__ = "documents"
    __table_args__ = (
        sa.UniqueConstraint("collection", "doc_id", name="uq_documents_collection_id"),
        sa.UniqueConstraint("collection", "slug",   name="uq_documents_collection_slug"),
    )
    pk:         Mapped[int]           = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    collection: Mapped[str]           = mapped_column(sa.String, nullable=False, index=True)
    doc_id:     Mapped[str]           = mapped_column(sa.String, nullable=False, default=lambda: str(uuid.uuid4()))
    slug:       Mapped[Optional[str]] = mapped_column(sa.String, nullable=True)
    data:       Mapped[str]           = mapped_column(sa.Text, default="{}")
    created_at: Mapped[datetime]      = mapped_column(sa.DateTime, default=_utcnow)
    updated_at: Mapped[datetime]      = mapped_column(sa.DateTime, default=_utcnow, onupdate=_utcnow)


# ── DOCUMENTS ───────────────────────────────────────────────────────────

class Page(CamelModel):
    id:         str
    slug:       str
    title:      str
    hero:       Optional[conlist(HeroBlock, max_length=1)] = None
    content:    Optional[List[ContentSectionBlock]]        = None
    footer:     Optional[List[FooterBlock]]                = None
    created_at: Optional[datetime]                         = None
    updated_at: Optional[datetime]                         = None


class PageVariant(CamelModel):
    id:               str
    name:             str
    page:             Union[Page, str]
    status:           VariantStatus                       = VariantStatus.DRAFT
    hero_override:    Optional[List[HeroBlock]]           = None
    content_override: Optional[List[ContentSectionBlock]] = None
    footer_override:  Optional[List[FooterBlock]]         = None
    created_at:       Optional[datetime]                  = None
    updated_at:       Optional[datetime]                  = None


class ExperimentVariantEntry(CamelModel):
    variant:         Union[PageVariant, str]
    traffic_percent: int = Field(default=0, ge=0, le=100)


class Experiment(CamelModel):
    id:         str
    name:       str
    page:       Union[Page, str]
    status:     ExperimentStatus             = ExperimentStatus.DRAFT
    variants:   List[ExperimentVariantEntry] = Field(default_factory=list)
    start_date: Optional[datetime]           = None
    end_date:   Optional[datetime]           = None
    created_at: Optional[datetime]           = None
    updated_at: Optional[datetime]           = None


class AnalyticsEvent(CamelModel):
    id:         str
    event_type: EventType
    experiment: Optional[Union[Experiment, str]]  = None
    variant:    Optional[Union[PageVariant, str]] = None
    visitor_id: Optional[str]                     = None
    page:       Optional[Union[Page, str]]        = None
    block_id:   Optional[str]                     = None
    event_name: Optional[str]                     = None
    event_data: Optional[Any]                     = None
    timestamp:  Optional[datetime]                = None


class Lead(CamelModel):
    id:           str
    email:        str
    name:         Optional[str]                     = None
    experiment:   Optional[Union[Experiment, str]]  = None
    variant:      Optional[Union[PageVariant, str]] = None
    visitor_id:   Optional[str]                     = None
    page:         Optional[Union[Page, str]]        = None
    form_data:    Optional[Dict[str, Any]]          = None
    source:       Optional[str]                     = None
    converted_at: Optional[datetime]                = None


DOCUMENT_MODELS: Dict[str, type] = {
    Collection.PAGES.value:            Page,
    Collection.PAGE_VARIANTS.value:    PageVariant,
    Collection.EXPERIMENTS.value:      Experiment,
    Collection.REUSABLE_BLOCKS.value:  ReusableBlockDocument,
    Collection.ANALYTICS_EVENTS.value: AnalyticsEvent,
    Collection.LEADS.value:            Lead,
}


# ── RÉSULTATS (transitoires, jamais persistés) ──────────────────────────

class VariantInfo(CamelModel):
    id:   str
    name: str


class ResolvedPage(Page):
    # Un réutilisable peut apporter n'importe quel bloc dans content
    content: Optional[List[BlockUnion]] = None


class ResolvedPageWithVariant(ResolvedPage):
    variant: Optional[VariantInfo] = Field(default=None, alias="_variant")


class AssignedVariantResult(CamelModel):
    experiment_id: str
    variant_id:    str
    visitor_id:    str
    resolved_page: ResolvedPageWithVariant


class VariantMetrics(CamelModel):
    variant_id:      str
    variant_name:    Optional[str] = None
    impressions:     int           = 0
    conversions:     int           = 0
    conversion_rate: float         = 0.0


class ExperimentStats(CamelModel):
    experiment_id:      str
    experiment_name:    str
    status:             str
    variants:           List[VariantMetrics] = Field(default_factory=list)
    winning_variant_id: Optional[str]        = None


# ── PYDANTIC SCHEMAS (entrées API) ──────────────────────────────────────

class AnalyticsEventInput(CamelModel):
    event_type: EventType
    experiment: Optional[str]       = None
    variant:    Optional[str]       = None
    visitor_id: Optional[str]       = None
    page:       Optional[str]       = None
    block_id:   Optional[str]       = None
    event_name: Optional[str]       = None
    event_data: Optional[Any]       = None
    timestamp:  Optional[datetime]  = None


class LeadInput(CamelModel):
    email:        str
    name:         Optional[str]            = None
    experiment:   Optional[str]            = None
    variant:      Optional[str]            = None
    visitor_id:   Optional[str]            = None
    page:         Optional[str]            = None
    form_data:    Optional[Dict[str, Any]] = None
    source:       Optional[str]            = None
    converted_at: Optional[datetime]       = None


# ── Helpers ──

def relation_id(value: Any) -> Optional[str]:
    """Id d'une relation, peuplée (document / dict) ou non (id nu)."""
    if value is None:
        return None
    if isinstance(value, BaseModel):
        return getattr(value, "id", None)
    if isinstance(value, dict):
        ref = value.get("id")
        return str(ref) if ref is not None else None
    return str(value)


def dump_document(model: BaseModel) -> dict:
    """Forme JSON publique : alias camelCase, champs nuls omis."""
    return model.model_dump(mode="json", by_alias=True, exclude_none=True)
