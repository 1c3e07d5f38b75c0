"""
Résolution des blocs + composition des variants.

resolve_page   : Page → ResolvedPage (reusableBlockRef remplacés par le bloc ciblé)
apply_variant  : ResolvedPage + PageVariant → ResolvedPageWithVariant (overrides par section)

Aucune de ces fonctions ne lève pour une question de forme des données : référence non
peuplée = conservée telle quelle, réutilisable vide = bloc omis. L'entrée n'est jamais modifiée.
"""
from typing import Iterable, List, Optional

from .blocks import BaseBlock, BlockSettings, ReusableBlockRef
from .models import Page, PageVariant, ResolvedPage, ResolvedPageWithVariant, VariantInfo


def _resolve_ref(ref: ReusableBlockRef) -> Optional[BaseBlock]:
    target = ref.block
    if not target.block:
        return None
    source = target.block[0]
    # Les settings de la référence priment : l'identité analytics suit l'emplacement, pas la source
    settings = BlockSettings(
        block_id=ref.settings.block_id or source.settings.block_id,
        analytics_label=ref.settings.analytics_label or source.settings.analytics_label,
    )
    return source.model_copy(deep=True, update={"settings": settings, "resolved_from": target.id})


def resolve_blocks(blocks: Optional[Iterable[BaseBlock]]) -> List[BaseBlock]:
    """Résout une liste de blocs (content ou contentOverride)."""
    resolved: List[BaseBlock] = []
    for block in blocks or []:
        if not isinstance(block, ReusableBlockRef) or not block.is_populated:
            resolved.append(block)
            continue
        concrete = _resolve_ref(block)
        if concrete is not None:
            resolved.append(concrete)
    return resolved


def resolve_page(page: Page) -> ResolvedPage:
    content = resolve_blocks(page.content)
    # Entrées déjà validées : pas de revalidation
    return ResolvedPage.model_construct(**{**dict(page), "content": content or None})


def apply_variant(page: ResolvedPage, variant: PageVariant) -> ResolvedPageWithVariant:
    """
    Applique les overrides d'un variant sur une page déjà résolue.

    Override non vide = remplace la section entière (pas de fusion).
    Override vide ou absent = section de base conservée.
    contentOverride passe par resolve_blocks ; hero / footer appliqués tels quels.
    """
    fields = dict(page)
    fields["variant"] = VariantInfo(id=variant.id, name=variant.name)

    if variant.hero_override:
        fields["hero"] = list(variant.hero_override)

    if variant.content_override:
        content = resolve_blocks(variant.content_override)
        fields["content"] = content or None

    if variant.footer_override:
        fields["footer"] = list(variant.footer_override)

    return ResolvedPageWithVariant.model_construct(**fields)
