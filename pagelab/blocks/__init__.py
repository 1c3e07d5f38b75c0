"""
Blocs — exports publics + unions discriminées par blockType.
"""
from typing import Annotated, Union

from pydantic import Field

from .base import BaseBlock, BlockItem, BlockSettings, CamelModel
from .hero import HeroBlock, HeroCTA
from .content import ContentBlock
from .accordion import AccordionBlock, AccordionItem
from .faq import FAQBlock, FAQItem
from .stats import StatsBlock, StatItem
from .footer import FooterBlock
from .reusable import ReusableBlockContent, ReusableBlockDocument, ReusableBlockRef

# Blocs admis dans la section content d'une page (ou d'un contentOverride)
ContentSectionBlock = Annotated[
    Union[ContentBlock, AccordionBlock, ReusableBlockRef, FAQBlock, StatsBlock],
    Field(discriminator="block_type"),
]

# Union complète, contenu résolu (un réutilisable peut apporter un footerBlock)
BlockUnion = Annotated[
    Union[
        HeroBlock,
        ContentBlock,
        AccordionBlock,
        FAQBlock,
        StatsBlock,
        FooterBlock,
        ReusableBlockRef,
    ],
    Field(discriminator="block_type"),
]

__all__ = [
    # Base
    "CamelModel", "BaseBlock", "BlockItem", "BlockSettings",
    # Blocs
    "HeroBlock", "HeroCTA",
    "ContentBlock",
    "AccordionBlock", "AccordionItem",
    "FAQBlock", "FAQItem",
    "StatsBlock", "StatItem",
    "FooterBlock",
    # Réutilisables
    "ReusableBlockContent", "ReusableBlockDocument", "ReusableBlockRef",
    # Unions
    "ContentSectionBlock", "BlockUnion",
]
