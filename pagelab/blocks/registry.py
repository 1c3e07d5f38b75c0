"""
Registry des blocs — slug → modèle + label + sections autorisées.
Source unique pour le catalogue, l'admission par section et les garde-fous d'expérience.
"""
from types import MappingProxyType
from typing import Iterable, List, Mapping, NamedTuple, Optional, Tuple, Type

from .accordion import AccordionBlock
from .base import BaseBlock
from .content import ContentBlock
from .faq import FAQBlock
from .footer import FooterBlock
from .hero import HeroBlock
from .reusable import ReusableBlockRef
from .stats import StatsBlock

SECTIONS: Tuple[str, ...] = ("hero", "content", "footer")


class BlockRegistryEntry(NamedTuple):
    slug: str
    label: str
    allowed_sections: Tuple[str, ...]
    model: Type[BaseBlock]


BLOCK_REGISTRY: Mapping[str, BlockRegistryEntry] = MappingProxyType({
    "accordionBlock":   BlockRegistryEntry("accordionBlock",   "Accordion Block",          ("content",), AccordionBlock),
    "contentBlock":     BlockRegistryEntry("contentBlock",     "Content Block",            ("content",), ContentBlock),
    "faqBlock":         BlockRegistryEntry("faqBlock",         "FAQ Block",                ("content",), FAQBlock),
    "footerBlock":      BlockRegistryEntry("footerBlock",      "Footer Block",             ("footer",),  FooterBlock),
    "heroBlock":        BlockRegistryEntry("heroBlock",        "Hero Block",               ("hero",),    HeroBlock),
    "reusableBlockRef": BlockRegistryEntry("reusableBlockRef", "Reusable Block Reference", ("content",), ReusableBlockRef),
    "statsBlock":       BlockRegistryEntry("statsBlock",       "Stats Block",              ("content",), StatsBlock),
})


def get_block_slugs() -> List[str]:
    return list(BLOCK_REGISTRY)


def get_blocks_for_section(section: str) -> List[BlockRegistryEntry]:
    """Blocs admis dans une section (hero / content / footer)."""
    if section not in SECTIONS:
        raise ValueError(f"Section inconnue : {section!r}. Sections : {list(SECTIONS)}")
    return [e for e in BLOCK_REGISTRY.values() if section in e.allowed_sections]


def is_block_allowed(block_type: str, allowed_block_types: Optional[Iterable[str]]) -> bool:
    """Liste vide ou absente = aucun filtre."""
    allowed = list(allowed_block_types or [])
    if not allowed:
        return True
    return block_type in allowed


def get_allowed_blocks(allowed_block_types: Optional[Iterable[str]]) -> List[str]:
    allowed = list(allowed_block_types or [])
    return allowed or get_block_slugs()
