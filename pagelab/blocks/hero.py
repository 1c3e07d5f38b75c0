"""Bloc Hero — headline + sous-titre + CTA + média optionnel. Section hero uniquement."""
from typing import Literal, Optional

from .base import BaseBlock, BlockItem


class HeroCTA(BlockItem):
    cta_text: Optional[str] = None
    cta_link: Optional[str] = None


class HeroBlock(BaseBlock):
    block_type: Literal["heroBlock"] = "heroBlock"
    headline: str
    subheadline: Optional[str] = None
    cta: Optional[HeroCTA] = None
    media: Optional[str] = None
