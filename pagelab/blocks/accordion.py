"""Bloc Accordion — items repliables (titre + contenu rich text)."""
from typing import Any, Dict, List, Literal, Optional

from pydantic import Field

from .base import BaseBlock, BlockItem


class AccordionItem(BlockItem):
    title: str
    content: Optional[Dict[str, Any]] = None


class AccordionBlock(BaseBlock):
    block_type: Literal["accordionBlock"] = "accordionBlock"
    items: List[AccordionItem] = Field(default_factory=list, max_length=20)
