"""Bloc FAQ — paires question / réponse."""
from typing import Any, Dict, List, Literal, Optional

from pydantic import Field

from .base import BaseBlock, BlockItem


class FAQItem(BlockItem):
    question: str
    answer: Optional[Dict[str, Any]] = None


class FAQBlock(BaseBlock):
    block_type: Literal["faqBlock"] = "faqBlock"
    items: List[FAQItem] = Field(default_factory=list, max_length=30)
