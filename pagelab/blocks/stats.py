"""Bloc Stats — valeur + label + icône optionnelle."""
from typing import List, Literal, Optional

from pydantic import Field

from .base import BaseBlock, BlockItem


class StatItem(BlockItem):
    value: str
    label: str
    icon: Optional[str] = None


class StatsBlock(BaseBlock):
    block_type: Literal["statsBlock"] = "statsBlock"
    items: List[StatItem] = Field(default_factory=list, max_length=12)
