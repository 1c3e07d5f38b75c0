"""Bloc Footer — texte simple."""
from typing import Literal, Optional

from .base import BaseBlock


class FooterBlock(BaseBlock):
    block_type: Literal["footerBlock"] = "footerBlock"
    text: Optional[str] = None
