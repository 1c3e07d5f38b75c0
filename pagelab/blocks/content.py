"""Bloc Content — corps rich text (arbre JSON de l'éditeur)."""
from typing import Any, Dict, Literal, Optional

from .base import BaseBlock


class ContentBlock(BaseBlock):
    block_type: Literal["contentBlock"] = "contentBlock"
    body: Optional[Dict[str, Any]] = None
