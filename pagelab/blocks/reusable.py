"""
Blocs réutilisables — document nommé contenant un seul bloc + bloc de référence.

Une référence est soit un id nu (relation non peuplée), soit le document peuplé :
Union[ReusableBlockDocument, str].
"""
from typing import Annotated, List, Literal, Optional, Union

from pydantic import Field

from .accordion import AccordionBlock
from .base import BaseBlock, CamelModel
from .content import ContentBlock
from .faq import FAQBlock
from .footer import FooterBlock
from .stats import StatsBlock

# Blocs admis dans un document réutilisable (ni hero, ni référence)
ReusableBlockContent = Annotated[
    Union[AccordionBlock, ContentBlock, FooterBlock, FAQBlock, StatsBlock],
    Field(discriminator="block_type"),
]


class ReusableBlockDocument(CamelModel):
    id: str
    title: str
    block_type: Literal["accordion", "content", "faq", "footer", "stats"]
    block: List[ReusableBlockContent] = Field(default_factory=list)


class ReusableBlockRef(BaseBlock):
    block_type: Literal["reusableBlockRef"] = "reusableBlockRef"
    block: Union[ReusableBlockDocument, str]

    @property
    def is_populated(self) -> bool:
        return isinstance(self.block, ReusableBlockDocument)

    @property
    def target_id(self) -> Optional[str]:
        return self.block.id if self.is_populated else self.block
