"""
Blocs de base — settings partagés + BaseBlock discriminé par blockType.
Clés JSON en camelCase (blockType, settings.blockId), attributs Python en snake_case.
"""
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Modèle pydantic sérialisé en camelCase, alimentable par nom ou par alias."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class BlockSettings(CamelModel):
    """Identité analytics d'un bloc (blockId stable 12 caractères + label optionnel)."""
    block_id: Optional[str] = None
    analytics_label: Optional[str] = None


class BlockItem(CamelModel):
    """Ligne d'un tableau de bloc ; les clés inconnues (id de ligne…) sont conservées."""
    model_config = ConfigDict(extra="allow")


class BaseBlock(CamelModel):
    """Bloc de base (classe parente de tous les blocs). Clés inconnues (id, blockName…) conservées telles quelles."""
    model_config = ConfigDict(extra="allow")

    block_type: str
    settings: BlockSettings = Field(default_factory=BlockSettings)
    # Renseigné uniquement sur un bloc issu d'un reusableBlockRef résolu
    resolved_from: Optional[str] = Field(default=None, alias="_resolvedFrom")
