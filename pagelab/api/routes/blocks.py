"""
GET /api/blocks/catalog — blocs disponibles, sections autorisées, champs + JSON schemas.
    ?section=content            → blocs admis dans la section
    ?allowed=heroBlock,faqBlock → restriction à une liste de slugs
"""
from typing import Optional

from fastapi import APIRouter, HTTPException
from fastapi.responses import JSONResponse

from ...blocks.catalog import generate_catalog
from ...blocks.registry import BLOCK_REGISTRY, get_allowed_blocks

router = APIRouter(prefix="/api", tags=["Blocks"])


@router.get("/blocks/catalog", summary="Catalogue des blocs et de leurs schemas")
def api_block_catalog(section: Optional[str] = None, allowed: Optional[str] = None) -> JSONResponse:
    requested = [s.strip() for s in (allowed or "").split(",") if s.strip()]
    unknown = [s for s in get_allowed_blocks(requested) if s not in BLOCK_REGISTRY]
    if unknown:
        raise HTTPException(400, f"Blocs inconnus : {', '.join(unknown)}")
    try:
        catalog = generate_catalog(include_schema=True, section=section, allowed_block_types=requested)
    except ValueError as e:
        raise HTTPException(400, str(e))
    return JSONResponse(catalog, headers={"Cache-Control": "public, max-age=3600"})
