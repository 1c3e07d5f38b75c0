"""
Pages résolues.
GET /api/pages/{slug}/resolved                       → page, références résolues
GET /api/pages/{slug}/variants/{variant_id}/preview  → page + overrides du variant (preview / QA)
GET /api/pages/{slug}/assigned                       → variant assigné au visiteur (cookie visitor_id)
"""
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ...database import DocumentStore, get_db
from ...errors import VariantPageMismatchError
from ...lookup import get_assigned_variant, get_resolved_page, get_resolved_page_with_variant
from ...models import dump_document
from ...visitor import VISITOR_COOKIE_MAX_AGE, VISITOR_COOKIE_NAME, get_or_create_visitor_id

router = APIRouter(prefix="/api", tags=["Pages"])


def _require(value: str, name: str) -> str:
    if not value or not value.strip():
        raise HTTPException(400, f"Paramètre {name} manquant")
    return value


@router.get("/pages/{slug}/resolved")
def api_resolved_page(slug: str, db: Session = Depends(get_db)):
    _require(slug, "slug")
    page = get_resolved_page(DocumentStore(db), slug)
    if page is None:
        raise HTTPException(404, "Page introuvable")
    return dump_document(page)


@router.get("/pages/{slug}/variants/{variant_id}/preview")
def api_preview_variant(slug: str, variant_id: str, db: Session = Depends(get_db)):
    """400 si le variant appartient à une autre page, 404 si page ou variant introuvable."""
    _require(slug, "slug")
    _require(variant_id, "variantId")
    try:
        page = get_resolved_page_with_variant(DocumentStore(db), slug, variant_id)
    except VariantPageMismatchError:
        raise HTTPException(400, "Le variant n'appartient pas à cette page")
    if page is None:
        raise HTTPException(404, "Page ou variant introuvable")
    return dump_document(page)


@router.get("/pages/{slug}/assigned")
def api_assigned_page(slug: str, request: Request, db: Session = Depends(get_db)):
    """
    Page telle que le visiteur doit la voir.

    Expérience running → variant assigné (déterministe) ; sinon page de base avec
    experimentId / variantId nuls. Pose le cookie visitor_id s'il vient d'être généré.
    """
    _require(slug, "slug")
    store = DocumentStore(db)
    visitor = get_or_create_visitor_id(request.cookies)

    result = get_assigned_variant(store, slug, visitor.visitor_id)
    if result is not None:
        body = dump_document(result)
    else:
        page = get_resolved_page(store, slug)
        if page is None:
            raise HTTPException(404, "Page introuvable")
        body = {
            "experimentId": None,
            "variantId":    None,
            "visitorId":    visitor.visitor_id,
            "resolvedPage": dump_document(page),
        }

    response = JSONResponse(body)
    if visitor.is_new:
        response.set_cookie(VISITOR_COOKIE_NAME, visitor.visitor_id,
                            max_age=VISITOR_COOKIE_MAX_AGE, httponly=True, samesite="lax")
    return response
