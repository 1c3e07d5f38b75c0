"""
Tracking — événements analytics + leads.
POST /api/events  {eventType, experiment?, variant?, visitorId?, page?, blockId?, eventName?, eventData?}
POST /api/leads   {email, name?, experiment?, variant?, visitorId?, page?, formData?, source?}
"""
import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ...database import DocumentStore, get_db
from ...errors import DocumentValidationError
from ...models import AnalyticsEventInput, Collection, LeadInput

log = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["Tracking"])


def _create(db: Session, collection: Collection, payload) -> dict:
    data = payload.model_dump(mode="json", by_alias=True, exclude_none=True)
    try:
        return DocumentStore(db).create(collection.value, data)
    except DocumentValidationError as e:
        raise HTTPException(400, e.to_dict())


@router.post("/events", status_code=201)
def api_track_event(body: AnalyticsEventInput, db: Session = Depends(get_db)):
    doc = _create(db, Collection.ANALYTICS_EVENTS, body)
    log.debug("Événement %s enregistré (expérience %s, variant %s)",
              doc.get("eventType"), doc.get("experiment"), doc.get("variant"))
    return doc


@router.post("/leads", status_code=201)
def api_capture_lead(body: LeadInput, db: Session = Depends(get_db)):
    doc = _create(db, Collection.LEADS, body)
    log.info("Lead capturé : %s (variant %s)", doc.get("email"), doc.get("variant"))
    return doc
