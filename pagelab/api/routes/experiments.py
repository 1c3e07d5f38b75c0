"""
GET /api/experiments/stats — impressions / conversions / taux par variant (running + paused).
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...database import DocumentStore, get_db
from ...models import dump_document
from ...stats import compute_experiment_stats

router = APIRouter(prefix="/api", tags=["Experiments"])


@router.get("/experiments/stats")
def api_experiment_stats(db: Session = Depends(get_db)):
    return [dump_document(s) for s in compute_experiment_stats(DocumentStore(db))]
