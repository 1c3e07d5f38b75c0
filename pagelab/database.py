"""SQLite — init + session + DocumentStore (find / create / update / delete + population des relations)"""
import copy
import json, os
import logging
import uuid
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

from pydantic import ValidationError
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from .errors import DocumentValidationError
from .hooks import IMMUTABLE_FIELDS, run_before_change
from .models import Base, Collection, DOCUMENT_MODELS, DocumentDB, relation_id

log = logging.getLogger(__name__)

DATA_DIR = Path(__file__).parent.parent / "data"

DB_PATH      = os.getenv("DB_PATH", str(DATA_DIR / "pagelab.db"))
ENGINE       = create_engine(f"sqlite:///{DB_PATH}", connect_args={"check_same_thread": False})
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=ENGINE)


def init_db(engine=None):
    engine = engine or ENGINE
    if engine is ENGINE:
        Path(DB_PATH).parent.mkdir(parents=True, exist_ok=True)
    Base.metadata.create_all(bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# ── JSON helpers ──
def jl(s: str) -> dict:
    return json.loads(s or "{}")

def jd(o) -> str:
    return json.dumps(o, ensure_ascii=False)


# ── Relations ──
# (liste contenante ou None, clé de la relation, collection cible)
Relation = Tuple[Optional[str], str, str]

_ATTRIBUTION: List[Relation] = [
    (None, "experiment", Collection.EXPERIMENTS.value),
    (None, "variant",    Collection.PAGE_VARIANTS.value),
    (None, "page",       Collection.PAGES.value),
]

RELATIONS: Dict[str, List[Relation]] = {
    Collection.PAGES.value: [
        ("content", "block", Collection.REUSABLE_BLOCKS.value),
    ],
    Collection.PAGE_VARIANTS.value: [
        (None, "page", Collection.PAGES.value),
        ("contentOverride", "block", Collection.REUSABLE_BLOCKS.value),
    ],
    Collection.EXPERIMENTS.value: [
        (None, "page", Collection.PAGES.value),
        ("variants", "variant", Collection.PAGE_VARIANTS.value),
    ],
    Collection.REUSABLE_BLOCKS.value: [],
    Collection.ANALYTICS_EVENTS.value: _ATTRIBUTION,
    Collection.LEADS.value:            _ATTRIBUTION,
}


def _holders(doc: dict, container: Optional[str]) -> Iterable[dict]:
    """Dicts portant la relation : le document lui-même ou chaque élément de la liste."""
    if container is None:
        return [doc]
    items = doc.get(container)
    if not isinstance(items, list):
        return []
    return [item for item in items if isinstance(item, dict)]


def _matches(doc: dict, key: str, expected: Any) -> bool:
    value = doc.get(key)
    if isinstance(value, dict):
        value = relation_id(value)
    if isinstance(expected, (list, tuple, set, frozenset)):
        return value in expected
    return value == expected


class DocumentStore:
    """
    Store documentaire au-dessus de la table documents.

    depth contrôle la population des relations : 0 = ids nus, n = documents référencés
    inlinés récursivement (n-1 à chaque niveau). Une relation pendante reste un id nu.
    """

    def __init__(self, db: Session):
        self.db = db

    # ── Lecture ──

    def _row(self, collection: str, doc_id: str) -> Optional[DocumentDB]:
        return self.db.query(DocumentDB).filter_by(collection=collection, doc_id=doc_id).first()

    def _to_doc(self, row: DocumentDB, depth: int) -> dict:
        doc = jl(row.data)
        doc["id"] = row.doc_id
        doc.setdefault("createdAt", row.created_at.isoformat() if row.created_at else None)
        doc.setdefault("updatedAt", row.updated_at.isoformat() if row.updated_at else None)
        if depth > 0:
            self._populate(row.collection, doc, depth)
        return doc

    def _populate(self, collection: str, doc: dict, depth: int) -> None:
        for container, key, target in RELATIONS.get(collection, []):
            for holder in _holders(doc, container):
                ref = holder.get(key)
                if not isinstance(ref, str):
                    continue
                related = self.find_by_id(target, ref, depth=depth - 1)
                if related is not None:
                    holder[key] = related

    def find_by_id(self, collection: str, doc_id: str, depth: int = 0) -> Optional[dict]:
        row = self._row(collection, doc_id)
        return self._to_doc(row, depth) if row else None

    def find_by_slug(self, collection: str, slug: str, depth: int = 0) -> Optional[dict]:
        row = self.db.query(DocumentDB).filter_by(collection=collection, slug=slug).first()
        return self._to_doc(row, depth) if row else None

    def find_where(self, collection: str, where: Optional[Dict[str, Any]] = None,
                   depth: int = 0, limit: Optional[int] = None) -> List[dict]:
        """
        Documents d'une collection filtrés sur des clés de premier niveau, ordre de création.
        Valeur scalaire = égalité ; list/tuple/set = appartenance. Les relations comparent l'id.
        """
        where = where or {}
        q = self.db.query(DocumentDB).filter_by(collection=collection).order_by(DocumentDB.pk)
        docs: List[dict] = []
        for row in q:
            raw = jl(row.data)
            raw["id"] = row.doc_id
            if not all(_matches(raw, k, v) for k, v in where.items()):
                continue
            docs.append(self._to_doc(row, depth))
            if limit is not None and len(docs) >= limit:
                break
        return docs

    # ── Écriture ──

    def _normalize(self, collection: str, data: dict) -> dict:
        """Relations stockées sous forme d'id nu, même si un document peuplé est fourni."""
        for container, key, _target in RELATIONS.get(collection, []):
            for holder in _holders(data, container):
                if isinstance(holder.get(key), dict):
                    holder[key] = relation_id(holder[key])
        return data

    def _validate(self, collection: str, data: dict) -> None:
        model = DOCUMENT_MODELS[collection]
        try:
            model.model_validate(data)
        except ValidationError as e:
            first = e.errors()[0]
            path = ".".join(str(p) for p in first.get("loc", ()))
            raise DocumentValidationError(first.get("msg", str(e)), path=path) from e

    def _prepare(self, collection: str, data: dict, operation: str) -> dict:
        # Forme vérifiée avant les hooks (sur une copie normalisée), puis après
        self._validate(collection, self._normalize(collection, copy.deepcopy(data)))
        data = run_before_change(collection, data, operation, self)
        data = self._normalize(collection, data)
        self._validate(collection, data)
        return data

    def create(self, collection: str, data: dict) -> dict:
        if collection not in DOCUMENT_MODELS:
            raise ValueError(f"Collection inconnue : {collection!r}")
        data = copy.deepcopy(data)
        data["id"] = str(data.get("id") or uuid.uuid4())
        if self._row(collection, data["id"]) is not None:
            raise DocumentValidationError(f"Id déjà utilisé : {data['id']}", path="id")
        try:
            data = self._prepare(collection, data, "create")
        except DocumentValidationError as e:
            log.info("Création refusée (%s) : %s [%s]", collection, e.message, e.path)
            raise
        row = DocumentDB(collection=collection, doc_id=data["id"], slug=data.get("slug"), data=jd(data))
        self.db.add(row); self.db.commit(); self.db.refresh(row)
        return self._to_doc(row, depth=0)

    def update(self, collection: str, doc_id: str, data: dict) -> Optional[dict]:
        """Mise à jour partielle (fusion clé par clé). None si le document n'existe pas."""
        row = self._row(collection, doc_id)
        if row is None:
            return None
        incoming = copy.deepcopy(data)
        for field in IMMUTABLE_FIELDS.get(collection, ()):
            incoming.pop(field, None)
        merged = {**jl(row.data), **incoming, "id": doc_id}
        try:
            merged = self._prepare(collection, merged, "update")
        except DocumentValidationError as e:
            log.info("Mise à jour refusée (%s/%s) : %s [%s]", collection, doc_id, e.message, e.path)
            raise
        row.slug = merged.get("slug")
        row.data = jd(merged)
        self.db.commit(); self.db.refresh(row)
        return self._to_doc(row, depth=0)

    def delete(self, collection: str, doc_id: str) -> bool:
        row = self._row(collection, doc_id)
        if row is None:
            return False
        self.db.delete(row); self.db.commit()
        return True
