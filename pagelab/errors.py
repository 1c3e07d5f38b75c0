"""Exceptions du domaine — traduites en 400 / 404 / 500 par les routes."""


class DocumentValidationError(ValueError):
    """Écriture refusée par un hook (invariant d'expérience, slug dupliqué, forme du document)."""

    def __init__(self, message: str, path: str = ""):
        super().__init__(message)
        self.message = message
        self.path = path

    def to_dict(self) -> dict:
        return {"message": self.message, "path": self.path}


class VariantPageMismatchError(ValueError):
    """Le variant demandé appartient à une autre page (requête invalide, pas un 404)."""

    def __init__(self, variant_id: str, page_slug: str):
        super().__init__(f"Variant {variant_id} n'appartient pas à la page {page_slug!r}")
        self.variant_id = variant_id
        self.page_slug = page_slug


class ExperimentIntegrityError(RuntimeError):
    """Invariant d'écriture contourné : expérience sans variant, variant disparu ou étranger."""
