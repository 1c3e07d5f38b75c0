"""
Catalogue des blocs — description machine du registry + snapshot JSON versionné.

    python -m pagelab.blocks.catalog generate   → réécrit block-registry.json
    python -m pagelab.blocks.catalog check      → exit 1 si le snapshot a dérivé
"""
import argparse
import json
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, List, Optional

from pydantic.alias_generators import to_camel

from .registry import BLOCK_REGISTRY, get_blocks_for_section, is_block_allowed


CATALOG_VERSION = "1.0.0"
SNAPSHOT_PATH = Path(__file__).parent / "block-registry.json"

# Champs internes, absents du catalogue
_INTERNAL_FIELDS = {"block_type", "settings", "resolved_from"}


def _extract_fields(model: type) -> List[dict]:
    fields = []
    for name, info in model.model_fields.items():
        if name in _INTERNAL_FIELDS:
            continue
        fields.append({"name": info.alias or to_camel(name), "required": info.is_required()})
    return fields


def generate_catalog(include_schema: bool = False, section: Optional[str] = None,
                     allowed_block_types: Optional[Iterable[str]] = None) -> dict:
    """
    Catalogue trié par slug. include_schema ajoute le JSON schema pydantic de chaque bloc.
    section restreint aux blocs admis dans la section (ValueError si inconnue) ;
    allowed_block_types restreint à une liste de slugs (vide ou absent = tous).
    """
    entries = get_blocks_for_section(section) if section else list(BLOCK_REGISTRY.values())
    allowed = list(allowed_block_types or [])
    blocks = []
    for entry in sorted(entries, key=lambda e: e.slug):
        if not is_block_allowed(entry.slug, allowed):
            continue
        item = {
            "slug":            entry.slug,
            "label":           entry.label,
            "allowedSections": list(entry.allowed_sections),
            "fields":          _extract_fields(entry.model),
        }
        if include_schema:
            item["schema"] = entry.model.model_json_schema(by_alias=True)
        blocks.append(item)
    return {
        "version":     CATALOG_VERSION,
        "generatedAt": datetime.now(timezone.utc).isoformat(),
        "blocks":      blocks,
    }


def write_snapshot(path: Path = SNAPSHOT_PATH) -> dict:
    catalog = generate_catalog()
    path.write_text(json.dumps(catalog, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
    return catalog


def check_snapshot(path: Path = SNAPSHOT_PATH) -> List[str]:
    """Compare le snapshot disque au registry courant (generatedAt ignoré). [] = synchro."""
    if not path.exists():
        return [f"{path.name} introuvable"]
    on_disk = json.loads(path.read_text(encoding="utf-8"))
    fresh = generate_catalog()
    problems = []
    if on_disk.get("blocks") != fresh["blocks"]:
        problems.append("blocs divergents entre le snapshot et le registry")
    if on_disk.get("version") != fresh["version"]:
        problems.append(f"version : disque={on_disk.get('version')} code={fresh['version']}")
    return problems


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="pagelab.blocks.catalog", description=__doc__)
    parser.add_argument("command", choices=["generate", "check"])
    parser.add_argument("--path", type=Path, default=SNAPSHOT_PATH)
    args = parser.parse_args(argv)

    if args.command == "generate":
        catalog = write_snapshot(args.path)
        print(f"✓ {len(catalog['blocks'])} blocs → {args.path}")
        return 0

    problems = check_snapshot(args.path)
    if problems:
        for p in problems:
            print(f"❌ {p}", file=sys.stderr)
        print("Régénérer : python -m pagelab.blocks.catalog generate", file=sys.stderr)
        return 1
    print(f"✓ Registry synchro ({len(BLOCK_REGISTRY)} blocs, v{CATALOG_VERSION})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
