import json
import yaml
import httpx
from pathlib import Path
from typing import Any, List, Mapping

from surface_prober.config import REQUEST_TIMEOUT
from surface_prober.core.bridge import ExecutionBridge, PlaywrightBridge
from surface_prober.core.catalogue import build_catalogue, catalogue_from_compat
from surface_prober.core.colors import Colors as C
from surface_prober.core.models import ProtoChainRecord
from surface_prober.core.pipeline import ClassificationPipeline
from surface_prober.core.storage import write_css_surface, write_records


# ----------------------------------------------------------------------
# Dataset loader
# ----------------------------------------------------------------------

def load_dataset(source: str) -> Mapping[str, Any]:
    """
    Carrega el dataset des d'una URL (httpx) o d'un fitxer JSON / YAML.
    """
    if source.startswith(("http://", "https://")):
        response = httpx.get(source, timeout=REQUEST_TIMEOUT, follow_redirects=True)
        response.raise_for_status()
        return response.json()

    path = Path(source).resolve()
    if not path.exists():
        raise FileNotFoundError(f"Dataset file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        if path.suffix in (".yaml", ".yml"):
            raw = yaml.safe_load(f) or {}
        else:
            raw = json.load(f)

    if not isinstance(raw, dict):
        raise ValueError(f"Dataset must be a mapping, got {type(raw).__name__}: {path}")
    return raw


def load_catalogue(source: str) -> List[ProtoChainRecord]:
    """
    Two accepted shapes:
      - browser-compat-data ({"api": {...}, "css": {"properties": {...}}})
      - plain namespaces ({"Window": ["alert", "document"]})
    """
    dataset = load_dataset(source)
    if "api" in dataset or "css" in dataset:
        return catalogue_from_compat(dataset)
    return build_catalogue(dataset)


# ----------------------------------------------------------------------
# Run
# ----------------------------------------------------------------------

def classify_catalogue(
    records: List[ProtoChainRecord],
    bridge: ExecutionBridge | None = None,
    output: str | None = None,
    css_surface: str | None = None,
    verbose: bool = True,
) -> List[ProtoChainRecord]:
    bridge = bridge or PlaywrightBridge(progress=verbose)

    persist = None
    if output:
        def persist(finalized):
            path = write_records(finalized, output)
            if verbose:
                print(f"[+] Wrote {len(finalized)} records to {C.BOLD}{path}{C.RESET}")

    pipeline = ClassificationPipeline(bridge, persist=persist, verbose=verbose)
    finalized = pipeline.run(records)

    if css_surface:
        surface = pipeline.enumerate_css()
        path = write_css_surface(surface, css_surface)
        if verbose:
            print(
                f"[+] CSS surface: {len(surface.properties)} properties, "
                f"{len(surface.values)} values -> {C.BOLD}{path}{C.RESET}"
            )

    return finalized
