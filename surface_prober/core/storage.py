import json
from pathlib import Path
from typing import List, Sequence

from surface_prober.core.models import CssSurface, ProtoChainRecord


def write_records(records: Sequence[ProtoChainRecord], path: str | Path) -> Path:
    """Serialize finalized records as one JSON document (ex. meta.json)."""
    output = Path(path)
    output.parent.mkdir(parents=True, exist_ok=True)

    with open(output, "w", encoding="utf-8") as f:
        json.dump([record.to_output() for record in records], f, indent=2)
        f.write("\n")
    return output


def read_records(path: str | Path) -> List[ProtoChainRecord]:
    with open(path, "r", encoding="utf-8") as f:
        raw = json.load(f)

    records = []
    for entry in raw:
        entry = dict(entry)
        # astNodeType is only an output alias of astNodeTypes
        entry.pop("astNodeType", None)
        records.append(ProtoChainRecord.model_validate(entry))
    return records


def write_css_surface(surface: CssSurface, path: str | Path) -> Path:
    output = Path(path)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(surface.model_dump_json(indent=2) + "\n", encoding="utf-8")
    return output
