import json
from pathlib import Path

from rebootlab.utils.time import utc_now_iso


def write_json_report(payload: dict, out_path: Path) -> None:
    out_path.parent.mkdir(parents=True, exist_ok=True)
    document = {"generated_at": utc_now_iso(), **payload}
    out_path.write_text(json.dumps(document, indent=2, sort_keys=True, default=str), encoding="utf-8")
