from pathlib import Path


def _evidence_line(evidence: dict) -> str:
    keys = ("missing", "violations", "elapsed", "last_value", "got", "want", "before", "after")
    parts = [f"{k}={evidence[k]}" for k in keys if evidence.get(k) not in (None, [], {})]
    return "; ".join(parts)


def write_markdown_report(payload: dict, out_path: Path) -> None:
    lines = ["# rebootlab report", "", "## Summary"]
    summary = payload.get("summary", {})
    lines.append(f"- Lab: {payload.get('lab', 'unknown')}")
    lines.append(f"- Exit code: {summary.get('exit_code', 1)}")
    lines.append(f"- Status counts: {summary.get('counts_by_status', {})}")
    for case, status in summary.get("case_status", {}).items():
        lines.append(f"- `{case}`: **{status}**")
    lines.append("")
    lines.append("## Results")

    grouped: dict[str, list[dict]] = {}
    for item in payload.get("results", []):
        grouped.setdefault(item.get("case", "other"), []).append(item)

    for case, items in grouped.items():
        lines.append(f"### {case}")
        for item in items:
            lines.append(f"- **{item['status']}** `{item['name']}`: {item['message']}")
            detail = _evidence_line(item.get("evidence") or {})
            if detail and item["status"] != "PASS":
                lines.append(f"  - {detail}")
        lines.append("")

    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text("\n".join(lines), encoding="utf-8")
