"""
Parent Questionnaire Reports — pure aggregation over scored questionnaire rows.

Input rows are plain dicts with at least:
    center_id, center_name, grade, commitment_category

Output (``build_report``):
    {
        "totals_by_center": [{center_id, center_name, total, high, moderate, low}],
        "totals_by_grade": [{grade, total, high, moderate, low}],
        "commitment_distribution": [{category, total, percentage}],
        "narrative": "Out of N parent questionnaires, ...",
    }

Percentages round half up (12.5 → 13), matching the figures shown in the
existing reports UI.
"""

from __future__ import annotations

import math

EMPTY_NARRATIVE = "No parent questionnaire responses recorded for the selected filters."


def _percent(count: int, total: int) -> int:
    return math.floor(count / total * 100 + 0.5)


def _blank_counts() -> dict:
    return {"total": 0, "high": 0, "moderate": 0, "low": 0}


def _tally(bucket: dict, category) -> None:
    bucket["total"] += 1
    if category:
        bucket[category] = bucket.get(category, 0) + 1


def totals_by_center(rows: list[dict]) -> list[dict]:
    """Group rows by center, preserving first-seen order."""
    groups: dict = {}
    for row in rows:
        key = row.get("center_id")
        if key not in groups:
            groups[key] = {
                "center_id": key,
                "center_name": row.get("center_name"),
                **_blank_counts(),
            }
        _tally(groups[key], row.get("commitment_category"))
    return list(groups.values())


def totals_by_grade(rows: list[dict]) -> list[dict]:
    """Group rows by grade; rows without a grade are left out."""
    groups: dict = {}
    for row in rows:
        grade = row.get("grade")
        if not isinstance(grade, str) or not grade.strip():
            continue
        if grade not in groups:
            groups[grade] = {"grade": grade, **_blank_counts()}
        _tally(groups[grade], row.get("commitment_category"))
    return list(groups.values())


def build_commitment_distribution(rows: list[dict]) -> list[dict]:
    counts: dict = {}
    for row in rows:
        category = row.get("commitment_category") or "unknown"
        counts[category] = counts.get(category, 0) + 1

    total = len(rows) or 1
    return [
        {"category": category, "total": value, "percentage": _percent(value, total)}
        for category, value in counts.items()
    ]


def summarize(rows: list[dict]) -> dict:
    summary = {"total_responses": 0, "high": 0, "moderate": 0, "low": 0}
    for row in rows:
        summary["total_responses"] += 1
        category = row.get("commitment_category")
        if category:
            summary[category] = summary.get(category, 0) + 1
    return summary


def build_narrative(summary: dict) -> str:
    total = summary.get("total_responses", 0)
    if not total:
        return EMPTY_NARRATIVE

    high = _percent(summary.get("high", 0), total)
    moderate = _percent(summary.get("moderate", 0), total)
    low = _percent(summary.get("low", 0), total)
    return (
        f"Out of {total} parent questionnaires, {high}% demonstrate high commitment "
        f"to Madressa attendance while {moderate}% fall into the moderate range. "
        f"{low}% remain low commitment and require additional follow-up."
    )


def build_report(rows: list[dict]) -> dict:
    return {
        "totals_by_center": totals_by_center(rows),
        "totals_by_grade": totals_by_grade(rows),
        "commitment_distribution": build_commitment_distribution(rows),
        "narrative": build_narrative(summarize(rows)),
    }
