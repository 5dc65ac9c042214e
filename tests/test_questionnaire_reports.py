"""
Parent questionnaire reports — pure aggregation tests.
"""

from welfare.services.questionnaire_reports import (
    EMPTY_NARRATIVE,
    build_commitment_distribution,
    build_narrative,
    build_report,
    summarize,
    totals_by_center,
    totals_by_grade,
)


def _row(center_id, category, grade=None, center_name=None):
    return {
        "center_id": center_id,
        "center_name": center_name or f"Center {center_id}",
        "grade": grade,
        "commitment_category": category,
    }


class TestNarrative:
    def test_four_responses(self):
        rows = [_row(1, "high"), _row(1, "high"), _row(2, "moderate"), _row(2, "low")]
        assert build_narrative(summarize(rows)) == (
            "Out of 4 parent questionnaires, 50% demonstrate high commitment to Madressa "
            "attendance while 25% fall into the moderate range. 25% remain low commitment "
            "and require additional follow-up."
        )

    def test_empty(self):
        assert build_narrative(summarize([])) == EMPTY_NARRATIVE
        assert build_report([])["narrative"] == EMPTY_NARRATIVE

    def test_percentages_round_half_up(self):
        rows = [_row(1, "high")] + [_row(1, "low")] * 7
        narrative = build_narrative(summarize(rows))
        assert "13% demonstrate high commitment" in narrative
        assert "0% fall into the moderate range" in narrative
        assert "88% remain low commitment" in narrative


class TestTotals:
    def test_totals_by_center_in_first_seen_order(self):
        rows = [_row(2, "low"), _row(1, "high"), _row(2, "high")]
        assert totals_by_center(rows) == [
            {"center_id": 2, "center_name": "Center 2", "total": 2, "high": 1, "moderate": 0, "low": 1},
            {"center_id": 1, "center_name": "Center 1", "total": 1, "high": 1, "moderate": 0, "low": 0},
        ]

    def test_totals_by_grade_skips_blank_grades(self):
        rows = [
            _row(1, "high", grade="Grade 3"),
            _row(1, "moderate", grade="Grade 3"),
            _row(1, "low", grade="  "),
            _row(1, "low", grade=None),
        ]
        assert totals_by_grade(rows) == [
            {"grade": "Grade 3", "total": 2, "high": 1, "moderate": 1, "low": 0},
        ]

    def test_distribution_buckets_missing_category_as_unknown(self):
        rows = [_row(1, "high"), _row(1, None), _row(1, "high")]
        assert build_commitment_distribution(rows) == [
            {"category": "high", "total": 2, "percentage": 67},
            {"category": "unknown", "total": 1, "percentage": 33},
        ]

    def test_distribution_empty(self):
        assert build_commitment_distribution([]) == []

    def test_summary_counts(self):
        rows = [_row(1, "high"), _row(1, "low"), _row(1, None)]
        assert summarize(rows) == {"total_responses": 3, "high": 1, "moderate": 0, "low": 1}


class TestBuildReport:
    def test_keys(self):
        report = build_report([_row(1, "high", grade="Grade 1")])
        assert set(report) == {
            "totals_by_center",
            "totals_by_grade",
            "commitment_distribution",
            "narrative",
        }
        assert report["commitment_distribution"] == [
            {"category": "high", "total": 1, "percentage": 100},
        ]
