"""
Parent Questionnaire Scoring — commitment score, category, flag level and
inconsistency flags derived from the raw questionnaire answers.

Business context:
    Parents of Madressa students complete a questionnaire on enrolment.
    The attendance-frequency answer drives a 0–5 commitment score; a fixed
    set of cross-field rules flags answer combinations that need a
    caseworker's follow-up.

    score >= 4  → category "high",     flag "green"
    score == 3  → category "moderate", flag "amber"
    otherwise   → category "low",      flag "red"
    any inconsistency → flag "amber" (overrides green and red alike)

Everything here is pure and deterministic: the same answers always produce
the same assessment, so re-submitting a questionnaire is idempotent.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field

ATTENDANCE_SCORE_MAP: dict[str, int] = {
    "7 days per week": 5,
    "6 days per week": 5,
    "5 days per week": 4,
    "4 days per week": 4,
    "only weekdays (monday to friday)": 4,
    "only weekends (saturday & sunday)": 3,
    "3 days per week": 3,
    "flexible / varies weekly": 3,
    "2 days per week": 2,
    "1 day per week": 1,
    "not sure / irregular attendance": 1,
}

HIGH_COMMITMENT_THRESHOLD = 4
AMBER_COMMITMENT_SCORE = 3
LOW_ATTENDANCE_MAX_SCORE = 2

WELFARE_EXPECTATION = "we are primarily interested in the welfare and material benefits provided"
OTHER_EXPECTATION = "Other (please specify)"

FLAG_BURIAL_WITHOUT_INTEREST = (
    "Parent consented to Islamic burial but indicated no interest in learning about Islam."
)
FLAG_WELFARE_LOW_ATTENDANCE = (
    "Low attendance commitment paired with welfare-focused expectations."
)
FLAG_UNSCORED_ATTENDANCE = (
    "Unable to score attendance commitment because frequency response is unrecognized."
)
FLAG_OTHER_WITHOUT_CONTEXT = 'Expectations include "Other" without additional context.'
FLAG_MEDICAL_VS_POLICY = (
    "Parent declined medical consent but agreed to policy compliance."
)


@dataclass(frozen=True)
class CommitmentAssessment:
    commitment_score: int
    commitment_category: str
    flag_level: str
    inconsistency_flags: list = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "commitment_score": self.commitment_score,
            "commitment_category": self.commitment_category,
            "flag_level": self.flag_level,
            "inconsistency_flags": list(self.inconsistency_flags),
        }


def _normalize(value):
    return value.strip().lower() if isinstance(value, str) else value


def _startswith(value, prefix: str) -> bool:
    normalized = _normalize(value)
    return isinstance(normalized, str) and normalized.startswith(prefix)


def decode_json_list(value) -> list:
    """Decode a JSON-encoded list; malformed or non-list input yields []."""
    if isinstance(value, list):
        return value
    if isinstance(value, str) and value:
        try:
            decoded = json.loads(value)
        except ValueError:
            return []
        return decoded if isinstance(decoded, list) else []
    return []


def calculate_commitment_score(answers: dict) -> int:
    frequency = _normalize(answers.get("attendance_frequency"))
    if not frequency or not isinstance(frequency, str):
        return 0
    return ATTENDANCE_SCORE_MAP.get(frequency, 0)


def determine_commitment_category(score: int) -> str:
    if score >= HIGH_COMMITMENT_THRESHOLD:
        return "high"
    if score == AMBER_COMMITMENT_SCORE:
        return "moderate"
    return "low"


def determine_flag_level(score: int) -> str:
    if score >= HIGH_COMMITMENT_THRESHOLD:
        return "green"
    if score == AMBER_COMMITMENT_SCORE:
        return "amber"
    return "red"


def evaluate_inconsistencies(answers: dict) -> list[str]:
    """Return the inconsistency messages triggered by the answers, in rule order."""
    flags: list[str] = []

    interest = _normalize(answers.get("parent_interest"))
    if _startswith(answers.get("burial_consent"), "yes") and isinstance(interest, str) and (
        interest.startswith("no") or "not interested" in interest
    ):
        flags.append(FLAG_BURIAL_WITHOUT_INTEREST)

    raw_expectations = answers.get("expectations")
    expectations = raw_expectations if isinstance(raw_expectations, list) else []
    score = calculate_commitment_score(answers)

    welfare_focused = WELFARE_EXPECTATION in [_normalize(e) for e in expectations]
    if welfare_focused and score <= LOW_ATTENDANCE_MAX_SCORE:
        flags.append(FLAG_WELFARE_LOW_ATTENDANCE)

    if not score and answers.get("attendance_frequency_other"):
        flags.append(FLAG_UNSCORED_ATTENDANCE)

    if OTHER_EXPECTATION in expectations and not answers.get("expectations_other"):
        flags.append(FLAG_OTHER_WITHOUT_CONTEXT)

    if _startswith(answers.get("medical_consent"), "no") and _startswith(
        answers.get("policy_compliance"), "yes"
    ):
        flags.append(FLAG_MEDICAL_VS_POLICY)

    return flags


def _working_answers(answers: dict) -> dict:
    working = dict(answers or {})
    expectations = working.get("expectations")
    if isinstance(expectations, str):
        working["expectations"] = decode_json_list(expectations)
    elif not isinstance(expectations, list):
        working["expectations"] = []
    return working


def score_answers(answers: dict) -> CommitmentAssessment:
    """Score a questionnaire answer set."""
    working = _working_answers(answers)
    score = calculate_commitment_score(working)
    inconsistencies = evaluate_inconsistencies(working)
    flag_level = "amber" if inconsistencies else determine_flag_level(score)
    return CommitmentAssessment(
        commitment_score=score,
        commitment_category=determine_commitment_category(score),
        flag_level=flag_level,
        inconsistency_flags=inconsistencies,
    )


def enrich_for_persistence(payload: dict) -> dict:
    """Return a copy of ``payload`` with decoded expectations and derived fields.

    Any client-supplied derived values are overwritten.
    """
    working = _working_answers(payload)
    working.update(score_answers(working).to_dict())
    return working


def hydrate_record(record: dict) -> dict:
    """Decode JSON list columns of a stored row into lists."""
    hydrated = dict(record or {})
    hydrated["expectations"] = decode_json_list(hydrated.get("expectations"))
    hydrated["inconsistency_flags"] = decode_json_list(hydrated.get("inconsistency_flags"))
    return hydrated
