import math

import pytest

from smartscan.ocr_pipeline import MarkCandidate, coerce_mark, validate_candidate, validate_candidates


@pytest.mark.parametrize(
    "value, expected",
    [
        (78, 78),
        (0, 0),
        (100, 100),
        (99.5, 99.5),
        (999, None),
        (-1, None),
        (True, None),
        ("78", None),
        (None, None),
        (math.nan, None),
        (math.inf, None),
    ],
)
def test_coerce_mark(value, expected):
    assert coerce_mark(value, max_mark=100) == expected


def test_out_of_range_mark_becomes_null():
    candidate = validate_candidate({"studentId": "T/UDOM/2021/001", "mark": 999}, max_mark=100)

    assert candidate == MarkCandidate(student_id="T/UDOM/2021/001", mark=None)


@pytest.mark.parametrize("student_id", ["", "   ", None, 12345])
def test_blank_or_missing_student_id_is_dropped(student_id):
    assert validate_candidate({"studentId": student_id, "mark": 50}, max_mark=100) is None


def test_student_id_is_kept_exactly():
    candidate = validate_candidate({"studentId": " bs-cs-01-001/2020 ", "mark": 5}, max_mark=10)

    assert candidate is not None
    assert candidate.student_id == " bs-cs-01-001/2020 "


def test_snake_case_keys_are_accepted():
    candidate = validate_candidate({"student_id": "S-1", "mark": 4}, max_mark=10)

    assert candidate is not None
    assert candidate.mark == 4


def test_non_mapping_items_are_dropped():
    assert validate_candidate(["S-1", 4], max_mark=10) is None


@pytest.mark.parametrize("payload", [{"studentId": "S-1", "mark": 3}, "S-1", None, 42])
def test_non_array_payload_degrades_to_empty(payload):
    assert validate_candidates(payload, max_mark=10) == []


def test_validate_candidates_filters_and_clamps():
    payload = [
        {"studentId": "S-1", "mark": 8},
        {"studentId": "", "mark": 9},
        {"studentId": "S-2", "mark": 11},
        {"studentId": "S-3"},
        "garbage",
    ]

    candidates = validate_candidates(payload, max_mark=10)

    assert [(c.student_id, c.mark) for c in candidates] == [("S-1", 8), ("S-2", None), ("S-3", None)]


def test_model_rejects_invalid_numeric_state():
    with pytest.raises(ValueError):
        MarkCandidate(student_id="S-1", mark=math.nan)
    with pytest.raises(ValueError):
        MarkCandidate(student_id="S-1", mark=-3)


@pytest.mark.parametrize("student_id", ["", "  "])
def test_model_rejects_blank_student_id(student_id):
    with pytest.raises(ValueError):
        MarkCandidate(student_id=student_id, mark=1)
