"""Tests for confidence tier ordering and merging."""

import pytest

from postcredit.core.confidence import Confidence, merge_confidence


def test_tiers_form_a_strict_total_order():
    ordered = [Confidence.UNATTRIBUTED, Confidence.LOW, Confidence.MEDIUM, Confidence.HIGH]
    assert sorted(reversed(ordered)) == ordered
    assert Confidence.HIGH > Confidence.MEDIUM > Confidence.LOW > Confidence.UNATTRIBUTED
    assert Confidence.LOW >= Confidence.LOW
    assert not Confidence.MEDIUM < Confidence.LOW


def test_ordering_is_by_rank_not_by_string_value():
    # Alphabetically "HIGH" < "LOW"; by rank it is the other way round
    assert Confidence.HIGH > Confidence.LOW
    assert max([Confidence.LOW, Confidence.HIGH]) is Confidence.HIGH


def test_merge_low_and_medium_is_medium():
    assert merge_confidence([Confidence.LOW, Confidence.MEDIUM]) is Confidence.MEDIUM


def test_merge_of_nothing_is_unattributed():
    assert merge_confidence([]) is Confidence.UNATTRIBUTED


@pytest.mark.parametrize(
    "existing",
    [
        [],
        [Confidence.LOW],
        [Confidence.MEDIUM, Confidence.LOW],
        [Confidence.UNATTRIBUTED, Confidence.MEDIUM],
        [Confidence.HIGH],
    ],
)
def test_adding_high_always_yields_high(existing):
    assert merge_confidence(existing + [Confidence.HIGH]) is Confidence.HIGH


def test_values_round_trip_through_strings():
    assert Confidence("MEDIUM") is Confidence.MEDIUM
    assert Confidence.MEDIUM == "MEDIUM"
