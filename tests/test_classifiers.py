"""Diagnostic symbol classifiers for each input representation."""

from __future__ import annotations

from ppmpredict.config import Representation
from ppmpredict.data.classifiers import (
    FINAL_LOCATION,
    INITIAL_DURATION,
    INITIAL_LOCATION,
    INITIAL_START_TIME,
    SymbolKind,
    build_classifier,
)


def test_locstrings_split_on_colon() -> None:
    classify = build_classifier(Representation.LOCSTRINGS)
    assert classify(ord(":"), 0) is SymbolKind.DELIM
    assert classify(ord("A"), 1) is SymbolKind.LOC


def test_boxstrings_use_position_modulo_six() -> None:
    classify = build_classifier(Representation.BOXSTRINGS)
    kinds = [classify(0, i) for i in range(7)]
    assert kinds == [
        SymbolKind.STRT,
        SymbolKind.STRT,
        SymbolKind.LOC,
        SymbolKind.LOC,
        SymbolKind.DUR,
        SymbolKind.DUR,
        SymbolKind.STRT,
    ]


def test_loctimestrings_cycle_is_per_classifier_instance() -> None:
    classify = build_classifier(Representation.LOCTIMESTRINGS)
    text = "L}1200:0130"
    kinds = [classify(ord(ch), i) for i, ch in enumerate(text)]
    assert kinds[0] is SymbolKind.LOC
    assert kinds[1] is SymbolKind.DELIM
    assert kinds[2:6] == [SymbolKind.STRT] * 4
    assert kinds[6] is SymbolKind.DELIM
    assert kinds[7:] == [SymbolKind.DUR] * 4

    fresh = build_classifier(Representation.LOCTIMESTRINGS)
    assert fresh(ord("Q"), 0) is SymbolKind.LOC


def test_binary_box_string_ranges() -> None:
    classify = build_classifier(Representation.BINBOXSTRINGS)
    assert classify(INITIAL_START_TIME, 0) is SymbolKind.STRT
    assert classify(INITIAL_DURATION, 0) is SymbolKind.DUR
    assert classify(INITIAL_LOCATION, 0) is SymbolKind.LOC
    assert classify(FINAL_LOCATION, 0) is SymbolKind.LOC
    assert classify(FINAL_LOCATION + 1, 0) is SymbolKind.DELIM


def test_day_of_week_timeslot_ranges() -> None:
    classify = build_classifier(Representation.BINDOWTS)
    assert classify(0x25FF, 0) is SymbolKind.STRT
    assert classify(0x2610, 0) is SymbolKind.DELIM
    assert classify(0x26FF, 0) is SymbolKind.LOC


def test_unknown_representation_labels_everything_a_delimiter() -> None:
    classify = build_classifier(Representation.NONE)
    assert classify(INITIAL_LOCATION, 3) is SymbolKind.DELIM
    assert Representation.NONE.label == "Unknown"
    assert Representation.BINBOXSTRINGS.label == "Binboxstrings"
