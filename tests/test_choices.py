"""Tests für den Import einer Kurswahl aus YAML/JSON."""

import json
from pathlib import Path

import pytest

from config.defaults import default_catalog
from data.choices_import import ChoicesImportError, apply_choices, load_choices
from models.exam import Exam


@pytest.fixture
def selection():
    return default_catalog().instantiate()


class TestLoadChoices:
    def test_load_yaml(self, tmp_path: Path):
        path = tmp_path / "wahl.yaml"
        path.write_text(
            "de: all\n"
            "mat:\n"
            "  semesters: [1, 2, 3, 4]\n"
            "  exam: LF1\n",
            encoding="utf-8",
        )
        choices = load_choices(path)
        assert choices["de"] == "all"
        assert choices["mat"]["exam"] == "LF1"

    def test_load_json(self, tmp_path: Path):
        path = tmp_path / "wahl.json"
        path.write_text(json.dumps({"spo": "all"}), encoding="utf-8")
        assert load_choices(path) == {"spo": "all"}

    def test_empty_file(self, tmp_path: Path):
        path = tmp_path / "leer.yaml"
        path.write_text("", encoding="utf-8")
        assert load_choices(path) == {}

    def test_not_a_mapping(self, tmp_path: Path):
        path = tmp_path / "liste.yaml"
        path.write_text("- de\n- mat\n", encoding="utf-8")
        with pytest.raises(ChoicesImportError):
            load_choices(path)

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(ChoicesImportError):
            load_choices(tmp_path / "fehlt.yaml")

    def test_invalid_json(self, tmp_path: Path):
        path = tmp_path / "kaputt.json"
        path.write_text("{de: ", encoding="utf-8")
        with pytest.raises(ChoicesImportError):
            load_choices(path)


class TestApplyChoices:
    def test_all_selects_window(self, selection):
        report = apply_choices(selection, {"de": "all", "spo-th": "all"})
        assert report.ok
        assert report.applied == 2
        assert selection.find_by_id("de").semesters == (True,) * 4
        assert selection.find_by_id("spo-th").semesters == (False, False, True, True)

    def test_all_on_partial_selection(self, selection):
        """'all' wählt das ganze Fenster auch bei vorhandener Teilwahl."""
        selection.set_semester("de", 2, True)
        apply_choices(selection, {"de": "all"})
        assert selection.selected_semester_count("de") == 4

    def test_semesters_and_exam(self, selection):
        report = apply_choices(selection, {
            "mat": {"semesters": [1, 2, 3, 4], "exam": "1. LF"},
        })
        assert report.ok
        assert selection.exam_holder(Exam.LF1) == "mat"

    def test_out_of_window_rejected(self, selection):
        """Semester außerhalb des Fensters landen als Fehler, der Rest wird übernommen."""
        report = apply_choices(selection, {"ski": {"semesters": [1, 2]}})
        assert len(report.errors) == 1
        assert selection.find_by_id("ski").semesters == (False, True, False, False)

    def test_semester_outside_program(self, selection):
        report = apply_choices(selection, {"de": {"semesters": [5, "x"]}})
        assert len(report.errors) == 2
        assert selection.selected_semester_count("de") == 0

    def test_semesters_not_a_list(self, selection):
        """'semesters' ohne Liste wird gemeldet, die übrige Wahl läuft weiter."""
        report = apply_choices(selection, {
            "de": {"semesters": 3},
            "mat": {"semesters": [1, 2]},
        })
        assert len(report.errors) == 1
        assert "Liste" in report.errors[0]
        assert report.applied == 2
        assert selection.selected_semester_count("de") == 0
        assert selection.selected_semester_count("mat") == 2

    def test_unknown_course(self, selection):
        report = apply_choices(selection, {"astro": "all"})
        assert not report.ok
        assert report.applied == 0

    def test_exam_slot_unique(self, selection):
        """Ein Prüfungsfach wird nie an zwei Kurse vergeben."""
        report = apply_choices(selection, {
            "de": {"semesters": [1, 2, 3, 4], "exam": "LF1"},
            "mat": {"semesters": [1, 2, 3, 4], "exam": "LF1"},
        })
        assert len(report.errors) == 1
        assert selection.exam_assignments() == {Exam.LF1: "de"}

    def test_ineligible_exam(self, selection):
        report = apply_choices(selection, {"spo": {"exam": "LF2"}})
        assert not report.ok
        assert selection.find_by_id("spo").exam is None

    def test_unknown_exam(self, selection):
        report = apply_choices(selection, {"de": {"exam": "LF9"}})
        assert not report.ok

    def test_exam_without_semesters_warns(self, selection):
        report = apply_choices(selection, {"bio": {"exam": "PRF3"}})
        assert report.ok
        assert len(report.warnings) == 1
