"""
Tests for deck loading and batch grading
"""
import io

import pandas as pd
import pytest

from batch import CARD_COLUMNS, grade_frame, load_cards, read_answer_sheet, summarize_grades
from grader import AnswerGrader


@pytest.fixture
def deck_dir(tmp_path):
    (tmp_path / "1").mkdir()
    (tmp_path / "1" / "flashcards_a.csv").write_text(
        "Capital of France?,Paris\nLargest animal?,blue whale\n", encoding="utf-8"
    )
    (tmp_path / "biology").mkdir()
    (tmp_path / "biology" / "flashcards_a.csv").write_text(
        "Powerhouse of the cell?,mitochondria\n", encoding="utf-8"
    )
    (tmp_path / "biology" / "notes.csv").write_text("ignored,row\n", encoding="utf-8")
    return tmp_path


class TestLoadCards:
    def test_reads_all_folders(self, deck_dir):
        cards = load_cards(deck_dir)
        assert list(cards.columns) == CARD_COLUMNS
        assert cards["id"].tolist() == [0, 1, 2]
        assert cards["category"].tolist() == ["1", "1", "biology"]
        assert cards["answer"].tolist() == ["Paris", "blue whale", "mitochondria"]
        assert cards["source_row"].tolist() == [0, 1, 0]

    def test_empty_directory(self, tmp_path):
        cards = load_cards(tmp_path)
        assert cards.empty
        assert list(cards.columns) == CARD_COLUMNS

    def test_missing_directory(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_cards(tmp_path / "missing")


class TestGradeFrame:
    def test_adds_grade_columns(self):
        frame = pd.DataFrame(
            {
                "answer": ["Paris", "elephant", "Paris", "Tokyo"],
                "user_answer": ["paris", "elephnat", None, "Tokyo"],
            }
        )
        graded = grade_frame(frame)
        assert graded["score"].tolist() == [1.0, 0.8, 0.0, 1.0]
        assert graded["percent"].tolist() == [100, 80, 0, 100]
        assert graded["score_class"].tolist() == [2, 1, 0, 2]
        assert set(graded["source"]) == {"local"}
        assert "score" not in frame.columns

    def test_remote_rows_have_no_bucket(self):
        """Remote percentages are not buckets, so score stays empty"""

        class FixedRemote:
            def evaluate(self, reference, candidate):
                return '{"score": 70}'

        frame = pd.DataFrame({"answer": ["Paris"], "user_answer": ["Lyon"]})
        with AnswerGrader(remote=FixedRemote()) as grader:
            graded = grade_frame(frame, grader)
        assert pd.isna(graded["score"].iloc[0])
        assert graded["percent"].tolist() == [70]
        assert graded["source"].tolist() == ["remote"]

    def test_custom_columns(self):
        frame = pd.DataFrame({"ref": ["Paris, France"], "typed": ["Paris"]})
        graded = grade_frame(frame, reference_col="ref", candidate_col="typed")
        assert graded["score"].tolist() == [0.9]

    def test_missing_column(self):
        with pytest.raises(KeyError):
            grade_frame(pd.DataFrame({"answer": ["Paris"]}))

    def test_summary(self):
        graded = pd.DataFrame({"score_class": [2, 2, 1, 2]})
        summary = summarize_grades(graded)
        assert summary["score_class"].tolist() == [0, 1, 2]
        assert summary["count"].tolist() == [0, 1, 3]
        assert summary["percent"].tolist() == [0, 25, 75]


class TestReadAnswerSheet:
    def test_reads_text_columns(self):
        frame = read_answer_sheet(io.StringIO("answer,user_answer\n42,42\n"))
        assert frame["answer"].tolist() == ["42"]

    def test_empty_upload(self):
        with pytest.raises(ValueError):
            read_answer_sheet(io.StringIO(""))

    def test_malformed_upload(self):
        with pytest.raises(ValueError):
            read_answer_sheet(io.StringIO("answer,user_answer\nParis,Paris\nRome,Rome,extra,cells\n"))
