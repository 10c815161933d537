from __future__ import annotations

from pathlib import Path

import pandas as pd

from grader import AnswerGrader

CARD_COLUMNS = ["id", "question", "answer", "source_row", "source_path", "category"]
RECALL_CLASSES = (0, 1, 2)


def load_cards(data_dir: str | Path) -> pd.DataFrame:
    """Read every data/<folder>/flashcards_*.csv deck into one frame."""
    data_dir = Path(data_dir)
    if not data_dir.is_dir():
        raise FileNotFoundError(f"deck directory not found: {data_dir}")

    frames = []
    for category_dir in sorted(path for path in data_dir.iterdir() if path.is_dir()):
        for path in sorted(category_dir.glob("flashcards_*.csv")):
            frame = pd.read_csv(path, header=None, names=["question", "answer"], dtype=str)
            frame = frame.reset_index().rename(columns={"index": "source_row"})
            frame["source_path"] = str(path)
            frame["category"] = category_dir.name
            frames.append(frame)

    if not frames:
        return pd.DataFrame(columns=CARD_COLUMNS)

    cards = pd.concat(frames, ignore_index=True)
    cards.index.name = "id"
    return cards.reset_index()[CARD_COLUMNS]


def read_answer_sheet(source) -> pd.DataFrame:
    """Read an uploaded answer sheet CSV; malformed or empty files raise ValueError."""
    try:
        return pd.read_csv(source, dtype=str)
    except (pd.errors.EmptyDataError, pd.errors.ParserError) as e:
        raise ValueError(f"unreadable answer sheet: {e}") from e


def grade_frame(
    frame: pd.DataFrame,
    grader: AnswerGrader | None = None,
    reference_col: str = "answer",
    candidate_col: str = "user_answer",
) -> pd.DataFrame:
    """Grade each row's candidate answer against its reference answer.

    ``score`` holds the local bucket and stays empty for rows graded by the
    remote scorer, whose result is only available as ``percent``.
    """
    for column in (reference_col, candidate_col):
        if column not in frame.columns:
            raise KeyError(f"missing column: {column}")

    grader = grader or AnswerGrader()
    references = frame[reference_col].fillna("").astype(str)
    candidates = frame[candidate_col].fillna("").astype(str)
    grades = [grader.grade(ref, cand) for ref, cand in zip(references, candidates)]

    graded = frame.copy()
    graded["score"] = [grade.bucket for grade in grades]
    graded["percent"] = [grade.percent for grade in grades]
    graded["score_class"] = [grade.score_class for grade in grades]
    graded["source"] = [grade.source for grade in grades]
    return graded


def summarize_grades(graded: pd.DataFrame) -> pd.DataFrame:
    """Count and share of rows per recall class."""
    counts = (
        graded["score_class"]
        .value_counts()
        .reindex(RECALL_CLASSES, fill_value=0)
        .astype(int)
    )
    total = int(counts.sum())
    summary = pd.DataFrame({"score_class": list(RECALL_CLASSES), "count": counts.tolist()})
    summary["percent"] = [round(count / total * 100) if total else 0 for count in summary["count"]]
    return summary
