from __future__ import annotations

import pandas as pd
import streamlit as st

from batch import grade_frame, load_cards, read_answer_sheet, summarize_grades
from config import AppConfig, load_config
from grader import AnswerGrader
from logs import configure_logging, get_logger
from selector import select_random_card, select_weighted_card, validate_weights

CLASS_LABELS = {0: "未正解(0)", 1: "部分(1)", 2: "正解(2)"}


@st.cache_resource
def get_config() -> AppConfig:
    config = load_config()
    configure_logging(config.logging.level, config.logging.json_output)
    return config


@st.cache_resource
def get_grader() -> AnswerGrader:
    return AnswerGrader(config=get_config().grader)


def category_sort_key(name: str) -> tuple[int, int | str]:
    if name.isdigit():
        return (0, int(name))
    if name.isalpha():
        return (1, name)
    return (2, name)


def format_category_label(name: str) -> str:
    if name.isdigit():
        return f"第{name}章"
    return name


def current_card(cards: pd.DataFrame, weights: dict[int, int], weights_valid: bool) -> pd.Series | None:
    current_id = st.session_state.get("current_id")
    if current_id is not None:
        matches = cards[cards["id"] == current_id]
        if not matches.empty:
            return matches.iloc[0]
    if weights_valid:
        return select_weighted_card(cards, st.session_state["classes"], weights)
    return select_random_card(cards)


def render_drill(cards: pd.DataFrame, grader: AnswerGrader, default_weights: dict[int, int]) -> None:
    categories = sorted(cards["category"].dropna().unique().tolist(), key=category_sort_key)
    selected = st.selectbox("フォルダ", categories, format_func=format_category_label)
    if st.session_state.get("last_category") != selected:
        st.session_state["current_id"] = None
        st.session_state["scored"] = False
        st.session_state["last_category"] = selected

    deck = cards[cards["category"] == selected]
    classes: dict[int, int] = st.session_state["classes"]

    st.subheader("ステータス集計")
    deck_classes = deck["id"].map(lambda card_id: classes.get(int(card_id), 0))
    for column, (score_class, label) in zip(st.columns(3), CLASS_LABELS.items()):
        count = int((deck_classes == score_class).sum())
        pct = round(count / len(deck) * 100) if len(deck) else 0
        column.metric(label, f"{count}問", f"{pct}%")

    st.subheader("出題割合")
    weights = {
        score_class: column.number_input(
            f"{label}%", min_value=0, max_value=100, value=default_weights[score_class], step=5
        )
        for column, (score_class, label) in zip(st.columns(3), CLASS_LABELS.items())
    }
    weights_valid = validate_weights(weights)
    if not weights_valid:
        st.warning("出題割合の合計が100%になるよう設定してください。")

    card = current_card(deck, weights, weights_valid)
    if card is None:
        st.warning("問題を選択できませんでした。")
        return
    st.session_state["current_id"] = int(card["id"])

    st.subheader("問題")
    st.write(card["question"])
    user_answer = st.text_area("あなたの回答", key=f"answer_{int(card['id'])}")

    col_score, col_next = st.columns(2)
    if col_score.button("採点"):
        grade = grader.grade(str(card["answer"]), user_answer)
        classes[int(card["id"])] = grade.score_class
        st.session_state["last_grade"] = grade
        st.session_state["scored"] = True

    if col_next.button("次の問題"):
        next_card = select_weighted_card(deck, classes, weights) if weights_valid else None
        if next_card is None:
            st.warning("選択した出題割合で問題を選べませんでした。")
        else:
            st.session_state["current_id"] = int(next_card["id"])
            st.session_state["scored"] = False
            st.rerun()

    if st.session_state.get("scored"):
        grade = st.session_state["last_grade"]
        st.markdown("---")
        st.write(f"一致率: {grade.percent}% ({CLASS_LABELS[grade.score_class]})")
        st.text_area("模範解答", value=str(card["answer"]), disabled=True)


def render_batch(grader: AnswerGrader) -> None:
    st.write("answer, user_answer 列を含むCSVを一括採点します。")
    uploaded = st.file_uploader("CSVファイル", type="csv")
    if uploaded is None:
        return
    try:
        frame = read_answer_sheet(uploaded)
    except ValueError as e:
        st.error(f"CSVを読み込めません: {e}")
        return
    try:
        graded = grade_frame(frame, grader)
    except KeyError as e:
        st.error(f"列が見つかりません: {e}")
        return
    st.dataframe(summarize_grades(graded), hide_index=True)
    st.dataframe(graded)
    st.download_button(
        "採点結果をダウンロード",
        graded.to_csv(index=False).encode("utf-8"),
        file_name="graded.csv",
        mime="text/csv",
    )


st.set_page_config(page_title="記述式フラッシュカード採点")
st.title("記述式フラッシュカード採点")

config = get_config()
grader = get_grader()
logger = get_logger("main")
st.session_state.setdefault("classes", {})

drill_tab, batch_tab = st.tabs(["練習", "一括採点"])

with drill_tab:
    try:
        cards = load_cards(config.practice.data_dir)
    except FileNotFoundError:
        logger.warning("deck_directory_missing", data_dir=str(config.practice.data_dir))
        cards = pd.DataFrame()
    if cards.empty:
        st.warning("問題データが見つかりません。data/*/flashcards_*.csv を確認してください。")
    else:
        render_drill(cards, grader, config.practice.weights)

with batch_tab:
    render_batch(grader)
