from __future__ import annotations

import random
from typing import Mapping

import pandas as pd

from batch import RECALL_CLASSES


def validate_weights(weights: Mapping[int, int]) -> bool:
    """Weights are usable when none is negative and they add up to 100%."""
    return all(weight >= 0 for weight in weights.values()) and sum(weights.values()) == 100


def select_random_card(pool: pd.DataFrame, rng: random.Random | None = None) -> pd.Series | None:
    """Pick one card row from the pool, or None if it is empty."""
    if pool.empty:
        return None
    rng = rng or random.Random()
    return pool.iloc[rng.randrange(len(pool))]


def select_weighted_card(
    cards: pd.DataFrame,
    classes: Mapping[int, int],
    weights: Mapping[int, int],
    rng: random.Random | None = None,
) -> pd.Series | None:
    """Pick a card, drawing its recall class (0/1/2) in proportion to weights.

    ``classes`` maps card id to the last recall class; unseen cards count as 0.
    """
    rng = rng or random.Random()
    card_classes = cards["id"].map(lambda card_id: classes.get(int(card_id), 0))

    candidates = []
    for score_class in RECALL_CLASSES:
        pool = cards[card_classes == score_class]
        if not pool.empty and weights.get(score_class, 0) > 0:
            candidates.append((score_class, pool))
    if not candidates:
        return None

    chosen = rng.choices(
        [pool for _, pool in candidates],
        weights=[weights[score_class] for score_class, _ in candidates],
        k=1,
    )[0]
    return select_random_card(chosen, rng)
