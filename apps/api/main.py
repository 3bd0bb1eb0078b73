from __future__ import annotations

import logging
from typing import Any, Callable

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from shengji import operations
from shengji.errors import RulesError

log = logging.getLogger(__name__)


def _run(name: str, op: Callable[[Any], Any], payload: Any) -> Any:
    try:
        return op(payload)
    except RulesError as e:
        log.info("%s: bad request: %s", name, e)
        raise HTTPException(status_code=400, detail=str(e))


app = FastAPI(title="Shengji Rules API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://127.0.0.1:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/api/operations")
def list_operations() -> list[str]:
    return sorted(operations.OPERATIONS)


# ---------------------------------------------------------------------------
#  Plays and tricks
# ---------------------------------------------------------------------------


@app.post("/api/find_viable_plays")
def find_viable_plays(payload: dict[str, Any]) -> dict[str, Any]:
    return _run("find_viable_plays", operations.find_viable_plays, payload)


@app.post("/api/decompose_trick_format")
def decompose_trick_format(payload: dict[str, Any]) -> dict[str, Any]:
    return _run("decompose_trick_format", operations.decompose_trick_format, payload)


@app.post("/api/can_play_cards")
def can_play_cards(payload: dict[str, Any]) -> dict[str, Any]:
    return _run("can_play_cards", operations.can_play_cards, payload)


@app.post("/api/sort_and_group_cards")
def sort_and_group_cards(payload: dict[str, Any]) -> dict[str, Any]:
    return _run("sort_and_group_cards", operations.sort_and_group_cards, payload)


# ---------------------------------------------------------------------------
#  Bidding
# ---------------------------------------------------------------------------


@app.post("/api/find_valid_bids")
def find_valid_bids(payload: dict[str, Any]) -> dict[str, Any]:
    return _run("find_valid_bids", operations.find_valid_bids, payload)


# ---------------------------------------------------------------------------
#  Decks and scoring
# ---------------------------------------------------------------------------


@app.post("/api/compute_deck_len")
def compute_deck_len(payload: list[dict[str, Any]]) -> int:
    return _run("compute_deck_len", operations.compute_deck_len, payload)


@app.post("/api/next_threshold_reachable")
def next_threshold_reachable(payload: dict[str, Any]) -> bool:
    return _run("next_threshold_reachable", operations.next_threshold_reachable, payload)


@app.post("/api/explain_scoring")
def explain_scoring(payload: dict[str, Any]) -> dict[str, Any]:
    return _run("explain_scoring", operations.explain_scoring, payload)


@app.post("/api/compute_score")
def compute_score(payload: dict[str, Any]) -> dict[str, Any]:
    return _run("compute_score", operations.compute_score, payload)
