"""JSON wire format <-> rules model.

Requests arrive as plain JSON values (dicts, lists, strings, numbers);
every ``*_from_json`` helper validates its input and raises
:class:`~shengji.errors.RequestError` naming the offending value.  The
``*_to_json`` helpers return JSON-compatible values only.

Wire notation
-------------
card            ``"3S"``, ``"10H"``, ``"LJ"``, ``"BJ"``
trump           ``{"suit": "SPADES" | "S" | null, "number": 5 | "K" | null}``
unit            ``{"type": "repeated", "card", "count"}`` or
                ``{"type": "tractor", "count", "members": [card]}``
shape           ``{"adjacent_tuples": [2, 2]}`` (a bare list is accepted)
hands           ``{"<player id>": {"<card>": count}}`` (a card list is accepted)
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Mapping, Optional, Type, TypeVar

from shengji.bidding import Bid
from shengji.cards import Card, EffectiveSuit, Joker, SuitGroup, Trump, parse_number, parse_suit
from shengji.deck import Deck
from shengji.errors import RequestError
from shengji.hands import Hands, Player, PlayerID
from shengji.scoring import BonusLevelPolicy, GameScoreResult, GameScoringParameters
from shengji.trick import PlayedCards, Trick
from shengji.trick_format import TrickFormat
from shengji.units import Repeated, Tractor, TractorRequirements, TrickUnit, UnitLike

E = TypeVar("E", bound=Enum)


# ---------------------------------------------------------------------------
#  Primitive helpers
# ---------------------------------------------------------------------------


def _as_mapping(value: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise RequestError(f"Expected an object for {what}, got {value!r}")
    return value


def _as_list(value: Any, what: str) -> list[Any]:
    if not isinstance(value, (list, tuple)):
        raise RequestError(f"Expected a list for {what}, got {value!r}")
    return list(value)


def _as_int(value: Any, what: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise RequestError(f"Expected an integer for {what}, got {value!r}")
    return value


def _as_bool(value: Any, what: str) -> bool:
    if not isinstance(value, bool):
        raise RequestError(f"Expected a boolean for {what}, got {value!r}")
    return value


def require(obj: Mapping[str, Any], key: str, what: str = "request") -> Any:
    """``obj[key]``, or a :class:`RequestError` naming the missing field."""
    obj = _as_mapping(obj, what)
    if key not in obj:
        raise RequestError(f"Missing field {key!r} in {what}")
    return obj[key]


def int_field(obj: Mapping[str, Any], key: str, default: Optional[int] = None) -> int:
    if key not in obj or obj[key] is None:
        if default is None:
            raise RequestError(f"Missing field {key!r}")
        return default
    return _as_int(obj[key], key)


def bool_field(obj: Mapping[str, Any], key: str, default: bool = False) -> bool:
    if key not in obj or obj[key] is None:
        return default
    return _as_bool(obj[key], key)


def enum_from_json(cls: Type[E], value: Any, default: Optional[E] = None) -> E:
    """Enum member by (case-insensitive) name; ``None`` gives *default*."""
    if value is None and default is not None:
        return default
    if isinstance(value, cls):
        return value
    if isinstance(value, str):
        try:
            return cls[value.strip().upper()]
        except KeyError:
            pass
    names = ", ".join(m.name for m in cls)
    raise RequestError(f"Invalid {cls.__name__}: {value!r} (expected one of {names})")


# ---------------------------------------------------------------------------
#  Cards and trump
# ---------------------------------------------------------------------------


def card_from_json(obj: Any) -> Card:
    try:
        if isinstance(obj, str):
            return Card.parse(obj)
        if isinstance(obj, Mapping):
            if obj.get("joker") is not None:
                return Card(joker=Joker(str(obj["joker"]).strip().upper()))
            return Card(parse_suit(obj["suit"]), parse_number(obj["number"]))
    except (KeyError, TypeError, ValueError) as e:
        raise RequestError(f"Invalid card: {obj!r} ({e})") from e
    raise RequestError(f"Invalid card: {obj!r}")


def card_to_json(card: Card) -> str:
    return card.short()


def cards_from_json(obj: Any, what: str = "cards") -> list[Card]:
    return [card_from_json(c) for c in _as_list(obj, what)]


def cards_to_json(cards: Any) -> list[str]:
    return [c.short() for c in cards]


def trump_from_json(obj: Any) -> Trump:
    if obj is None:
        return Trump()
    obj = _as_mapping(obj, "trump")
    try:
        suit = obj.get("suit")
        number = obj.get("number")
        return Trump(
            suit=parse_suit(suit) if suit is not None else None,
            number=parse_number(number) if number is not None else None,
        )
    except (TypeError, ValueError) as e:
        raise RequestError(f"Invalid trump: {obj!r} ({e})") from e


def requirements_from_json(obj: Any) -> TractorRequirements:
    if obj is None:
        return TractorRequirements()
    obj = _as_mapping(obj, "tractor_requirements")
    defaults = TractorRequirements()
    try:
        return TractorRequirements(
            min_count=int_field(obj, "min_count", defaults.min_count),
            min_length=int_field(obj, "min_length", defaults.min_length),
        )
    except RequestError:
        raise
    except ValueError as e:
        raise RequestError(str(e)) from e


def suit_group_to_json(group: SuitGroup) -> dict[str, Any]:
    return {"suit": group.suit.value, "cards": cards_to_json(group.cards)}


# ---------------------------------------------------------------------------
#  Units and formats
# ---------------------------------------------------------------------------


def unit_to_json(unit: TrickUnit) -> dict[str, Any]:
    if isinstance(unit, Repeated):
        return {"type": "repeated", "card": unit.card.short(), "count": unit.count}
    if isinstance(unit, Tractor):
        return {"type": "tractor", "count": unit.count, "members": cards_to_json(unit.members)}
    raise TypeError(f"Not a trick unit: {unit!r}")


def unit_from_json(obj: Any) -> TrickUnit:
    obj = _as_mapping(obj, "unit")
    kind = str(require(obj, "type", "unit")).lower()
    count = int_field(obj, "count")
    try:
        if kind == "repeated":
            return Repeated(card_from_json(require(obj, "card", "unit")), count)
        if kind == "tractor":
            return Tractor(count, tuple(cards_from_json(require(obj, "members", "unit"), "members")))
    except RequestError:
        raise
    except ValueError as e:
        raise RequestError(f"Invalid unit: {obj!r} ({e})") from e
    raise RequestError(f"Invalid unit type: {kind!r}")


def shape_from_json(obj: Any) -> UnitLike:
    raw = obj.get("adjacent_tuples") if isinstance(obj, Mapping) else obj
    tuples = tuple(_as_int(n, "adjacent_tuples") for n in _as_list(raw, "shape"))
    try:
        return UnitLike(tuples)
    except ValueError as e:
        raise RequestError(str(e)) from e


def shape_to_json(shape: UnitLike) -> dict[str, Any]:
    return {"adjacent_tuples": list(shape.adjacent_tuples)}


def trick_format_from_json(obj: Any) -> TrickFormat:
    obj = _as_mapping(obj, "trick_format")
    return TrickFormat(
        suit=enum_from_json(EffectiveSuit, require(obj, "suit", "trick_format")),
        trump=trump_from_json(obj.get("trump")),
        units=tuple(shape_from_json(u) for u in _as_list(require(obj, "units", "trick_format"), "units")),
    )


# ---------------------------------------------------------------------------
#  Players, hands, tricks
# ---------------------------------------------------------------------------


def _int_key(value: Any, what: str) -> int:
    """JSON object keys are strings; accept ``"3"`` as well as ``3``."""
    if isinstance(value, str) and value.strip().isdigit():
        return int(value)
    return _as_int(value, what)


def player_id_from_json(value: Any) -> PlayerID:
    return _int_key(value, "player id")


def hands_from_json(obj: Any) -> Hands:
    obj = _as_mapping(obj, "hands")
    parsed: dict[PlayerID, Any] = {}
    for key, cards in obj.items():
        pid = player_id_from_json(key)
        if isinstance(cards, Mapping):
            held: dict[Card, int] = {}
            for label, count in cards.items():
                count = _as_int(count, f"count of {label!r}")
                if count < 0:
                    raise RequestError(f"Negative count for {label!r}")
                card = card_from_json(label)
                held[card] = held.get(card, 0) + count
            parsed[pid] = held
        else:
            parsed[pid] = cards_from_json(cards, f"hand of player {pid}")
    return Hands(parsed)


def player_from_json(obj: Any) -> Player:
    obj = _as_mapping(obj, "player")
    level = obj.get("level")
    try:
        return Player(
            id=player_id_from_json(require(obj, "id", "player")),
            name=str(obj.get("name") or ""),
            level=parse_number(level) if level is not None else None,
        )
    except RequestError:
        raise
    except (TypeError, ValueError) as e:
        raise RequestError(f"Invalid player: {obj!r} ({e})") from e


def players_from_json(obj: Any) -> list[Player]:
    return [player_from_json(p) for p in _as_list(obj, "players")]


def trick_from_json(obj: Any) -> Trick:
    obj = _as_mapping(obj, "trick")
    played = []
    for entry in _as_list(obj.get("played_cards") or [], "played_cards"):
        entry = _as_mapping(entry, "played_cards entry")
        played.append(PlayedCards(
            id=player_id_from_json(require(entry, "id", "played_cards entry")),
            cards=tuple(cards_from_json(require(entry, "cards", "played_cards entry"))),
        ))
    fmt = obj.get("trick_format")
    return Trick(
        trump=trump_from_json(obj.get("trump")),
        player_queue=tuple(
            player_id_from_json(p) for p in _as_list(require(obj, "player_queue", "trick"), "player_queue")
        ),
        played_cards=tuple(played),
        trick_format=trick_format_from_json(fmt) if fmt is not None else None,
        tractor_requirements=requirements_from_json(obj.get("tractor_requirements")),
    )


# ---------------------------------------------------------------------------
#  Bids
# ---------------------------------------------------------------------------


def bid_from_json(obj: Any) -> Bid:
    obj = _as_mapping(obj, "bid")
    return Bid(
        id=player_id_from_json(require(obj, "id", "bid")),
        card=card_from_json(require(obj, "card", "bid")),
        count=int_field(obj, "count"),
        epoch=int_field(obj, "epoch", 0),
    )


def bids_from_json(obj: Any) -> list[Bid]:
    return [bid_from_json(b) for b in _as_list(obj, "bid_history")]


def bid_to_json(bid: Bid) -> dict[str, Any]:
    return {"id": bid.id, "card": bid.card.short(), "count": bid.count, "epoch": bid.epoch}


# ---------------------------------------------------------------------------
#  Decks and scoring
# ---------------------------------------------------------------------------


def deck_from_json(obj: Any) -> Deck:
    obj = _as_mapping(obj if obj is not None else {}, "deck")
    minimum = obj.get("min")
    try:
        return Deck(
            exclude_small_joker=bool_field(obj, "exclude_small_joker"),
            exclude_big_joker=bool_field(obj, "exclude_big_joker"),
            min=parse_number(minimum) if minimum is not None else Deck().min,
        )
    except RequestError:
        raise
    except ValueError as e:
        raise RequestError(f"Invalid deck: {obj!r} ({e})") from e


def decks_from_json(obj: Any) -> list[Deck]:
    return [deck_from_json(d) for d in _as_list(obj, "decks")]


_PARAM_FIELDS = frozenset({
    "step_size_per_deck",
    "num_steps_to_non_landlord_turnover",
    "deadzone_size",
    "step_adjustments",
    "bonus_level_policy",
})


def params_from_json(obj: Any) -> GameScoringParameters:
    if obj is None:
        return GameScoringParameters()
    obj = _as_mapping(obj, "params")
    unknown = set(obj) - _PARAM_FIELDS
    if unknown:
        raise RequestError(f"Unknown scoring parameters: {sorted(unknown)}")
    defaults = GameScoringParameters()
    adjustments = {
        _int_key(k, "step_adjustments key"): _as_int(v, f"step_adjustments[{k!r}]")
        for k, v in _as_mapping(obj.get("step_adjustments") or {}, "step_adjustments").items()
    }
    try:
        return GameScoringParameters(
            step_size_per_deck=int_field(obj, "step_size_per_deck", defaults.step_size_per_deck),
            num_steps_to_non_landlord_turnover=int_field(
                obj, "num_steps_to_non_landlord_turnover",
                defaults.num_steps_to_non_landlord_turnover,
            ),
            deadzone_size=int_field(obj, "deadzone_size", defaults.deadzone_size),
            step_adjustments=adjustments,
            bonus_level_policy=enum_from_json(
                BonusLevelPolicy, obj.get("bonus_level_policy"), defaults.bonus_level_policy,
            ),
        )
    except RequestError:
        raise
    except ValueError as e:
        raise RequestError(f"Invalid scoring parameters: {e}") from e


def score_result_to_json(result: GameScoreResult) -> dict[str, Any]:
    return {
        "landlord_won": result.landlord_won,
        "landlord_delta": result.landlord_delta,
        "non_landlord_delta": result.non_landlord_delta,
        "landlord_bonus": result.landlord_bonus,
    }
