"""Heuristic weight profiles for Edgeline.

This module centralises the evaluator weights used by :class:`MoveEvaluator`
and exposes named profiles that can be referenced from runtime configs
(``AIConfig.heuristic_profile_id``) and from the self-play tooling.

The keys in each profile mirror the attribute names on
:class:`~edgeline.ai.evaluators.MoveEvaluator` (``WEIGHT_CAPTURE``,
``WEIGHT_URGENT_DEFENSE``, etc.) so that instances can simply
``setattr(self, name, value)`` when applying a profile.

Personas (aggressive / territorial / defensive) are small deltas over the
balanced profile. Profiles stay JSON-serialisable so that tuned copies can be
loaded from disk through ``EDGELINE_HEURISTIC_PROFILES``.
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping

logger = logging.getLogger(__name__)

HeuristicWeights = dict[str, float]


# --- Balanced base profile --------------------------------------------------
#
# Ordered so that each evaluator dominates the ones below it: a move that
# blocks a capture always outranks a move that only improves shape.

BASE_BALANCED_WEIGHTS: HeuristicWeights = {
    "WEIGHT_POSITION": 1.0,
    "WEIGHT_LIBERTIES": 2.0,
    "WEIGHT_CONNECTION": 3.0,
    "WEIGHT_TERRITORY": 5.0,
    "WEIGHT_CAPTURE": 10.0,
    "WEIGHT_ENCIRCLEMENT_PROGRESS": 15.0,
    "WEIGHT_ENCIRCLEMENT_BLOCK": 30.0,
    "WEIGHT_URGENT_DEFENSE": 50.0,
    "WEIGHT_CAPTURE_BLOCKING": 100.0,
}

HEURISTIC_WEIGHT_KEYS: list[str] = list(BASE_BALANCED_WEIGHTS)


def _with_deltas(
    base: Mapping[str, float],
    *,
    scale: Mapping[str, float] | None = None,
    offset: Mapping[str, float] | None = None,
) -> HeuristicWeights:
    """Create a new profile from *base* by applying per-key scale/offset.

    All keys in ``base`` are preserved so that profiles remain structurally
    compatible.
    """

    scale = scale or {}
    offset = offset or {}
    out: HeuristicWeights = {}
    for key, value in base.items():
        s = scale.get(key, 1.0)
        o = offset.get(key, 0.0)
        out[key] = value * s + o
    return out


HEURISTIC_BALANCED: HeuristicWeights = dict(BASE_BALANCED_WEIGHTS)

# Hunts enemy groups harder, accepts thinner shape.
HEURISTIC_AGGRESSIVE: HeuristicWeights = _with_deltas(
    BASE_BALANCED_WEIGHTS,
    scale={
        "WEIGHT_CAPTURE": 1.5,
        "WEIGHT_ENCIRCLEMENT_PROGRESS": 1.6,
        "WEIGHT_LIBERTIES": 0.75,
    },
)

# Prefers dense friendly areas and central influence.
HEURISTIC_TERRITORIAL: HeuristicWeights = _with_deltas(
    BASE_BALANCED_WEIGHTS,
    scale={
        "WEIGHT_TERRITORY": 1.8,
        "WEIGHT_POSITION": 2.0,
        "WEIGHT_ENCIRCLEMENT_PROGRESS": 0.8,
    },
)

# Keeps its own groups connected to the edge before anything else.
HEURISTIC_DEFENSIVE: HeuristicWeights = _with_deltas(
    BASE_BALANCED_WEIGHTS,
    scale={
        "WEIGHT_CONNECTION": 1.5,
        "WEIGHT_LIBERTIES": 1.5,
        "WEIGHT_ENCIRCLEMENT_BLOCK": 1.4,
        "WEIGHT_ENCIRCLEMENT_PROGRESS": 0.7,
    },
)

HEURISTIC_WEIGHT_PROFILES: dict[str, HeuristicWeights] = {
    "balanced": HEURISTIC_BALANCED,
    "aggressive": HEURISTIC_AGGRESSIVE,
    "territorial": HEURISTIC_TERRITORIAL,
    "defensive": HEURISTIC_DEFENSIVE,
}


def get_weights(profile_id: str) -> HeuristicWeights:
    """Return the weight profile for ``profile_id``.

    A missing id means "no override"; callers keep the defaults baked into
    :class:`MoveEvaluator`.
    """

    return HEURISTIC_WEIGHT_PROFILES.get(profile_id, {})


PROFILES_ENV = "EDGELINE_HEURISTIC_PROFILES"


def load_profiles_if_available(path: str | None = None) -> dict[str, HeuristicWeights]:
    """Merge profiles from a JSON file into the registry.

    The file holds ``{"profiles": {"<id>": {"WEIGHT_...": value}}}``. Keys
    that are not known weights are ignored. When ``path`` is omitted the
    ``EDGELINE_HEURISTIC_PROFILES`` environment variable is consulted.

    Returns:
        Mapping of the profile ids that were registered.
    """

    if path is None:
        path = os.getenv(PROFILES_ENV)

    if not path or not os.path.exists(path):
        return {}

    with open(path, encoding="utf-8") as f:
        payload = json.load(f)

    loaded: dict[str, HeuristicWeights] = {}
    for pid, weights in payload.get("profiles", {}).items():
        profile = dict(BASE_BALANCED_WEIGHTS)
        profile.update(
            {k: float(v) for k, v in weights.items() if k in BASE_BALANCED_WEIGHTS}
        )
        HEURISTIC_WEIGHT_PROFILES[pid] = profile
        loaded[pid] = profile

    if loaded:
        logger.info("Loaded %d heuristic profile(s) from %s", len(loaded), path)
    return loaded
