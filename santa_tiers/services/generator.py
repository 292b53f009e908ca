from __future__ import annotations

import random
from collections import Counter
from dataclasses import dataclass
from typing import Hashable, Mapping, Sequence

from ..errors import PatternError


PARTICIPANTS: tuple[str, ...] = ("David", "Rocio", "Dana", "Gianna")
PRICE_TIERS: tuple[str, ...] = ("$50+", "$25", "$15")

GIFTS_PER_PARTICIPANT = len(PRICE_TIERS)
ROUND_SIZE = len(PARTICIPANTS) * GIFTS_PER_PARTICIPANT


# Hand-authored template: everyone gives to the other three people, once at each
# tier, and everyone receives one gift of each tier. Rounds are relabelings of it.
BASE_PATTERN: dict[str, tuple[tuple[str, str], ...]] = {
    "David": (("Rocio", "$50+"), ("Dana", "$25"), ("Gianna", "$15")),
    "Rocio": (("Dana", "$50+"), ("Gianna", "$25"), ("David", "$15")),
    "Dana": (("Gianna", "$50+"), ("David", "$25"), ("Rocio", "$15")),
    "Gianna": (("David", "$50+"), ("Rocio", "$25"), ("Dana", "$15")),
}


@dataclass(frozen=True)
class AssignmentRow:
    participant: str
    recipient: str
    price_tier: str

    def to_dict(self) -> dict:
        return {
            "participant": self.participant,
            "recipient": self.recipient,
            "price_tier": self.price_tier,
        }


def validate_pattern(
    pattern: Mapping[str, Sequence[tuple[str, str]]],
    participants: Sequence[str] = PARTICIPANTS,
    tiers: Sequence[str] = PRICE_TIERS,
) -> None:
    """
    Raises PatternError unless:
      - every participant is a giver with exactly len(tiers) gifts
      - nobody gives to themselves and no giver repeats a recipient
      - each giver uses every tier exactly once
      - every participant is a recipient exactly len(tiers) times
    """
    people = set(participants)

    if set(pattern) != people:
        raise PatternError("Pattern givers must be exactly the participant set.")

    received: Counter[str] = Counter()
    for giver, gifts in pattern.items():
        if len(gifts) != len(tiers):
            raise PatternError(f"{giver} must give exactly {len(tiers)} gifts.")

        recipients = [r for r, _ in gifts]
        given_tiers = [t for _, t in gifts]

        if giver in recipients:
            raise PatternError(f"{giver} cannot give to themselves.")
        if not set(recipients) <= people:
            raise PatternError(f"{giver} gives to an unknown recipient.")
        if len(set(recipients)) != len(recipients):
            raise PatternError(f"{giver} has a repeated recipient.")
        if sorted(given_tiers) != sorted(tiers):
            raise PatternError(f"{giver} must give one gift at each price tier.")

        received.update(recipients)

    for person in participants:
        if received[person] != len(tiers):
            raise PatternError(f"{person} must receive exactly {len(tiers)} gifts.")


def random_permutation(items: Sequence[Hashable], rng: random.Random) -> dict:
    """Uniform relabeling of items (Fisher-Yates via Random.shuffle on a copy)."""
    shuffled = list(items)
    rng.shuffle(shuffled)
    return dict(zip(items, shuffled))


def relabel(
    sigma: Mapping[str, str],
    tau: Mapping[str, str],
    pattern: Mapping[str, Sequence[tuple[str, str]]] = BASE_PATTERN,
) -> list[AssignmentRow]:
    # Same sigma on both ends of every edge keeps the pattern's shape intact.
    rows: list[AssignmentRow] = []
    for giver, gifts in pattern.items():
        for recipient, tier in gifts:
            rows.append(AssignmentRow(sigma[giver], sigma[recipient], tau[tier]))
    return rows


def generate(rng: random.Random | None = None) -> list[AssignmentRow]:
    """Build a complete randomized round from BASE_PATTERN."""
    if rng is None:
        rng = random.Random()
    sigma = random_permutation(PARTICIPANTS, rng)
    tau = random_permutation(PRICE_TIERS, rng)
    return relabel(sigma, tau)
