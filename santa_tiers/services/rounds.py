from __future__ import annotations

import random
import threading
from collections import Counter
from contextlib import contextmanager
from typing import Iterator, Sequence

from flask import current_app
from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError

from ..errors import InconsistentRoundState, InvalidParticipant, PersistenceFailure
from ..extensions import db
from ..models import Assignment
from ..policies import require_reset_token
from .generator import GIFTS_PER_PARTICIPANT, PARTICIPANTS, ROUND_SIZE, AssignmentRow, generate


class RoundStore:
    """
    Owns the lifecycle of the single active round.

    EMPTY --insert_all(full round)--> POPULATED --delete_all()--> EMPTY

    Writers (generate-and-insert, delete) must hold `writer()`; reads take no lock.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()

    @property
    def session(self):
        return db.session

    @contextmanager
    def writer(self) -> Iterator["RoundStore"]:
        with self._lock:
            # Drop any read snapshot taken before the lock was held.
            self.session.rollback()
            yield self

    def count_rows(self) -> int:
        try:
            return self.session.scalar(select(func.count(Assignment.id))) or 0
        except SQLAlchemyError as e:
            self.session.rollback()
            current_app.logger.exception("DB error (count assignments)")
            raise PersistenceFailure() from e

    def rows_for(self, participant: str) -> list[tuple[str, str]]:
        try:
            result = self.session.execute(
                select(Assignment.recipient, Assignment.price_tier)
                .where(Assignment.participant == participant)
                .order_by(Assignment.id.asc())
            )
            return [(recipient, tier) for recipient, tier in result]
        except SQLAlchemyError as e:
            self.session.rollback()
            current_app.logger.exception("DB error (lookup participant %s)", participant)
            raise PersistenceFailure() from e

    def all_rows(self) -> list[AssignmentRow]:
        try:
            result = self.session.execute(
                select(Assignment.participant, Assignment.recipient, Assignment.price_tier)
                .order_by(Assignment.participant.asc(), Assignment.recipient.asc())
            )
            return [AssignmentRow(*row) for row in result]
        except SQLAlchemyError as e:
            self.session.rollback()
            current_app.logger.exception("DB error (all assignments)")
            raise PersistenceFailure() from e

    def insert_all(self, rows: Sequence[AssignmentRow]) -> None:
        """Persist a whole round in one transaction. Only legal while EMPTY."""
        rows = list(rows)
        per_giver = Counter(r.participant for r in rows)
        if len(rows) != ROUND_SIZE or per_giver != {p: GIFTS_PER_PARTICIPANT for p in PARTICIPANTS}:
            raise InconsistentRoundState("Refusing to store a partial round.")

        if self.count_rows():
            raise InconsistentRoundState("A round already exists; reset it before generating another.")

        try:
            self.session.add_all(
                Assignment(participant=r.participant, recipient=r.recipient, price_tier=r.price_tier)
                for r in rows
            )
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            current_app.logger.exception("DB insert error")
            raise PersistenceFailure("Failed to save assignments.") from e

    def delete_all(self) -> int:
        try:
            deleted = self.session.execute(delete(Assignment)).rowcount
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            current_app.logger.exception("Reset error")
            raise PersistenceFailure("Failed to reset assignments.") from e
        return deleted or 0


def list_participants() -> list[str]:
    return list(PARTICIPANTS)


def _payload(participant: str, rows: Sequence[tuple[str, str]]) -> dict:
    return {
        "participant": participant,
        "assignments": [{"recipient": r, "price_tier": t} for r, t in rows],
    }


def request_assignments(store: RoundStore, participant: str | None, rng: random.Random | None = None) -> dict:
    """
    Return the participant's slice of the active round, generating the round
    first if none exists yet.
    """
    if not participant or participant not in PARTICIPANTS:
        raise InvalidParticipant()

    rows = store.rows_for(participant)
    if len(rows) == GIFTS_PER_PARTICIPANT:
        return _payload(participant, rows)

    with store.writer():
        # Another request may have generated the round while we waited.
        rows = store.rows_for(participant)
        if not rows and store.count_rows() == 0:
            round_rows = generate(rng)
            store.insert_all(round_rows)
            current_app.logger.info("Generated a new round of %d assignments.", len(round_rows))
            rows = [(r.recipient, r.price_tier) for r in round_rows if r.participant == participant]

    if len(rows) != GIFTS_PER_PARTICIPANT:
        current_app.logger.warning(
            "Round exists but %s has %d assignments; admin reset needed.", participant, len(rows)
        )
        raise InconsistentRoundState()

    return _payload(participant, rows)


def reset_round(store: RoundStore, credential: str | None, secret: str | None) -> int:
    require_reset_token(credential, secret)

    with store.writer():
        deleted = store.delete_all()

    current_app.logger.info("All assignments deleted by admin reset (%d rows).", deleted)
    return deleted


def list_all_assignments(store: RoundStore) -> list[dict]:
    return [row.to_dict() for row in store.all_rows()]
