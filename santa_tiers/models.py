from .extensions import db


class Assignment(db.Model):
    """
    One gift instruction of the active round: participant buys for recipient at price_tier.
    Rows are only ever written as a full round and removed as a full round.
    """
    __tablename__ = "assignments"

    id = db.Column(db.Integer, primary_key=True)
    participant = db.Column(db.String(64), nullable=False, index=True)
    recipient = db.Column(db.String(64), nullable=False)
    price_tier = db.Column(db.String(16), nullable=False)

    __table_args__ = (
        db.UniqueConstraint("participant", "recipient", name="uq_assignment_participant_recipient"),
        db.CheckConstraint("participant <> recipient", name="no_self_gift"),
    )

    def to_dict(self) -> dict:
        return {
            "participant": self.participant,
            "recipient": self.recipient,
            "price_tier": self.price_tier,
        }
