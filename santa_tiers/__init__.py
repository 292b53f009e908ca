from __future__ import annotations

import logging
import os
import random

from flask import Flask

from .commands import register_commands
from .extensions import db, migrate
from .services.generator import BASE_PATTERN, PARTICIPANTS, PRICE_TIERS, validate_pattern
from .services.rounds import RoundStore
from .views.api import api_bp
from .views.public import public_bp


def _log_level(name) -> int:
    level = logging.getLevelName(str(name).upper())
    if not isinstance(level, int):
        raise ValueError(f"LOG_LEVEL must be a logging level name such as INFO, got {name!r}.")
    return level


def _seed(value) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"SANTA_RANDOM_SEED must be an integer, got {value!r}.") from e


def create_app(config: dict | None = None) -> Flask:
    app = Flask(__name__)

    app.config["SQLALCHEMY_DATABASE_URI"] = os.environ.get("DATABASE_URL", "sqlite:///secretsanta.db")
    app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = False

    # Shared secret for POST /api/admin/reset; empty disables resets over HTTP
    app.config["SANTA_RESET_TOKEN"] = os.environ.get("SANTA_RESET_TOKEN", "SECRETSANTA2024").strip()
    app.config["SANTA_RANDOM_SEED"] = os.environ.get("SANTA_RANDOM_SEED") or None
    app.config["LOG_LEVEL"] = os.environ.get("LOG_LEVEL", "INFO").upper()

    if config:
        app.config.update(config)

    app.logger.setLevel(_log_level(app.config["LOG_LEVEL"]))

    # Fail at startup, never at request time, if the template is malformed
    validate_pattern(BASE_PATTERN, PARTICIPANTS, PRICE_TIERS)

    db.init_app(app)
    migrate.init_app(app, db)

    seed = app.config["SANTA_RANDOM_SEED"]
    app.extensions["round_store"] = RoundStore()
    app.extensions["round_rng"] = random.Random(_seed(seed)) if seed is not None else random.Random()

    # Blueprints
    app.register_blueprint(public_bp)
    app.register_blueprint(api_bp)

    register_commands(app)

    with app.app_context():
        db.create_all()

    app.logger.info("Secret Santa app ready with %d participants.", len(PARTICIPANTS))
    return app
