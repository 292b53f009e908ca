import random

import pytest

from santa_tiers import create_app
from santa_tiers.extensions import db


@pytest.fixture(name="app")
def app_fixture(tmp_path):
    """App bound to a throwaway SQLite file so threads share one database."""
    app = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": f"sqlite:///{tmp_path / 'santa.db'}",
        "SANTA_RESET_TOKEN": "letmein",
        "SANTA_RANDOM_SEED": 2024,
    })
    yield app

    with app.app_context():
        db.session.remove()
        db.engine.dispose()


@pytest.fixture(name="client")
def client_fixture(app):
    return app.test_client()


@pytest.fixture(name="store")
def store_fixture(app):
    with app.app_context():
        yield app.extensions["round_store"]


@pytest.fixture(name="rng")
def rng_fixture():
    return random.Random(7)
