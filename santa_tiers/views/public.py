from __future__ import annotations

from flask import Blueprint, render_template
from flask.views import MethodView

from ..services.generator import PRICE_TIERS
from ..services.rounds import list_participants


public_bp = Blueprint("public", __name__)


class LandingView(MethodView):
    def get(self):
        return render_template(
            "index.html",
            participants=list_participants(),
            price_tiers=PRICE_TIERS,
        )


public_bp.add_url_rule("/", view_func=LandingView.as_view("landing"))
