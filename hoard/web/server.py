"""Hoard Web — Flask JSON API over a single game session.

The game loop is driven lazily: each API request catches up on elapsed
time before acting and returning the current state.
"""

from __future__ import annotations

import logging
import threading
import time

from flask import Flask, jsonify, request

from hoard.engine.costs import max_affordable, unit_cost, upgrade_cost
from hoard.engine.economy import MAX, format_number
from hoard.engine.errors import (
    EconomyError,
    InsufficientFunds,
    InvalidItemKind,
    PrestigeNotEligible,
)
from hoard.engine.prestige import (
    can_prestige,
    compute_prestige_award,
    prestige_progress,
    upcoming_artifacts,
)
from hoard.engine.session import GameSession

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------

def _state_json(session: GameSession) -> dict:
    """Build the JSON blob sent to clients."""
    balance = session.balance
    s = session.snapshot()
    exp = s.display_uses_exponential_notation

    def fmt(n: float) -> str:
        return format_number(n, exp, balance)

    units = []
    for kind, udef in balance.units.items():
        cost = unit_cost(s, kind, balance=balance)
        best = max_affordable(s, kind, s.owned(kind), s.currency, balance)
        units.append({
            "kind": kind.value,
            "name": udef.name,
            "description": udef.description,
            "owned": s.owned(kind),
            "yield_rate": s.unit_yield_rate.get(kind, udef.base_yield),
            "yield_target": udef.yield_target.value,
            "cost": fmt(cost),
            "cost_raw": cost,
            "can_afford": s.currency >= cost,
            "max_affordable": best.count,
        })

    upgrades = []
    for uid, udef in balance.upgrades.items():
        cost = upgrade_cost(s, uid, balance=balance)
        upgrades.append({
            "id": uid,
            "name": udef.name,
            "description": udef.description,
            "target": udef.target.value,
            "level": s.level(uid),
            "cost": fmt(cost),
            "cost_raw": cost,
            "can_afford": s.currency >= cost,
        })

    def artifact_json(adef) -> dict:
        return {
            "id": adef.id,
            "name": adef.name,
            "icon": adef.icon,
            "rarity": adef.rarity.name.lower(),
            "effect": adef.effect_text,
            "unlock_at_prestige": adef.unlock_at_prestige,
        }

    unlocked = [balance.artifacts[aid] for aid in sorted(s.unlocked_artifacts)]
    unlocked.sort(key=lambda a: a.unlock_at_prestige)

    return {
        "currency": fmt(s.currency),
        "currency_raw": s.currency,
        "lifetime_currency": fmt(s.lifetime_currency),
        "lifetime_currency_raw": s.lifetime_currency,
        "click_yield": fmt(s.click_yield * s.prestige_multiplier),
        "passive_income": f"{fmt(s.passive_yield_per_s * s.prestige_multiplier)}/s",
        "units": units,
        "upgrades": upgrades,
        "prestige": {
            "points": s.prestige_currency,
            "multiplier": s.prestige_multiplier,
            "count": s.total_prestige_count,
            "can_prestige": can_prestige(s, balance),
            "award": compute_prestige_award(s, balance),
            "progress": prestige_progress(s, balance),
        },
        "artifacts": [artifact_json(a) for a in unlocked],
        "upcoming_artifacts": [artifact_json(a) for a in upcoming_artifacts(s, balance)],
        "exponential_notation": exp,
        "last_saved": s.last_saved_timestamp,
        "server_time": time.time(),
    }


def _parse_quantity():
    body = request.get_json(silent=True) or {}
    quantity = body.get("quantity", 1)
    if isinstance(quantity, str) and quantity.lower() == MAX:
        return MAX
    return quantity


def _error(code: str, message: str, status: int):
    return jsonify({"error": code, "message": message}), status


# ---------------------------------------------------------------------------
# App factory
# ---------------------------------------------------------------------------

def create_app(session: GameSession | None = None) -> Flask:
    """Build the API around `session` (a loaded default session if omitted)."""
    if session is None:
        session = GameSession()
        session.load()

    app = Flask(__name__)
    app.config["GAME_SESSION"] = session

    tick_lock = threading.Lock()
    last_tick = time.time()

    def _do_ticks() -> None:
        """Catch up passive income since the last request."""
        nonlocal last_tick
        with tick_lock:
            now = time.time()
            dt = now - last_tick
            if dt <= 0:
                return
            # Cap catch-up to avoid mega-ticks after long AFK
            dt = min(dt, session.balance.general.max_catch_up_s)
            last_tick = now
        session.tick_passive_income(dt)
        session.maybe_autosave(now)

    # ── Error mapping ───────────────────────────────

    @app.errorhandler(InsufficientFunds)
    def on_insufficient(exc: InsufficientFunds):
        return _error("insufficient_funds", str(exc), 400)

    @app.errorhandler(PrestigeNotEligible)
    def on_not_eligible(exc: PrestigeNotEligible):
        return _error("prestige_not_eligible", str(exc), 400)

    @app.errorhandler(InvalidItemKind)
    def on_invalid_item(exc: InvalidItemKind):
        return _error("invalid_item", str(exc), 404)

    @app.errorhandler(EconomyError)
    def on_economy_error(exc: EconomyError):
        logger.warning("unhandled economy error: %s", exc)
        return _error("economy_error", str(exc), 400)

    # ── Routes ──────────────────────────────────────

    @app.route("/api/state")
    def api_state():
        _do_ticks()
        return jsonify(_state_json(session))

    @app.route("/api/action/click", methods=["POST"])
    def action_click():
        _do_ticks()
        earned = session.click()
        data = _state_json(session)
        data["earned"] = earned
        return jsonify(data)

    @app.route("/api/action/units/<kind>", methods=["POST"])
    def action_units(kind: str):
        _do_ticks()
        try:
            result = session.purchase_units(kind, _parse_quantity())
        except ValueError as exc:
            return _error("bad_quantity", str(exc), 400)
        data = _state_json(session)
        data["purchased"] = {"item": result.item, "count": result.count, "total_cost": result.total_cost}
        return jsonify(data)

    @app.route("/api/action/upgrades/<upgrade_id>", methods=["POST"])
    def action_upgrades(upgrade_id: str):
        _do_ticks()
        try:
            result = session.purchase_upgrade(upgrade_id, _parse_quantity())
        except ValueError as exc:
            return _error("bad_quantity", str(exc), 400)
        data = _state_json(session)
        data["purchased"] = {"item": result.item, "count": result.count, "total_cost": result.total_cost}
        return jsonify(data)

    @app.route("/api/action/prestige", methods=["POST"])
    def action_prestige():
        _do_ticks()
        result = session.execute_prestige()
        data = _state_json(session)
        data["prestige_result"] = {
            "award": result.award,
            "prestige_count": result.prestige_count,
            "multiplier": result.prestige_multiplier,
            "new_artifacts": [a.id for a in result.new_artifacts],
        }
        return jsonify(data)

    @app.route("/api/settings/notation", methods=["POST"])
    def settings_notation():
        body = request.get_json(silent=True) or {}
        exponential = body.get("exponential")
        if not isinstance(exponential, bool):
            return _error("bad_request", "'exponential' must be a boolean", 400)
        session.set_display_notation(exponential)
        return jsonify(_state_json(session))

    @app.route("/api/action/save", methods=["POST"])
    def action_save():
        _do_ticks()
        return jsonify({"saved": session.save()})

    return app


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def run_server(host: str = "127.0.0.1", port: int = 5000, debug: bool = False) -> None:
    """Start the Flask development server, saving once on shutdown."""
    app = create_app()
    try:
        app.run(host=host, port=port, debug=debug, use_reloader=False)
    finally:
        app.config["GAME_SESSION"].save()
