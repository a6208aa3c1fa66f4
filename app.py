"""
OI Coach season simulator: Flask JSON API.
One live season per process. Every mutating route runs under a lock and autosaves the
result to the SQLite save slot; a finished season is appended to the history table once.
"""
import logging
import threading

from flask import Flask, jsonify, request

import config
from db import (
    DEFAULT_SLOT,
    get_connection,
    init_db,
    save_game,
    load_game,
    list_saves,
    record_season_result,
    get_season_history,
)
from generation import new_game
from models import ActionResult, SnapshotError
from simulation import (
    estimate_training_pressure,
    train_students_with_task,
    extra_train_students_with_task,
    quote_trip,
    outing_training,
    overseas_training,
    advance_weeks,
    hold_competition,
    choose_event_option,
    entertainment,
    take_vacation,
    part_time_job,
    upgrade_facility,
    evict_student,
    resign,
    competition_schedule,
)
from simulation.season import season_summary
from simulation.training import find_weekly_task

logging.basicConfig(
    level=config.get_log_level(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = Flask(__name__)
app.secret_key = config.get_secret_key()

# Serialize turns so double-submitted requests cannot advance the same week twice
_turn_lock = threading.Lock()

# The live season and whether its ending has already been written to history
_game: dict = {"state": None, "slot": DEFAULT_SLOT, "recorded": False}


def _error(message: str, status: int = 400):
    return jsonify({"ok": False, "message": message}), status


def _body() -> dict:
    return request.get_json(silent=True) or {}


def _names(data: dict) -> list[str]:
    names = data.get("students") or []
    if not isinstance(names, list):
        raise ValueError("students must be a list of names")
    return [str(n) for n in names]


def _persist(state) -> None:
    """Autosave the live season; record it in history the first time it is seen ended."""
    conn = get_connection()
    try:
        init_db(conn)
        save_game(conn, state, _game["slot"])
        if state.is_ended() and not _game["recorded"]:
            record_season_result(conn, state, _game["slot"])
            _game["recorded"] = True
    finally:
        conn.close()


def _run_turn(action, *args):
    """Run an engine action on the live season under the turn lock, then autosave."""
    with _turn_lock:
        state = _game["state"]
        if state is None:
            return _error("No season in progress", 409)
        result = action(state, *args)
        if result.ok:
            _persist(state)
        body = result.to_dict()
        body["state"] = state.to_dict()
    return jsonify(body), (200 if result.ok else 400)


@app.route("/api/state")
def api_state():
    with _turn_lock:
        state = _game["state"]
        if state is None:
            return _error("No season in progress", 404)
        body = state.to_dict()
    body["schedule"] = competition_schedule()
    return jsonify(body)


@app.route("/api/new-game", methods=["POST"])
def api_new_game():
    data = _body()
    seed = data.get("seed", config.get_default_seed())
    try:
        state = new_game(
            difficulty=int(data.get("difficulty", 2)),
            province_id=int(data.get("province", 1)),
            student_count=int(data.get("student_count", 5)),
            seed=seed,
            recruited=data.get("recruited"),
        )
    except (TypeError, ValueError) as e:
        return _error(str(e))
    with _turn_lock:
        _game["state"] = state
        _game["slot"] = str(data.get("slot") or DEFAULT_SLOT)
        _game["recorded"] = False
        _persist(state)
        body = state.to_dict()
    logger.info("New season: province %s, difficulty %d, seed %s", state.province_name, state.difficulty, state.seed)
    return jsonify({"ok": True, "message": "Season started", "state": body})


@app.route("/api/train", methods=["POST"])
def api_train():
    data = _body()
    return _run_turn(train_students_with_task, str(data.get("task", "")), data.get("intensity", 2))


@app.route("/api/extra-train", methods=["POST"])
def api_extra_train():
    data = _body()
    return _run_turn(extra_train_students_with_task, str(data.get("task", "")), data.get("intensity", 2))


@app.route("/api/train/preview")
def api_train_preview():
    """Read-only pressure preview for a weekly task."""
    task_name = request.args.get("task", "")
    with _turn_lock:
        state = _game["state"]
        if state is None:
            return _error("No season in progress", 404)
        task = find_weekly_task(state, task_name)
        if task is None:
            return _error(f"Unknown task: {task_name}", 404)
        try:
            estimate = estimate_training_pressure(state, task, request.args.get("intensity", "2"))
        except ValueError as e:
            return _error(str(e))
    return jsonify(estimate.to_dict())


def _trip(action, overseas: bool):
    data = _body()
    try:
        difficulty = int(data.get("difficulty", 1))
        region = int(data.get("region", 1))
        names = _names(data)
    except (TypeError, ValueError) as e:
        return _error(str(e))
    inspire = data.get("inspire_talents") or []
    if not isinstance(inspire, list):
        return _error("inspire_talents must be a list of talent names")
    if request.args.get("quote") == "1":
        with _turn_lock:
            state = _game["state"]
            if state is None:
                return _error("No season in progress", 404)
            quote = quote_trip(state, difficulty, region, names, inspire, overseas=overseas)
        if isinstance(quote, ActionResult):
            return _error(quote.message)
        return jsonify({"ok": True, "quote": quote.to_dict()})
    return _run_turn(action, difficulty, region, names, inspire)


@app.route("/api/outing", methods=["POST"])
def api_outing():
    return _trip(outing_training, overseas=False)


@app.route("/api/overseas", methods=["POST"])
def api_overseas():
    return _trip(overseas_training, overseas=True)


@app.route("/api/advance", methods=["POST"])
def api_advance():
    try:
        weeks = int(_body().get("weeks", 1))
    except (TypeError, ValueError):
        return _error("weeks must be an integer")
    return _run_turn(advance_weeks, weeks)


@app.route("/api/competition", methods=["POST"])
def api_competition():
    return _run_turn(hold_competition)


@app.route("/api/events/<int:uid>/choose", methods=["POST"])
def api_choose(uid: int):
    option = _body().get("option")
    if not option:
        return _error("Missing option")
    return _run_turn(choose_event_option, uid, str(option))


@app.route("/api/entertainment", methods=["POST"])
def api_entertainment():
    return _run_turn(entertainment, str(_body().get("activity", "")))


@app.route("/api/vacation", methods=["POST"])
def api_vacation():
    try:
        days = int(_body().get("days", 7))
    except (TypeError, ValueError):
        return _error("days must be an integer")
    return _run_turn(take_vacation, days)


@app.route("/api/part-time", methods=["POST"])
def api_part_time():
    try:
        names = _names(_body())
    except ValueError as e:
        return _error(str(e))
    return _run_turn(part_time_job, names)


@app.route("/api/facilities/<name>/upgrade", methods=["POST"])
def api_upgrade(name: str):
    return _run_turn(upgrade_facility, name)


@app.route("/api/students/<name>/evict", methods=["POST"])
def api_evict(name: str):
    return _run_turn(evict_student, name)


@app.route("/api/resign", methods=["POST"])
def api_resign():
    return _run_turn(resign)


@app.route("/api/save", methods=["POST"])
def api_save():
    requested = _body().get("slot")
    with _turn_lock:
        state = _game["state"]
        if state is None:
            return _error("No season in progress", 409)
        slot = str(requested or _game["slot"])
        conn = get_connection()
        try:
            init_db(conn)
            save_game(conn, state, slot)
        finally:
            conn.close()
        _game["slot"] = slot
    return jsonify({"ok": True, "message": f"Saved to {slot}"})


@app.route("/api/load", methods=["POST"])
def api_load():
    slot = str(_body().get("slot") or DEFAULT_SLOT)
    conn = get_connection()
    try:
        init_db(conn)
        state = load_game(conn, slot)
    except SnapshotError as e:
        logger.warning("Save slot %s is corrupt: %s", slot, e)
        return _error(f"Save {slot} could not be restored: {e}")
    finally:
        conn.close()
    if state is None:
        return _error(f"No save in slot {slot}", 404)
    with _turn_lock:
        _game["state"] = state
        _game["slot"] = slot
        _game["recorded"] = state.is_ended()
        body = state.to_dict()
    return jsonify({"ok": True, "message": f"Loaded {slot}", "state": body})


@app.route("/api/saves")
def api_saves():
    conn = get_connection()
    try:
        init_db(conn)
        return jsonify({"saves": list_saves(conn), "history": get_season_history(conn)})
    finally:
        conn.close()


@app.route("/api/summary")
def api_summary():
    with _turn_lock:
        state = _game["state"]
        if state is None:
            return _error("No season in progress", 404)
        summary = season_summary(state)
    if summary is None:
        return _error("The season is still in progress", 409)
    return jsonify(summary)


if __name__ == "__main__":
    app.run(debug=True, port=5000)
