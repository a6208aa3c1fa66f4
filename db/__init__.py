"""
Persistence for the coaching simulator: SQLite save slots and finished-season history.
"""
from .schema import get_connection, get_db_path, init_db
from .operations import (
    DEFAULT_SLOT,
    save_game,
    load_game,
    list_saves,
    delete_save,
    record_season_result,
    get_season_history,
)

__all__ = [
    "get_connection",
    "get_db_path",
    "init_db",
    "DEFAULT_SLOT",
    "save_game",
    "load_game",
    "list_saves",
    "delete_save",
    "record_season_result",
    "get_season_history",
]
