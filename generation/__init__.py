"""
Procedural generation for the coaching simulator: new-season bootstrap, names,
and the default training task catalog.
"""
from .generate import new_game, daily_challenge_seed, random_name
from .tasks import TASK_CATALOG, select_weekly_tasks

__all__ = ["new_game", "daily_challenge_seed", "random_name", "TASK_CATALOG", "select_weekly_tasks"]
