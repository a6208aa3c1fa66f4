"""
Default training task catalog and weekly slate selection.
Each week offers WEEKLY_RECOMMENDED_TASKS tasks near the team's ability plus a few random picks.
"""
import random
from typing import List, Sequence

from models import Student, Task, TaskBoost
from models.constants import WEEKLY_TASK_COUNT, WEEKLY_RECOMMENDED_TASKS

# name, difficulty, [(domain, amount), ...]
_CATALOG = [
    ("Prefix Sums", 15, [("ds", 4), ("math", 2)]),
    ("Simulation Warm-up", 18, [("ds", 3), ("string", 2)]),
    ("Greedy Basics", 22, [("math", 3), ("dp", 2)]),
    ("BFS on Grids", 25, [("graph", 5)]),
    ("String Matching", 28, [("string", 5)]),
    ("Binary Search", 30, [("ds", 3), ("math", 3)]),
    ("Knapsack", 35, [("dp", 6)]),
    ("Union-Find", 38, [("ds", 5), ("graph", 2)]),
    ("Shortest Paths", 42, [("graph", 6)]),
    ("Number Theory I", 45, [("math", 6)]),
    ("Interval DP", 50, [("dp", 7)]),
    ("Segment Tree", 55, [("ds", 7)]),
    ("KMP and Z", 55, [("string", 7)]),
    ("Minimum Spanning Tree", 58, [("graph", 6), ("ds", 2)]),
    ("Combinatorics", 62, [("math", 7), ("dp", 2)]),
    ("Tree DP", 66, [("dp", 6), ("graph", 3)]),
    ("Suffix Array", 72, [("string", 8), ("ds", 2)]),
    ("Network Flow", 78, [("graph", 9)]),
    ("Bitmask DP", 80, [("dp", 8), ("math", 2)]),
    ("Heavy-Light Decomposition", 85, [("ds", 7), ("graph", 4)]),
    ("Polynomial Tricks", 92, [("math", 10)]),
    ("Suffix Automaton", 96, [("string", 10)]),
    ("DP Optimisations", 100, [("dp", 10), ("ds", 2)]),
    ("Link-Cut Trees", 108, [("ds", 11)]),
    ("Hard Graph Constructions", 115, [("graph", 10), ("math", 3)]),
    ("Mixed NOI Mock", 120, [("ds", 3), ("graph", 3), ("string", 3), ("math", 3), ("dp", 3)]),
]

TASK_CATALOG: List[Task] = [
    Task(name=name, difficulty=diff, boosts=[TaskBoost(d, a) for d, a in boosts])
    for name, diff, boosts in _CATALOG
]


def _team_ability(students: Sequence[Student]) -> float:
    active = [s for s in students if s.active]
    if not active:
        return 0.0
    return sum(s.ability_avg() for s in active) / len(active)


def select_weekly_tasks(
    rng: random.Random,
    students: Sequence[Student],
    count: int = WEEKLY_TASK_COUNT,
    catalog: Sequence[Task] | None = None,
) -> List[Task]:
    """Pick the week's slate: closest-difficulty tasks first, then random fill, no repeats."""
    pool = list(catalog if catalog is not None else TASK_CATALOG)
    if count >= len(pool):
        return pool
    ability = _team_ability(students)
    ranked = sorted(pool, key=lambda t: (abs(t.difficulty - ability), t.name))
    recommended = ranked[: min(WEEKLY_RECOMMENDED_TASKS, count)]
    rest = [t for t in pool if t not in recommended]
    extra = rng.sample(rest, count - len(recommended))
    return sorted(recommended + extra, key=lambda t: t.difficulty)
