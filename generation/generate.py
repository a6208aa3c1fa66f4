"""
Bootstrap a new season: province, budget, roster, weather and the first task slate.
Uses an optional seed for reproducibility; the same seed and the same decisions replay
the same season.

Procedural logic:
- Starting ability window depends on the home province type, shifted by difficulty.
- Knowledge starts low and uneven; about a third of recruits arrive with one talent.
- Names come from an injectable generator and are unique within the roster.
"""
import datetime
import hashlib
import random
from typing import Callable, Dict, List, Sequence

from models import GameState, Student
from models.constants import (
    PROVINCES,
    PROVINCE_ABILITY_RANGE,
    DIFFICULTY_BUDGET_MULTIPLIER,
    DIFFICULTY_ABILITY_SHIFT,
    BASE_COMFORT_NORTH,
    BASE_COMFORT_SOUTH,
    KNOWLEDGE_KEYS,
    STARTING_REPUTATION,
    SURNAMES,
    GIVEN_NAMES,
)
from simulation.talents import grant_random_talent
from .tasks import select_weekly_tasks

INITIAL_TALENT_CHANCE = 0.35
MIN_STUDENTS = 1
MAX_STUDENTS = 10

NameGenerator = Callable[[random.Random], str]


def _seed_rng(seed: int | str | None) -> int:
    """Convert optional seed to int; strings hash stably so they replay across processes."""
    if seed is None:
        return random.randint(0, 2**31 - 1)
    if isinstance(seed, str):
        digest = hashlib.sha256(seed.encode("utf-8")).hexdigest()
        return int(digest, 16) % (2**31)
    return int(seed)


def daily_challenge_seed(day: datetime.date | None = None) -> int:
    """Same seed for everyone on the same calendar day."""
    day = day or datetime.date.today()
    return _seed_rng(f"daily-{day.isoformat()}")


def random_name(rng: random.Random) -> str:
    return f"{rng.choice(SURNAMES)} {rng.choice(GIVEN_NAMES)}"


def _unique_name(rng: random.Random, taken: set, name_generator: NameGenerator) -> str:
    for _ in range(50):
        name = name_generator(rng)
        if name not in taken:
            return name
    base = name_generator(rng)
    n = 2
    while f"{base} {n}" in taken:
        n += 1
    return f"{base} {n}"


def generate_student(rng: random.Random, name: str, province_type: str, difficulty: int) -> Student:
    lo, hi = PROVINCE_ABILITY_RANGE[province_type]
    shift = DIFFICULTY_ABILITY_SHIFT.get(difficulty, 0)
    lo, hi = max(0, lo + shift), max(1, hi + shift)
    knowledge = {f"knowledge_{k}": float(rng.randint(0, 8)) for k in KNOWLEDGE_KEYS}
    return Student(
        name=name,
        thinking=round(rng.uniform(lo, hi), 1),
        coding=round(rng.uniform(lo, hi), 1),
        pressure=float(rng.randint(10, 30)),
        mental=float(rng.randint(55, 85)),
        **knowledge,
    )


def new_game(
    difficulty: int = 2,
    province_id: int = 1,
    student_count: int = 5,
    seed: int | str | None = None,
    recruited: Sequence[Dict] | None = None,
    name_generator: NameGenerator | None = None,
) -> GameState:
    """
    Create a fresh season. `recruited` may supply explicit student records (at least a name);
    remaining slots up to student_count are generated.
    """
    if difficulty not in DIFFICULTY_BUDGET_MULTIPLIER:
        raise ValueError(f"difficulty must be one of {sorted(DIFFICULTY_BUDGET_MULTIPLIER)}, got {difficulty}")
    if province_id not in PROVINCES:
        raise ValueError(f"unknown province id: {province_id}")
    recruited = list(recruited or [])
    student_count = max(student_count, len(recruited))
    if not MIN_STUDENTS <= student_count <= MAX_STUDENTS:
        raise ValueError(f"student_count must be between {MIN_STUDENTS} and {MAX_STUDENTS}, got {student_count}")

    seed_int = _seed_rng(seed)
    rng = random.Random(seed_int)
    province = PROVINCES[province_id]
    name_generator = name_generator or random_name

    state = GameState(
        week=1,
        budget=int(province["base_budget"] * DIFFICULTY_BUDGET_MULTIPLIER[difficulty]),
        reputation=STARTING_REPUTATION,
        difficulty=difficulty,
        province_id=province_id,
        province_name=province["name"],
        province_type=province["type"],
        is_north=province["is_north"],
        base_comfort=BASE_COMFORT_NORTH if province["is_north"] else BASE_COMFORT_SOUTH,
        mean_temperature=province["mean_temp"],
        seed=seed_int,
        rng=rng,
    )

    taken: set = set()
    students: List[Student] = []
    for record in recruited:
        s = Student.from_dict(record)
        if s.name in taken:
            raise ValueError(f"duplicate student name: {s.name}")
        taken.add(s.name)
        students.append(s)
    while len(students) < student_count:
        name = _unique_name(rng, taken, name_generator)
        taken.add(name)
        students.append(generate_student(rng, name, province["type"], difficulty))
    state.students = students

    for s in students:
        if not s.talents and rng.random() < INITIAL_TALENT_CHANCE:
            grant_random_talent(state, s)

    state.update_weather()
    state.weekly_tasks = select_weekly_tasks(rng, students)
    state.log(f"Season started in {province['name']} with {len(students)} students (budget {state.budget}, seed {seed_int})")
    return state
