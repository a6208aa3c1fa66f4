"""
Season simulation engine for the coaching simulator.
Talent dispatch, training, trips, events and choice gating, contests, the weekly tick,
other coach activities and snapshot/restore.
"""
from .talents import (
    register_talent,
    unregister_talent,
    get_talent,
    all_talents,
    trigger_talents,
    iter_talent_triggers,
    fold_pressure,
    try_acquire_talent,
)
from .training import (
    Intensity,
    PressureEstimate,
    estimate_training_pressure,
    train_students_with_task,
    extra_train_students_with_task,
)
from .outing import quote_trip, outing_training, overseas_training, compute_outing_cost
from .events import check_random_events, resolve_choice, push_game_event
from .competition import (
    hold_competition,
    calculate_performance_score,
    calculate_final_ending,
    competition_schedule,
)
from .season import advance_weeks, choose_event_option, check_and_trigger_ending, resign, guard_action
from .activities import entertainment, take_vacation, part_time_job, upgrade_facility, evict_student
from .snapshot import snapshot, restore, dumps, loads

__all__ = [
    "register_talent",
    "unregister_talent",
    "get_talent",
    "all_talents",
    "trigger_talents",
    "iter_talent_triggers",
    "fold_pressure",
    "try_acquire_talent",
    "Intensity",
    "PressureEstimate",
    "estimate_training_pressure",
    "train_students_with_task",
    "extra_train_students_with_task",
    "quote_trip",
    "outing_training",
    "overseas_training",
    "compute_outing_cost",
    "check_random_events",
    "resolve_choice",
    "push_game_event",
    "hold_competition",
    "calculate_performance_score",
    "calculate_final_ending",
    "competition_schedule",
    "advance_weeks",
    "choose_event_option",
    "check_and_trigger_ending",
    "resign",
    "guard_action",
    "entertainment",
    "take_vacation",
    "part_time_job",
    "upgrade_facility",
    "evict_student",
    "snapshot",
    "restore",
    "dumps",
    "loads",
]
