"""
Tuning constants and static content tables for the coaching season simulator.
Everything the engine multiplies by lives here so balance changes stay in one file.
"""
from typing import Dict, List, Tuple

# ---------------------------------------------------------------------------
# Season calendar
# ---------------------------------------------------------------------------

WEEKS_PER_HALF = 24
SEASON_WEEKS = WEEKS_PER_HALF * 2

# Calendar week (1-52) of season week 1; the season opens in early September.
SEASON_START_CALENDAR_WEEK = 35

# ---------------------------------------------------------------------------
# Knowledge domains
# ---------------------------------------------------------------------------

# Internal key -> display name. Order matters for hidden-score tag sampling.
KNOWLEDGE_DOMAINS: Dict[str, str] = {
    "ds": "Data Structures",
    "graph": "Graph Theory",
    "string": "Strings",
    "math": "Mathematics",
    "dp": "Dynamic Programming",
}
KNOWLEDGE_KEYS: Tuple[str, ...] = tuple(KNOWLEDGE_DOMAINS)

# ---------------------------------------------------------------------------
# Difficulty modes (1 easy, 2 normal, 3 hard)
# ---------------------------------------------------------------------------

DIFFICULTY_BUDGET_MULTIPLIER: Dict[int, float] = {1: 1.3, 2: 1.0, 3: 0.75}
DIFFICULTY_ABILITY_SHIFT: Dict[int, int] = {1: 10, 2: 0, 3: -10}
DIFFICULTY_TRAINING_EFFECT: Dict[int, float] = {1: 1.2, 2: 1.0, 3: 0.9}
DIFFICULTY_PRESSURE_MULTIPLIER: Dict[int, float] = {1: 0.85, 2: 1.0, 3: 1.15}

# ---------------------------------------------------------------------------
# Provinces (home regions) and overseas destinations
# ---------------------------------------------------------------------------

PROVINCE_STRONG = "strong"
PROVINCE_NORMAL = "normal"
PROVINCE_WEAK = "weak"

# id -> name, type, north/south, starting budget, outing training quality, mean temperature (C)
PROVINCES: Dict[int, Dict] = {
    1: {"name": "Zhejiang", "type": PROVINCE_STRONG, "is_north": False, "base_budget": 520000, "training_quality": 1.3, "mean_temp": 17.0},
    2: {"name": "Jiangsu", "type": PROVINCE_STRONG, "is_north": False, "base_budget": 500000, "training_quality": 1.25, "mean_temp": 16.0},
    3: {"name": "Beijing", "type": PROVINCE_STRONG, "is_north": True, "base_budget": 540000, "training_quality": 1.3, "mean_temp": 12.5},
    4: {"name": "Guangdong", "type": PROVINCE_STRONG, "is_north": False, "base_budget": 530000, "training_quality": 1.2, "mean_temp": 22.5},
    5: {"name": "Shandong", "type": PROVINCE_NORMAL, "is_north": True, "base_budget": 450000, "training_quality": 1.1, "mean_temp": 13.5},
    6: {"name": "Hunan", "type": PROVINCE_NORMAL, "is_north": False, "base_budget": 430000, "training_quality": 1.1, "mean_temp": 17.5},
    7: {"name": "Sichuan", "type": PROVINCE_NORMAL, "is_north": False, "base_budget": 420000, "training_quality": 1.05, "mean_temp": 16.5},
    8: {"name": "Henan", "type": PROVINCE_NORMAL, "is_north": True, "base_budget": 410000, "training_quality": 1.0, "mean_temp": 14.5},
    9: {"name": "Heilongjiang", "type": PROVINCE_WEAK, "is_north": True, "base_budget": 380000, "training_quality": 0.9, "mean_temp": 4.0},
    10: {"name": "Gansu", "type": PROVINCE_WEAK, "is_north": True, "base_budget": 360000, "training_quality": 0.85, "mean_temp": 8.5},
    11: {"name": "Guizhou", "type": PROVINCE_WEAK, "is_north": False, "base_budget": 360000, "training_quality": 0.9, "mean_temp": 15.0},
    12: {"name": "Hainan", "type": PROVINCE_WEAK, "is_north": False, "base_budget": 370000, "training_quality": 0.85, "mean_temp": 25.0},
}

COUNTRIES: Dict[int, Dict] = {
    1: {"name": "Russia", "type": PROVINCE_STRONG, "training_quality": 1.45},
    2: {"name": "United States", "type": PROVINCE_STRONG, "training_quality": 1.4},
    3: {"name": "Japan", "type": PROVINCE_NORMAL, "training_quality": 1.3},
    4: {"name": "Poland", "type": PROVINCE_NORMAL, "training_quality": 1.3},
    5: {"name": "Thailand", "type": PROVINCE_WEAK, "training_quality": 1.15},
}

# Starting ability window by province type (before difficulty shift)
PROVINCE_ABILITY_RANGE: Dict[str, Tuple[int, int]] = {
    PROVINCE_STRONG: (40, 70),
    PROVINCE_NORMAL: (30, 60),
    PROVINCE_WEAK: (20, 50),
}

BASE_COMFORT_NORTH = 45.0
BASE_COMFORT_SOUTH = 55.0

# ---------------------------------------------------------------------------
# Economy
# ---------------------------------------------------------------------------

STARTING_REPUTATION = 30
REPUTATION_SOFT_CAP = 100

WEEKLY_BASE_COST = 1500
WEEKLY_COST_PER_STUDENT = 400

EVICT_REPUTATION_COST = 10
QUIT_REPUTATION_COST = 5
PART_TIME_QUIT_REPUTATION_COST = 5

ENTERTAINMENT_COST_MEAL = 3000
ENTERTAINMENT_COST_GAMING = 2000
ENTERTAINMENT_GAMING_MIN_COMPUTER = 3
VACATION_MAX_DAYS = 14

PART_TIME_BASE_EARNINGS = 2000
PART_TIME_ABILITY_RATE = 20

# ---------------------------------------------------------------------------
# Facilities
# ---------------------------------------------------------------------------

FACILITY_NAMES: Tuple[str, ...] = ("computer", "library", "ac", "dorm", "canteen")

FACILITY_LABELS: Dict[str, str] = {
    "computer": "Computer Lab",
    "library": "Library",
    "ac": "Air Conditioning",
    "dorm": "Dormitory",
    "canteen": "Canteen",
}

FACILITY_MAX_LEVEL: Dict[str, int] = {"computer": 5, "library": 5, "ac": 3, "dorm": 3, "canteen": 3}

# Cost to go from level N to N+1, indexed by current level (1-based)
FACILITY_UPGRADE_COST: Dict[str, Dict[int, int]] = {
    "computer": {1: 30000, 2: 50000, 3: 80000, 4: 120000},
    "library": {1: 25000, 2: 45000, 3: 70000, 4: 100000},
    "ac": {1: 20000, 2: 40000},
    "dorm": {1: 30000, 2: 60000},
    "canteen": {1: 15000, 2: 35000},
}

FACILITY_MAINTENANCE_PER_LEVEL: Dict[str, int] = {"computer": 200, "library": 150, "ac": 150, "dorm": 150, "canteen": 100}

# Level 1 is a penalty relative to level 2 (a half-finished upgrade)
COMPUTER_MULTIPLIER: Dict[int, float] = {1: 0.8, 2: 1.0, 3: 1.1, 4: 1.2, 5: 1.3}
LIBRARY_MULTIPLIER: Dict[int, float] = {1: 0.8, 2: 0.95, 3: 1.1, 4: 1.12, 5: 1.14}
AC_WEATHER_MITIGATION: Dict[int, float] = {1: 0.0, 2: 0.4, 3: 0.7}
DORM_COMFORT_BONUS: Dict[int, float] = {1: 0.0, 2: 4.0, 3: 8.0}
CANTEEN_PRESSURE_REDUCTION: Dict[int, float] = {1: 1.0, 2: 0.9, 3: 0.8}

# ---------------------------------------------------------------------------
# Weather & comfort
# ---------------------------------------------------------------------------

WEATHER_SUNNY = "sunny"
WEATHER_CLOUDY = "cloudy"
WEATHER_RAIN = "rain"
WEATHER_SNOW = "snow"

SEASONAL_TEMP_AMPLITUDE = 14.0
EXTREME_COLD_THRESHOLD = 0.0
EXTREME_HOT_THRESHOLD = 33.0
COMFORT_IDEAL_TEMP = 20.0
COMFORT_TEMP_PENALTY = 0.8
WEATHER_COMFORT_DELTA: Dict[str, float] = {WEATHER_SUNNY: 2.0, WEATHER_CLOUDY: 0.0, WEATHER_RAIN: -3.0, WEATHER_SNOW: -5.0}
EXTREME_WEATHER_PRESSURE = 0.25

# ---------------------------------------------------------------------------
# Training
# ---------------------------------------------------------------------------

INTENSITY_FACTOR: Dict[str, float] = {"light": 0.7, "medium": 1.0, "heavy": 1.3}
INTENSITY_BASE_PRESSURE: Dict[str, float] = {"light": 15.0, "medium": 25.0, "heavy": 40.0}
INTENSITY_PRESSURE_MULTIPLIER: Dict[str, float] = {"light": 1.0, "medium": 1.2, "heavy": 1.5}
INTENSITY_TALENT_CHANCE: Dict[str, float] = {"light": 0.2, "medium": 0.4, "heavy": 0.8}

DIFFICULTY_PRESSURE_RATE = 0.2
SICK_TRAINING_PENALTY = 0.7
SICK_PRESSURE_FLAT = 10.0
EXTRA_TRAINING_PRESSURE_MULTIPLIER = 1.5
PRESSURE_DIMINISHING_CAP = 0.6

THINKING_GAIN_RANGE = (0.6, 1.5)
CODING_GAIN_RANGE = (1.0, 2.5)

# Ability/difficulty match curve: peak at a near match, falling off either side
BOOST_PEAK = 1.2
BOOST_FLOOR = 0.3
BOOST_WIDTH = 30.0

QUIT_RISK_PRESSURE = 90
HIGH_PRESSURE = 70

WEEKLY_TASK_COUNT = 7
WEEKLY_RECOMMENDED_TASKS = 5

# ---------------------------------------------------------------------------
# Recovery, sickness, quitting
# ---------------------------------------------------------------------------

RECOVERY_RATE = 20.0
BASE_SICK_PROB = 0.01
SICK_PROB_FROM_COLD_HOT = 0.03
SICK_WEEKS_RANGE = (1, 3)
QUIT_PROB_BASE = 0.25
QUIT_PROB_PER_EXTRA_PRESSURE = 0.05
QUIT_TENDENCY_THRESHOLD = 2

# ---------------------------------------------------------------------------
# Outing / overseas training
# ---------------------------------------------------------------------------

OUTING_BASE_COST: Dict[int, int] = {1: 10000, 2: 20000, 3: 35000}
OUTING_COST_PER_PARTICIPANT = 18000
OUTING_DIFFICULTY_PENALTY: Dict[int, int] = {1: 100, 2: 300, 3: 600}
STRONG_PROVINCE_COST_MULTIPLIER = 1.5
WEAK_PROVINCE_COST_MULTIPLIER = 0.7
OUTING_REPUTATION_DISCOUNT = 0.30
OUTING_REPUTATION_DISCOUNT_MULTIPLIER = 1.0
OUTING_MAX_DISCOUNT = 0.50
OVERSEAS_COST_MULTIPLIER = 1.5
OVERSEAS_GAIN_MULTIPLIER = 1.2

OUTING_KNOWLEDGE_BASE: Dict[int, int] = {1: 6, 2: 10, 3: 15}
OUTING_ABILITY_BASE: Dict[int, float] = {1: 0.6, 2: 1.0, 3: 1.5}
OUTING_PRESSURE: Dict[int, int] = {1: 15, 2: 25, 3: 35}
OUTING_COMFORT_DROP = 10

OUTING_INSPIRE_COST = 12000
OVERSEAS_INSPIRE_COST = 20000
OUTING_INSPIRE_CHANCE = 0.3
OVERSEAS_HIDDEN_INSPIRE_CHANCE = 0.25

MOCK_CONTEST_DIFF_VALUES: List[int] = [30, 50, 70, 90, 110]
OUTING_HIDDEN_DIFF_INDEX: Dict[int, int] = {1: 0, 2: 1, 3: 4}
HIDDEN_MOCK_PROBLEMS = 4
MISMATCH_THRESHOLD = 200
MISMATCH_KNOWLEDGE_MODIFIER = 0.2
MISMATCH_ABILITY_MODIFIER = 0.5
MISMATCH_PRESSURE_MULTIPLIER = 2.0

# ---------------------------------------------------------------------------
# Competitions
# ---------------------------------------------------------------------------

CSP_S1 = "CSP-S1"
CSP_S2 = "CSP-S2"
NOIP = "NOIP"
PROVINCIAL_SELECTION = "ProvincialSelection"
NOI = "NOI"

QUALIFICATION_CHAIN: Tuple[str, ...] = (CSP_S1, CSP_S2, NOIP, PROVINCIAL_SELECTION, NOI)

# Week offset inside a half, difficulty, number of problems, pass-line ratio of max score
COMPETITION_SCHEDULE: List[Dict] = [
    {"name": CSP_S1, "week": 4, "difficulty": 30, "num_problems": 4, "pass_ratio": 0.35},
    {"name": CSP_S2, "week": 8, "difficulty": 55, "num_problems": 4, "pass_ratio": 0.40},
    {"name": NOIP, "week": 12, "difficulty": 75, "num_problems": 4, "pass_ratio": 0.45},
    {"name": PROVINCIAL_SELECTION, "week": 18, "difficulty": 95, "num_problems": 6, "pass_ratio": 0.50},
    {"name": NOI, "week": 22, "difficulty": 115, "num_problems": 6, "pass_ratio": 0.40},
]

CONTEST_VALUE_MAP: Dict[str, float] = {
    CSP_S1: 1,
    CSP_S2: 1.5,
    NOIP: 4,
    PROVINCIAL_SELECTION: 0,
    NOI: 8,
}

CONTEST_PRESSURE: Dict[str, float] = {CSP_S1: 5, CSP_S2: 8, NOIP: 12, PROVINCIAL_SELECTION: 15, NOI: 18}
CONTEST_REPUTATION_PER_PASS: Dict[str, int] = {CSP_S1: 0, CSP_S2: 1, NOIP: 2, PROVINCIAL_SELECTION: 3, NOI: 5}

# NOI medal lines as a ratio of the maximum score
MEDAL_LINES: Tuple[Tuple[str, float], ...] = (("gold", 0.75), ("silver", 0.55), ("bronze", 0.40))
MEDAL_REPUTATION: Dict[str, int] = {"gold": 15, "silver": 8, "bronze": 4}
MEDAL_BUDGET_REWARD: Dict[str, int] = {"gold": 50000, "silver": 25000, "bronze": 10000}
SICK_CONTEST_PENALTY = 0.85

NATIONAL_TEAM_WEEKS = 4
NATIONAL_TEAM_REPUTATION = 20

# ---------------------------------------------------------------------------
# Talents & events
# ---------------------------------------------------------------------------

TALENT_ACQUIRE_BASE = 0.1
RECENT_EVENTS_CAPACITY = 24
LOG_CAPACITY = 500

# ---------------------------------------------------------------------------
# Name generation
# ---------------------------------------------------------------------------

SURNAMES: List[str] = [
    "Wang", "Li", "Zhang", "Liu", "Chen", "Yang", "Huang", "Zhao", "Wu", "Zhou",
    "Xu", "Sun", "Ma", "Zhu", "Hu", "Guo", "He", "Lin", "Gao", "Luo",
    "Zheng", "Liang", "Xie", "Song", "Tang", "Han", "Feng", "Deng", "Cao", "Peng",
]

GIVEN_NAMES: List[str] = [
    "Hao", "Yu", "Jie", "Tao", "Ming", "Lei", "Jun", "Wei", "Yang", "Chen",
    "Xin", "Yi", "Rui", "Zhe", "Kai", "Bo", "Hang", "Yuan", "Qi", "Ran",
    "Zihan", "Yuxuan", "Haoran", "Yichen", "Zirui", "Mingze", "Siyuan", "Junhao", "Tianyu", "Jiaqi",
]
