MOMENTUM_MIN = 0
MOMENTUM_MAX = 200
MOMENTUM_START = 100
# HeroicAct abilities unlock at or above this faction momentum.
MOMENTUM_HEROIC_THRESHOLD = 175
# DesperateMeasure abilities unlock at or below this faction momentum.
MOMENTUM_DESPERATE_THRESHOLD = 50

# Own health percentage under which the planner switches to emergency posture.
EMERGENCY_HP_PERCENT = 30.0
# Own or ally health percentage at which Emergency-timed abilities unlock.
EMERGENCY_ABILITY_HP_PERCENT = 30.0
# Health percentage under which the safety fallback may force a plain attack.
SAFETY_FALLBACK_HP_PERCENT = 40.0
# Ranged units below this health percentage look for cover when nothing is in reach.
SEEK_COVER_HP_PERCENT = 50.0

# Default thresholds for rules that do not declare their own.
DEFAULT_FINISHER_TARGET_HP_PERCENT = 30.0
DEFAULT_SELF_DAMAGE_HP_PERCENT = 50.0

# Ranged units retreat when an enemy is within this distance.
RETREAT_DANGER_RADIUS = 5.0
# AP held back for a move when deciding whether to buff before repositioning.
MOVE_AP_RESERVE = 1.5
# Presumed attack-value multiplier of a self buff.
BUFF_MULTIPLIER = 1.2
# Distance at which an ability with zero declared range still connects.
MELEE_REACH = 1.5

# Target scoring weights
HP_PERCENT_WEIGHT = 0.3
HP_ABSOLUTE_WEIGHT = 1.0
HP_ABSOLUTE_NUMERATOR = 100.0
HP_ABSOLUTE_FLOOR = 5.0
HP_ABSOLUTE_CAP = 20.0
DISTANCE_WEIGHT = 15.0
KILLABLE_NOW_BONUS = 35.0
KILLABLE_SOON_BONUS = 10.0
KILLABLE_NOW_FACTOR = 1.2
KILLABLE_SOON_FACTOR = 2.0
NOT_HITTABLE_PENALTY = -1000.0
RANGED_FAR_BONUS = 20.0
RANGED_FAR_DISTANCE = 5.0
RANGED_CLOSE_PENALTY = -30.0
RANGED_CLOSE_DISTANCE = 3.0
MELEE_CLOSE_WEIGHT = 3.0
MELEE_CLOSE_HORIZON = 10.0

# Coarse per-attack damage estimate: level * DAMAGE_PER_LEVEL + DAMAGE_BASE.
DAMAGE_PER_LEVEL = 3
DAMAGE_BASE = 15
UNARMED_DAMAGE_FACTOR = 0.5

# Every usable pair starts here so range preference alone never rejects an attack.
PAIR_BASE_SCORE = 30.0
# Pair scoring bonuses
PLANNED_TARGET_BONUS = 15.0
FINISHER_BONUS = 40.0
DEBUFF_BONUS = 10.0
HEROIC_BONUS = 25.0
DESPERATE_BONUS = 15.0
TAUNT_BONUS = 5.0
GAP_CLOSER_BONUS = 10.0
GAP_CLOSER_PENALTY = -10.0
AOE_EXTRA_ENEMY_BONUS = 8.0
MIN_ACCEPTABLE_ACTION_SCORE = 0.0

# Area effect safety
AREA_WEAPON_SAFETY_RADIUS = 2.5
AOE_SAFETY_RADIUS = 3.5
AOE_MAX_ALLIES_EXPOSED = 2
AOE_EFFICIENCY_RADIUS = 3.0
AOE_MIN_ENEMIES = 2
# Caster closer than this to a cone/line origin is not counted as exposed.
AOE_ORIGIN_CLEARANCE = 0.5
LINE_PATTERN_WIDTH = 1.0

# Repeated decision handling
REPEAT_WINDOW_SECONDS = 2.0
MAX_CONSECUTIVE_FAILURES = 3
MAX_TURN_STEPS = 12

# Round estimation without an authoritative counter.
ROUND_DURATION_SECONDS = 6.0
# Ticks between sweeps of turn states belonging to vanished units.
SWEEP_INTERVAL_TICKS = 300

# Sandbox host
SANDBOX_HEAL_FRACTION = 0.25
