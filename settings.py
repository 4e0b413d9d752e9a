# settings.py

# Headless driver
FPS = 60
TITLE = "Chess Tactics"

# Board
TILE_SIZE = 40  # rendering scale only; the rules never read it

# Board generation
# Seeded stream: s = (s * LCG_MULTIPLIER + LCG_INCREMENT) & LCG_MASK, value = s / LCG_MASK
LCG_MULTIPLIER = 1103515245
LCG_INCREMENT = 12345
LCG_MASK = 0x7FFFFFFF

SPAWN_ROWS = 2                     # rows reserved at top (enemy) and bottom (player)
OBSTACLE_BASE_FRACTION = 0.06
OBSTACLE_FRACTION_PER_DIFFICULTY = 0.02
OBSTACLE_MAX_FRACTION = 0.18
OBSTACLE_MIN_COUNT = 2
OBSTACLE_ATTEMPTS_PER_TARGET = 4
COVER_BASE_FRACTION = 0.02
COVER_FRACTION_PER_DIFFICULTY = 0.008
COVER_MAX_FRACTION = 0.06

# Action points (shared pools)
PLAYER_ACTION_POINTS = 12
ENEMY_ACTION_POINTS = 12
BOSS_ENEMY_ACTION_POINTS = 18

# Boss upgrade
BOSS_HEALTH_MULTIPLIER = 3.5
BOSS_HEALTH_FLOOR = 12
BOSS_ATTACK_BONUS = 3
BOSS_ATTACK_CAP = 8
BOSS_DEFENSE_BONUS = 2
BOSS_DEFENSE_CAP = 4

# Enemy AI scoring
AI_TARGET_SPREAD_PENALTY = 60      # per enemy already assigned to a target
AI_KILL_SCORE = 1000
AI_HIT_SCORE = 100
AI_ASSIGNED_TARGET_BONUS = 250
AI_THREATEN_FROM_DEST_BONUS = 550
AI_CLUSTER_PENALTY = 40            # per uncommitted ally within AI_CLUSTER_RADIUS of the destination
AI_CLUSTER_RADIUS = 2
AI_BOSS_ESCAPE_BONUS = 400         # threatened -> safe
AI_BOSS_SAFE_BONUS = 150           # safe -> safe
AI_BOSS_EXPOSED_PENALTY = 300      # destination threatened
AI_RETREAT_SAFE_BONUS = 500
AI_RETREAT_ESCAPE_BONUS = 300

# Score
SCORE_BASE = 1000
SCORE_TURN_PENALTY = 10
SCORE_AP_PENALTY = 2

# Enemy phase pacing (presentation only, milliseconds)
ENEMY_PHASE_START_MS = 400
ENEMY_PREVIEW_MS = 780
ENEMY_AFTER_ACTION_MS = 520
ENEMY_AFTER_ATTACK_EXTRA_MS = 380
ENEMY_AFTER_AREA_EXTRA_MS = 400
