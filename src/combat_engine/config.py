# Simulated opponent: strikes every N seconds, always dodged
OPPONENT_STRIKE_INTERVAL = 2.0  # seconds
SIMULATED_DURATION = 1000.0  # seconds of mock battle per moveset
CREATURE_LIFETIME = 60.0  # seconds an attacker survives incoming damage

# Power ceiling for the restricted ranking family
RESTRICTED_CP_CEILING = 1500

# Combat power multiplier at the highest level
MAX_POWER_MULTIPLIER = 0.79030001

# Perfect individual values added to every base stat
IV_BONUS = 15

# Damage model
STAB_MULTIPLIER = 1.25
MAX_ENERGY = 100
PASSIVE_ENERGY_PER_HP = 0.5

# Dodge model
DODGE_REACTION_MARGIN = 0.49  # seconds reserved before each strike
MIN_DODGE_WINDOW = 0.5  # seconds spent dodging after a fast-ability batch
UNDEFENDED_DAMAGE_FACTOR = 0.25
