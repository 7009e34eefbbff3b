# manito_matching/config.py

# Rejection-sampling budget per match group
MAX_SHUFFLE_ATTEMPTS = 100

# Random seed for reproducible rounds (None = fresh randomness every run)
DEFAULT_SEED = None

# Human-readable rule list attached to every pairing result
RULES_APPLIED = [
    "nobody is assigned to themselves",
    "newcomers pair only with leads",
    "newcomers never pair with each other",
    "ordinary members pair with anyone except newcomers",
    "forbidden pairs are blocked in both directions",
    "no two members give to each other",
]

EMPTY_POPULATION_MESSAGE = "No participants were supplied."

# -----------------------------------------------------------
# Sheet layout (A1-style, row 1 is the first line of the file)
# -----------------------------------------------------------

SHEET_NAME_DEFAULT = "DB"

ORDINARY_RANGE = "A4:A"
NEWCOMER_RANGE = "B4:B"
LEAD_RANGE = "C4:C"
FORBIDDEN_RANGE = "G4:H40"

# Giver/receiver columns are written from here downwards
PAIRS_START_CELL = "J4"

# Holds the generated_at stamp of the last saved round (compare-and-swap guard)
ROUND_MARKER_CELL = "J2"

# Saved pairs are read back from this block
PAIRS_RANGE = "J4:K1000"

# Toy roster knobs
NUM_ORDINARY_DEFAULT = 8
NUM_NEWCOMERS_DEFAULT = 2
NUM_LEADS_DEFAULT = 3
NUM_FORBIDDEN_DEFAULT = 2
TOY_SEED = 42
