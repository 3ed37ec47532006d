"""Server-wide configuration constants for Healing Surge Server."""

import os

DATA_DIR = os.environ.get("DATA_DIR", ".")  # Persistent data directory
TABLE_FILE = os.path.join(DATA_DIR, "table_state.json")
TOKENS_FILE = os.path.join(DATA_DIR, "tokens.json")
ADMIN_SECRET = os.environ.get("ADMIN_SECRET", "change-me-in-production")
SECRET_FILE = os.path.join(DATA_DIR, "admin_secret.txt")
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

API_INVOKE = "ihs"                       # Commands start with "!ihs"
FEEDBACK_NAME = "Intelligent Healing Surge"  # Speaker for script feedback
CHAT_LOG_LIMIT = 200                     # Messages kept in table state

# Hold a per-character lock for the whole command (off by default)
SERIALIZE_PER_CHARACTER = os.environ.get("SERIALIZE_PER_CHARACTER", "0") == "1"

# Sheet attribute names
ATTR_HP = "hp"                  # current = hp, max = max hp
ATTR_HIT_DICE = "hit_dice"      # current = spendable, max = pool size
ATTR_HIT_DIE_SIZE = "hit_die_size"
ATTR_LEVEL = "level"
ATTR_CONSTITUTION = "constitution"
ATTR_HEALING_SURGE = "healing_surge"
ATTR_NAME = "name"
ATTR_NPC = "npc"

# Narrative lines used when a healing surge is exhausted
EXHAUST_FLAVOR = (
    "catches their breath, the last of their second wind spent.",
    "binds the final wound and lets the adrenaline fade.",
    "feels the rush of recovery ebb away.",
    "exhales slowly. There is nothing left to draw on until the next rest.",
    "steadies themselves, resolve worn thin for now.",
)


def load_secret() -> None:
    """Load admin secret from persistent file, if it exists."""
    global ADMIN_SECRET
    if os.path.exists(SECRET_FILE):
        with open(SECRET_FILE) as f:
            stored = f.read().strip()
        if stored:
            ADMIN_SECRET = stored


def save_secret() -> None:
    """Persist current admin secret to file (atomic write)."""
    tmp_path = SECRET_FILE + ".tmp"
    with open(tmp_path, "w") as f:
        f.write(ADMIN_SECRET)
    os.replace(tmp_path, SECRET_FILE)
