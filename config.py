"""
Configuration settings for the Blogus Arena match core.
"""
import os
from dotenv import load_dotenv

load_dotenv()

# Simulation rate
SIM_TICK_HZ = int(os.getenv("ARENA_SIM_HZ", "60"))
MAX_MATCH_MINUTES = float(os.getenv("ARENA_MAX_MINUTES", "40"))

# Playfield (world units; the vertical axis is constant and not simulated)
SPAWN_SPAN = 80.0  # spawn positions cover [-40, 40)
PLAYFIELD_HALF_EXTENT = 49.0
ENTITY_HALF_EXTENT = 1.0  # entities are 2x2 boxes on the ground plane

# Velocity scales (units per second, symmetric around zero)
PARTICIPANT_VELOCITY_SCALE = 7.0
HOSTILE_VELOCITY_SCALE = 7.0
RESOURCE_VELOCITY_SCALE = 4.0

# Elimination rule variant: "remove" deletes eliminated participants,
# "ghost" keeps them as non-colliding ghosts.
ELIMINATION_MODE = os.getenv("ARENA_ELIMINATION_MODE", "remove").strip().lower()

# Proof export
PROOF_DIR = os.getenv("ARENA_PROOF_DIR", "proofs")
PROOF_FILENAME_PREFIX = "battle-proof-"

# Debug output (set ARENA_DEBUG=1 to see per-event match logs)
DEBUG_SIM = os.getenv("ARENA_DEBUG", "").strip().lower() in ("1", "true", "yes", "on")
