"""
Match systems package.
"""
from .event_log import EventKind, EventLog, EventRecord, round_n
from .spawner import EntitySpawner, SpawnCounts, generate_entities, sanitize_participants, spawn_counts
from .combat import InteractionResolver
from .proof import Proof, ProofCheck, ProofFormatError, finalize, fingerprint_from_filename, parse_proof, verify
