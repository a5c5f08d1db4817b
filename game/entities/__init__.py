"""
Arena entities package.
"""
from .arena import Entity, EntityKind, Ghost, Hostile, Participant, Resource, health_of
