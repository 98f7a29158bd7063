"""Core data models for Our Journey."""

from ourjourney.core.memory import Memory, memories_envelope

__all__ = [
    "Memory",
    "memories_envelope",
]
