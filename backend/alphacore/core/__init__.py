"""Core - pure domain logic (no IO, no DB, no HTTP).

Invariants:
    - Functions here take plain values and return plain values
    - Routes and services orchestrate IO around these functions
"""
