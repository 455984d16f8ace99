"""Route Modules - one file per resource.

Invariants:
    - Each module defines its own APIRouter with prefix and tags
    - Routes raise AlphacoreError subclasses; aggregation lives in core/ and services/

Design Decisions:
    - Explicit registration in main.py over auto-discovery
"""
