"""Infrastructure - database, mail, security and logging adapters.

Invariants:
    - Everything that talks to the outside world lives here
    - core/ never imports from infrastructure/
"""
