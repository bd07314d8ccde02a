"""Services Layer — text correction, step generation, verification, progression.

Invariants:
    - Services depend on oracle Protocols, never on a concrete SDK
    - Every surfaced natural-language field goes through TextCorrector

Design Decisions:
    - One service per pipeline stage (no god objects)
"""
