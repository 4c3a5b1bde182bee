"""Core simulation primitives (facts, motion, spawning, difficulty, collisions).

Kept free of FastAPI and Redis concerns so it can be reused by the session,
the HTTP layer, and tests.
"""
