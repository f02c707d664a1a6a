"""Game domain services: scoring and the round lifecycle.

``scoring`` is pure and knows nothing about Flask or the database.
``rounds`` drives a persisted session through its stages and hands every
point computation to ``scoring``. Routes and socket handlers import from
here, keeping transport concerns out of the game mechanics.
"""
