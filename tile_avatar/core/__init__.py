"""Core seeding package.

Architectural role:
    Turns a request identifier into a reproducible stream of pattern choices.

Composition:
    - `seed`: identifier (+ auxiliary data) -> 32-bit seed.
    - `random_source`: `SeededRandom`, the xorshift value source built from it.

Determinism and side effects:
    Both modules are pure apart from the state owned by a `SeededRandom`
    instance. Nothing here reads the environment or performs I/O.
"""
