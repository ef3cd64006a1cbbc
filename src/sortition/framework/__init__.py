"""
====================
The sortition engine
====================

Subsystems for deterministic randomization, lazy parameter assignment and the
experiment lifecycle.

"""
