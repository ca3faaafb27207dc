"""Ad slot lifecycle primitives (phase machine, callback binding, and the slot controller).

Kept free of host UI concerns so it can be driven by any scene, CLI, or test.
"""
