"""State layer.

The only place where tracked entities and per-entity alert state live.
Each engine owns its own instances; nothing here is module-global.
"""
