"""CallHub Application Package - dynamic call dispatcher over hot-reloaded handler modules.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""
