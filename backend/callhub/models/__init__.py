"""ORM Models - SQLAlchemy declarative models.

Invariants:
    - All models inherit from Base (db/base.py)
    - Imported here so Base.metadata knows every table before create_all runs
"""

from callhub.models.call import Call  # noqa: F401
