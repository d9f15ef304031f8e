"""
Database helpers shared by service layers.
"""

from contextlib import contextmanager

from django.db import IntegrityError, transaction

from core.exceptions import ConflictError


@contextmanager
def conflict_on_integrity_error(message):
    """
    Run a single model write in a savepoint and report a constraint
    violation as ConflictError. Keep audit writes outside the block so
    their failures propagate unchanged.
    """
    try:
        with transaction.atomic():
            yield
    except IntegrityError:
        raise ConflictError(message)
