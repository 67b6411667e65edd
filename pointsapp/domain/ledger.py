# pointsapp/domain/ledger.py
from __future__ import annotations
import sqlite3

from ..core.db.base import atomic
from ..persistence import players as repo
from .errors import NotFound, ValidationFailure
from .players import uid

FLAGS = repo.FLAG_COLUMNS

def get_balance(user_id: int | str) -> int:
    """Solde courant (source de vérité = users.points)."""
    u = uid(user_id)
    bal = repo.balance(u)
    if bal is None:
        raise NotFound(u)
    return bal

def add_points(user_id: int | str, delta: int) -> int:
    """
    Incrément atomique du solde (points = points + delta côté SQL).
    Un solde qui passerait sous zéro est refusé par la contrainte CHECK.
    Renvoie le solde après application.
    """
    u = uid(user_id)
    try:
        with atomic():
            new_balance = repo.add_points(u, int(delta))
    except sqlite3.IntegrityError as exc:
        raise ValidationFailure(f"balance of {u} cannot go below zero") from exc
    if new_balance is None:
        raise NotFound(u)
    return new_balance

def set_flag(user_id: int | str, flag: str, value: bool = True) -> None:
    """Idempotent: poser deux fois la même valeur ne change rien."""
    if flag not in FLAGS:
        raise ValidationFailure(f"unknown flag: {flag!r}")
    u = uid(user_id)
    with atomic():
        if not repo.exists(u):
            raise NotFound(u)
        repo.set_flag(u, flag, bool(value))
