import logging

from ..persistence import admin as repo
from ..persistence import players as players_repo
from .errors import NotFound, ValidationFailure
from .models import UserSummary
from .players import uid

log = logging.getLogger(__name__)

def user_summaries(limit: int = 100, offset: int = 0) -> list[UserSummary]:
    return [UserSummary(**row) for row in repo.user_rows(limit, offset)]

def set_points(user_id: int | str, points: int) -> None:
    """Correction manuelle du solde (admin uniquement)."""
    if int(points) < 0:
        raise ValidationFailure("points must be >= 0")
    u = uid(user_id)
    if not players_repo.set_points(u, int(points)):
        raise NotFound(u)
    log.warning("Admin: solde de %s forcé à %d", u, int(points))

def delete_user(user_id: int | str) -> None:
    u = uid(user_id)
    if not players_repo.delete(u):
        raise NotFound(u)
    log.warning("Admin: utilisateur %s supprimé", u)
