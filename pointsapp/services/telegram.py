import logging

import requests

from pointsapp.core.config import settings

log = logging.getLogger(__name__)

TELEGRAM_API = "https://api.telegram.org"
MEMBER_STATUSES = {"member", "administrator", "creator"}


def chat_id_for(channel: str) -> str:
    channel = channel.strip()
    if channel.startswith("https://t.me/"):
        channel = channel.rstrip("/").split("/")[-1]
    return channel if channel.startswith("@") or channel.lstrip("-").isdigit() else "@" + channel


class TelegramMembershipChecker:
    """Vérifie l'abonnement à un canal via getChatMember (le bot doit être admin du canal)."""

    def __init__(self, token: str | None = None, timeout: float = 10.0):
        self.token = token if token is not None else settings.telegram_bot_token
        self.timeout = timeout

    def is_member(self, channel: str, user_id: str) -> bool:
        try:
            tg_user_id = int(user_id)
        except (TypeError, ValueError):
            # pas un identifiant Telegram: inutile d'appeler l'API
            log.warning("getChatMember ignoré: user_id non numérique %r", user_id)
            return False

        url = f"{TELEGRAM_API}/bot{self.token}/getChatMember"
        payload = {"chat_id": chat_id_for(channel), "user_id": tg_user_id}
        response = requests.post(url, json=payload, timeout=self.timeout)
        # 5xx / réseau: on laisse remonter, l'appelant pourra réessayer
        if response.status_code >= 500:
            response.raise_for_status()

        try:
            data = response.json()
        except requests.exceptions.JSONDecodeError:
            log.warning("getChatMember: réponse non JSON (HTTP %s) pour %s sur %s",
                        response.status_code, user_id, channel)
            return False
        if not data.get("ok"):
            log.info("getChatMember refusé pour %s sur %s: %s", user_id, channel, data.get("description"))
            return False
        return data.get("result", {}).get("status") in MEMBER_STATUSES
