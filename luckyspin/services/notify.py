# luckyspin/services/notify.py
from __future__ import annotations

import logging

from aiogram import Bot
from aiogram.client.default import DefaultBotProperties
from aiogram.enums import ParseMode
from aiogram.utils.text_decorations import html_decoration as hd

from luckyspin.config.settings import Settings

log = logging.getLogger(__name__)


class StaffNotifier:
    """
    Optional Telegram ping to the restaurant staff chat.
    Only used from the best-effort analytics path.
    """

    def __init__(self, bot: Bot, chat_id: int) -> None:
        self.bot = bot
        self.chat_id = chat_id

    @classmethod
    def from_settings(cls, settings: Settings) -> "StaffNotifier | None":
        if not settings.staff_notifications_enabled:
            return None
        bot = Bot(
            token=settings.staff_bot_token,  # type: ignore[arg-type]
            default=DefaultBotProperties(parse_mode=ParseMode.HTML),
        )
        return cls(bot, settings.staff_chat_id)  # type: ignore[arg-type]

    async def cap_hit(self, *, restaurant_name: str, reason: str) -> None:
        if reason == "restaurant_cap_reached":
            what = "the restaurant's daily win limit"
        else:
            what = "every prize's daily limit"
        await self.bot.send_message(
            chat_id=self.chat_id,
            text=f"🎡 <b>{hd.quote(restaurant_name)}</b>\nToday's wheel has reached {what}.",
        )

    async def prize_redeemed(self, *, restaurant_name: str, prize_label: str | None, short_code: str | None) -> None:
        code = f" (<code>{hd.quote(short_code)}</code>)" if short_code else ""
        await self.bot.send_message(
            chat_id=self.chat_id,
            text=(
                f"✅ <b>{hd.quote(restaurant_name)}</b>\n"
                f"Redeemed: <b>{hd.quote(prize_label or 'prize')}</b>{code}"
            ),
        )

    async def close(self) -> None:
        try:
            await self.bot.session.close()
        except Exception:
            log.exception("Failed to close staff bot session")
