from __future__ import annotations

import asyncio
import logging

from telegram import Update
from telegram.ext import Application, ContextTypes, MessageHandler, filters

from actions import Dispatcher, Message
from config import load_config
from learner import Learner
from phraser import Phraser
from store import SqliteStore, User

logger = logging.getLogger(__name__)


def _user(tg_user) -> User | None:
    if tg_user is None:
        return None
    return User(
        id=tg_user.id,
        first_name=tg_user.first_name or "",
        last_name=tg_user.last_name,
        username=tg_user.username,
    )


async def handle_message(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Forward a text message to the dispatcher and send back its replies."""
    try:
        dispatcher: Dispatcher = context.application.bot_data["dispatcher"]
        dispatcher.bot_username = context.bot.username
        message = update.effective_message
        chat = update.effective_chat
        incoming = Message(
            chat_id=chat.id,
            text=message.text or "",
            chat_type=chat.type,
            user=_user(update.effective_user),
        )
        replies = await asyncio.to_thread(dispatcher.handle, incoming)
        for reply in replies:
            if reply:
                await message.reply_text(reply)
    except Exception:
        logger.exception("error handling message")


def main() -> None:
    """Run the Telegram bot."""
    config = load_config()
    logging.basicConfig(level=config.log_level)
    token = config.require_token()

    with SqliteStore(config.database_path) as store:
        phraser = Phraser(store, config.chain_properties(), config.haiku_attempts)
        with Learner(phraser.store_phrase) as learner:
            application = Application.builder().token(token).build()
            application.bot_data["dispatcher"] = Dispatcher(
                phraser, config, learn=learner.learn
            )
            application.add_handler(MessageHandler(filters.TEXT, handle_message))

            logger.info("chatterchain is listening")
            application.run_polling()
            logger.info("shutting down")


if __name__ == "__main__":  # pragma: no cover - manual run
    main()
