"""Talk to chatterchain from a terminal.

Every line read from standard input is handled as a message of one private
chat; replies are printed prefixed with ``>>>``.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Iterable, List, Optional, TextIO

from actions import Dispatcher, Message
from config import load_config
from phraser import Phraser
from store import MemoryStore, SqliteStore

logger = logging.getLogger(__name__)

BOT_USERNAME = "DummyBot"


def converse(
    dispatcher: Dispatcher, lines: Iterable[str], out: TextIO, chat_id: int = 1
) -> None:
    """Feed *lines* to *dispatcher* and write the replies to *out*."""
    for line in lines:
        text = line.strip()
        if not text:
            continue
        for reply in dispatcher.handle(Message(chat_id=chat_id, text=text)):
            out.write(f">>> {reply}\n")
        out.flush()


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--database", help="sqlite file to read and write")
    parser.add_argument(
        "--memory", action="store_true", help="keep transitions in memory only"
    )
    parser.add_argument("--chat-id", type=int, default=1)
    args = parser.parse_args(argv)

    config = load_config()
    logging.basicConfig(level=config.log_level)

    store = MemoryStore() if args.memory else SqliteStore(
        args.database or config.database_path
    )
    with store:
        phraser = Phraser(store, config.chain_properties(), config.haiku_attempts)
        dispatcher = Dispatcher(phraser, config, bot_username=BOT_USERNAME)
        logger.info("chatterchain console is listening")
        converse(dispatcher, sys.stdin, sys.stdout, args.chat_id)


if __name__ == "__main__":  # pragma: no cover - manual run
    main()
