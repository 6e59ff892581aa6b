"""Chat commands and message dispatching.

The :class:`Dispatcher` knows nothing about the transport: it receives a
:class:`Message` and returns the replies to send back to the same chat.
Text that is not a command is learnt by the chat's chain.  Commands look
like ``/name[@botname] [arguments]``; each :class:`Action` validates its
arguments with a regular expression before its handler runs.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from config import Config
from phraser import ImpossibleHaikuError, Phraser
from store import User

logger = logging.getLogger(__name__)

COMMAND = re.compile(r"^/([^\s@]+)(?:@(\S+))?(?:\s+(.*))?", re.DOTALL)


@dataclass
class Message:
    chat_id: int
    text: str
    chat_type: str = "private"
    user: Optional[User] = None


Handler = Callable[["Dispatcher", Message, "re.Match[str]"], str]


@dataclass(frozen=True)
class Action:
    command: str
    handler: Handler
    description: str = ""
    arg_pattern: str = r".*"


class Dispatcher:
    """Routes chat messages to actions or to the phrase learner."""

    def __init__(
        self,
        phraser: Phraser,
        config: Optional[Config] = None,
        learn: Optional[Callable[[int, str], None]] = None,
        bot_username: Optional[str] = None,
        actions=None,
    ) -> None:
        self.phraser = phraser
        self.config = config or Config()
        self.learn = learn or phraser.store_phrase
        self.bot_username = bot_username
        self._actions: Dict[str, Action] = {}
        for action in ACTIONS if actions is None else actions:
            self.register(action)

    def register(self, action: Action) -> None:
        if action.command in self._actions:
            raise ValueError(
                f"There already exists an action registered for the command "
                f"'{action.command}'"
            )
        self._actions[action.command] = action

    @property
    def actions(self) -> List[Action]:
        return list(self._actions.values())

    def text(self, key: str) -> str:
        return self.config.locales.get(key, key)

    def handle(self, message: Message) -> List[str]:
        """Process *message* and return the replies for its chat."""
        if message.user is not None:
            self.phraser.store.add_user(message.chat_id, message.user)

        match = COMMAND.match(message.text)
        if not match:
            self.learn(message.chat_id, message.text)
            if self.config.listen_to_ayy_lmao:
                return ayy_lmao(message.text)
            return []

        command, recipient, args = match.group(1), match.group(2), match.group(3) or ""
        addressed = recipient is not None and recipient == self.bot_username
        if recipient and not addressed:
            return []
        action = self._actions.get(command.lower())
        if action is not None:
            return [self.execute(message, action, args)]
        # Unknown commands in groups are usually meant for another bot.
        if message.chat_type == "private" or addressed:
            logger.debug(f"Unknown command /{command} in chat {message.chat_id}")
            return [self.text("ERR_UNKNOWN_COMMAND")]
        return []

    def execute(self, message: Message, action: Action, args: str) -> str:
        arg_match = re.match(action.arg_pattern, args.strip(), re.DOTALL)
        if not arg_match:
            return self.text("ERR_MALFORMED_ARGUMENTS")
        logger.debug(f"Running /{action.command} in chat {message.chat_id}")
        return action.handler(self, message, arg_match)


def ayy_lmao(text: str) -> List[str]:
    """Replies to the classic chat calls."""
    replies = []
    if re.search(r"rip", text, re.IGNORECASE):
        replies.append("in pieces")
    if re.search(r"alien|ayy.*lmao|lmao.*ayy", text, re.IGNORECASE):
        replies.append("ayy lmao")
    else:
        match = re.search(r"ayy(y*)", text, re.IGNORECASE)
        if match:
            replies.append("lmao" + "o" * len(match.group(1)))
        match = re.search(r"lmao(o*)", text, re.IGNORECASE)
        if match:
            replies.append("ayy" + "y" * len(match.group(1)))
    return replies


def _start(dispatcher: Dispatcher, message: Message, args) -> str:
    return dispatcher.text("WELCOME_MESSAGE")


def _help(dispatcher: Dispatcher, message: Message, args) -> str:
    lines = [dispatcher.text("AVAILABLE_COMMANDS") + ":"]
    for action in dispatcher.actions:
        lines.append(f"/{action.command} - {action.description}")
    return "\n".join(lines)


def _message(dispatcher: Dispatcher, message: Message, args) -> str:
    return dispatcher.phraser.generate_phrase(message.chat_id)


def _extender(before: bool, after: bool) -> Handler:
    def handler(dispatcher: Dispatcher, message: Message, args) -> str:
        return dispatcher.phraser.extend_phrase(
            message.chat_id, args.group(1), before, after
        )

    return handler


def _haiku(dispatcher: Dispatcher, message: Message, args) -> str:
    try:
        verses = dispatcher.phraser.generate_haiku(message.chat_id, args.group(0))
    except ImpossibleHaikuError:
        logger.info(f"Could not build a haiku for chat {message.chat_id}")
        return dispatcher.text("ERR_IMPOSSIBLE_HAIKU")
    return "\n".join(verses)


def _lister(direction: str) -> Handler:
    def handler(dispatcher: Dispatcher, message: Message, args) -> str:
        query = getattr(dispatcher.phraser, f"transitions_{direction}")
        transitions = query(message.chat_id, args.group(1))
        if not transitions:
            return dispatcher.text("NO_TRANSITIONS")
        return "\n".join(f"{word}: {p:.2f}" for word, p in transitions)

    return handler


ACTIONS = (
    Action("start", _start, "Say hello"),
    Action("help", _help, "List the available commands"),
    Action("message", _message, "Generate a random phrase"),
    Action("beginwith", _extender(False, True), "Continue the given words", r"(.+)"),
    Action("endwith", _extender(True, False), "Lead up to the given words", r"(.+)"),
    Action("use", _extender(True, True), "Build a phrase around the given words", r"(.+)"),
    Action("haiku", _haiku, "Write a 5-7-5 haiku, optionally from some words"),
    Action("transitionsfrom", _lister("from"), "Words that may follow a word", r".*?(\S+)$"),
    Action("transitionsto", _lister("to"), "Words that may precede a word", r".*?(\S+)$"),
)
