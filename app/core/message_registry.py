"""
Bounded registry of outbound message ids per chat.

Used by /clear to delete what the bot itself has sent. The registry is an
injected instance (one per dispatcher), not module state.
"""
import logging
from collections import OrderedDict, deque
from typing import Deque, List

import config

logger = logging.getLogger(__name__)


class MessageRegistry:
    """
    chat_id -> последние message_id, отправленные ботом.

    Per chat only the newest max_per_chat ids are kept; when more than
    max_chats chats are tracked the least recently touched chat is dropped.
    """

    def __init__(
        self,
        max_per_chat: int = config.MESSAGE_REGISTRY_MAX_PER_CHAT,
        max_chats: int = config.MESSAGE_REGISTRY_MAX_CHATS,
    ):
        if max_per_chat <= 0 or max_chats <= 0:
            raise ValueError("registry bounds must be positive")
        self.max_per_chat = max_per_chat
        self.max_chats = max_chats
        self._chats: "OrderedDict[str, Deque[int]]" = OrderedDict()

    def __len__(self) -> int:
        return len(self._chats)

    def track(self, chat_id, message_id) -> None:
        if message_id is None:
            return
        key = str(chat_id)
        ids = self._chats.get(key)
        if ids is None:
            ids = deque(maxlen=self.max_per_chat)
            self._chats[key] = ids
        else:
            self._chats.move_to_end(key)
        if message_id not in ids:
            ids.append(int(message_id))

        while len(self._chats) > self.max_chats:
            evicted, _ = self._chats.popitem(last=False)
            logger.debug("MESSAGE_REGISTRY_EVICT chat_id=%s", evicted)

    def owned_ids(self, chat_id) -> List[int]:
        return list(self._chats.get(str(chat_id), ()))

    def forget(self, chat_id, message_id) -> None:
        ids = self._chats.get(str(chat_id))
        if ids is not None and message_id in ids:
            ids.remove(message_id)

    def pop_all(self, chat_id) -> List[int]:
        """Remove and return every tracked id for the chat, newest first."""
        ids = self._chats.pop(str(chat_id), None)
        if not ids:
            return []
        return sorted(ids, reverse=True)
