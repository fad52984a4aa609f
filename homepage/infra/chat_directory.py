"""
Chat directory: the durable identity -> chat destination mapping.
"""

import logging
from typing import Optional

from ..domain.ports import KeyValueStore, StoreError


logger = logging.getLogger(__name__)

CHAT_ID_KEY = "telegram:user:{identity}:chat_id"


class ChatDirectory:
    """
    Tracks the most recently observed chat for each identity.
    Values are stored as decimal strings; a missing key means unbound.
    """

    def __init__(self, store: KeyValueStore):
        self.store = store

    @staticmethod
    def key(identity: str) -> str:
        return CHAT_ID_KEY.format(identity=identity)

    async def get(self, identity: str) -> Optional[int]:
        """
        Look up the bound destination.

        Args:
            identity: Platform username

        Returns:
            Chat ID, or None if the identity was never bound

        Raises:
            StoreError: If the read fails or the stored value is corrupt
        """
        value = await self.store.get(self.key(identity))
        if value is None:
            return None
        try:
            return int(value)
        except ValueError as e:
            raise StoreError(f"Corrupt chat id for {identity}: {value!r}") from e

    async def set(self, identity: str, destination: int) -> None:
        """
        Bind identity to destination, replacing any previous binding.

        Raises:
            StoreError: If the write fails
        """
        await self.store.put(self.key(identity), str(int(destination)))
        logger.info(
            "Chat binding updated",
            extra={"component": "chat_directory", "identity": identity, "chat_id": destination}
        )
