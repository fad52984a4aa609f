"""
Notification agent for the homepage service.
Maintains chat bindings from inbound webhook events and sends owner-only replies.
"""

import logging
from typing import Any, Dict, Optional, Union

from pydantic import ValidationError

from ..domain.ports import MessageGateway, ProcessingError
from ..domain.schema import OutboundMessage, TelegramUpdate
from ..infra.chat_directory import ChatDirectory


logger = logging.getLogger(__name__)

REFUSAL_MESSAGE = "Sorry, I only respond to my owner right now."
OWNER_GREETING = "Hello owner!"


class NotificationAgent:
    """
    Authorizes and dispatches outbound messages.

    Inbound pipeline: identify sender → refresh binding → authorization gate → reply.
    """

    def __init__(
        self,
        directory: ChatDirectory,
        gateway: MessageGateway,
        owner: str
    ):
        """
        Initialize the agent.

        Args:
            directory: Chat directory holding identity bindings
            gateway: Outbound messaging gateway
            owner: The single identity that receives informative replies
        """
        self.directory = directory
        self.gateway = gateway
        self.owner = owner

    async def resolve_destination(self, identity: str) -> Optional[int]:
        """
        Return the chat currently bound to identity, if any.

        Raises:
            StoreError: If the directory read fails
        """
        return await self.directory.get(identity)

    async def bind_destination(self, identity: str, destination: int) -> None:
        """
        Bind identity to destination. Repeating the same binding is a no-op.

        Raises:
            StoreError: If the directory write fails
        """
        await self.directory.set(identity, destination)

    async def send(self, destination: int, text: str) -> OutboundMessage:
        """
        Dispatch a message once, without retry.

        Args:
            destination: Chat ID
            text: Message text

        Returns:
            The dispatched message

        Raises:
            DeliveryError: If the gateway fails or rejects the message
        """
        message = OutboundMessage(chat_id=destination, text=text)
        await self.gateway.send_message(message)
        return message

    async def handle_inbound(
        self,
        event: Union[TelegramUpdate, Dict[str, Any]]
    ) -> Optional[OutboundMessage]:
        """
        Process one inbound webhook event.

        Events without a sender username are ignored. Otherwise the sender's
        binding is refreshed before the authorization check, so chat changes
        are recorded for every identity, then the owner gets a greeting and
        everybody else a fixed refusal.

        Args:
            event: Parsed update or raw webhook payload

        Returns:
            The reply that was sent, or None if the event was ignored

        Raises:
            ProcessingError: If the payload is malformed
            StoreError: If the binding cannot be read or written
            DeliveryError: If the reply cannot be delivered
        """
        update = event if isinstance(event, TelegramUpdate) else self.parse_update(event)

        username = update.sender_username
        if username is None:
            logger.debug(
                "Ignoring update without sender username",
                extra={"component": "agent", "update_id": update.update_id}
            )
            return None

        chat_id = update.message.chat.id

        current = await self.resolve_destination(username)
        if current != chat_id:
            await self.bind_destination(username, chat_id)

        if username != self.owner:
            logger.info(
                "Refusing non-owner message",
                extra={"component": "agent", "identity": username, "chat_id": chat_id}
            )
            return await self.send(chat_id, REFUSAL_MESSAGE)

        return await self.send(chat_id, OWNER_GREETING)

    async def notify_owner(self, text: str) -> bool:
        """
        Send text to the owner's bound chat.

        The owner must have messaged the bot at least once; until then no
        destination is known and the notification is skipped.

        Returns:
            True if sent, False if the owner has no binding

        Raises:
            StoreError: If the directory read fails
            DeliveryError: If the gateway fails
        """
        chat_id = await self.resolve_destination(self.owner)
        if chat_id is None:
            logger.warning(
                "Missing chat ID for owner, notification dropped",
                extra={"component": "agent", "identity": self.owner}
            )
            return False

        await self.send(chat_id, text)
        return True

    @staticmethod
    def parse_update(payload: Any) -> TelegramUpdate:
        """
        Validate a raw webhook payload.

        Raises:
            ProcessingError: If the payload does not match the update schema
        """
        try:
            return TelegramUpdate.model_validate(payload)
        except ValidationError as e:
            raise ProcessingError(f"Malformed update: {e.error_count()} validation errors") from e
