from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, conint

# Telegram ids fit in a signed 64-bit integer
Int64 = conint(strict=True, ge=-(2**63), le=2**63 - 1)


class Sender(BaseModel):
    """
    Telegram user who sent a message.
    """

    model_config = ConfigDict(strict=True)

    id: Int64 = Field(0, description="Unique identifier of the user")
    first_name: str = Field("", description="First name of the user")
    username: Optional[str] = Field(None, description="Username of the user")


class Chat(BaseModel):
    model_config = ConfigDict(strict=True)

    id: Int64 = Field(0, description="Chat identifier")
    # private, group, supergroup, channel
    type: str = Field("", description="Chat type")


class Message(BaseModel):
    """
    Incoming chat message. Only the fields the webhook reads are modelled,
    anything else in the payload is ignored. Absent fields take zero values.
    """

    model_config = ConfigDict(strict=True, populate_by_name=True)

    message_id: Int64 = Field(0, description="Unique identifier of the message")
    from_: Optional[Sender] = Field(None, alias="from", description="Sender")
    chat: Chat = Field(
        default_factory=lambda: Chat(id=0, type=""),
        description="Chat the message belongs to",
    )
    text: Optional[str] = Field(None, description="Text content of the message")


class Update(BaseModel):
    """
    Model representing an incoming webhook update.
    """

    model_config = ConfigDict(strict=True)

    update_id: Int64 = Field(0, description="Update identifier")
    message: Optional[Message] = Field(None, description="New incoming message")

    def actionable_message(self) -> Optional[Message]:
        """Message to reply to, or None for non-text updates"""
        if self.message is None or not self.message.text:
            return None
        return self.message


_update_or_null = TypeAdapter(Optional[Update])


def decode_update(raw: bytes) -> Update:
    """
    Decode a webhook request body.

    A JSON `null` body decodes to an empty update.

    Raises:
        pydantic.ValidationError: malformed JSON or a schema mismatch.
    """
    update = _update_or_null.validate_json(raw)
    if update is None:
        return Update()
    return update


class Reply(BaseModel):
    """
    Model for replies sent by the bot.
    """

    chat_id: int = Field(..., description="Chat identifier to send the reply to")
    text: str = Field(..., description="Text content of the reply message")
