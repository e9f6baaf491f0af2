"""Wire envelope model - the ``{type, data}`` unit exchanged over the socket."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, ValidationError

from hub.errors import ProtocolError


class MessageType(str, Enum):
    """Known message type tags."""

    LIST_PLUGINS = "listPlugins"
    ADD_PLUGIN = "addPlugin"
    REMOVE_PLUGIN = "removePlugin"
    CONFIG_PLUGIN = "configPlugin"
    GET_STYLE = "getStyle"
    SET_STYLE = "setStyle"
    REMOVE_STYLE = "removeStyle"
    BROADCAST = "broadcast"
    ERROR = "error"  # outbound only

    @classmethod
    def from_tag(cls, tag: str) -> Union["MessageType", "UnknownType"]:
        """Map a raw tag to a known type, or wrap it as ``UnknownType``."""
        try:
            return cls(tag)
        except ValueError:
            return UnknownType(tag)


@dataclass(frozen=True)
class UnknownType:
    """A type tag this server does not recognise, kept verbatim."""

    tag: str


class Envelope(BaseModel):
    """Message envelope: ``{"type": <tag>, "data": <any, default null>}``."""

    model_config = ConfigDict(extra="ignore")

    type: str
    data: Any = None

    @property
    def kind(self) -> Union[MessageType, UnknownType]:
        return MessageType.from_tag(self.type)

    @classmethod
    def decode(cls, text: str) -> "Envelope":
        """Parse a text frame.

        Raises:
            ProtocolError: malformed JSON, or ``type`` missing / not a string
        """
        try:
            return cls.model_validate_json(text)
        except (ValidationError, ValueError) as e:
            raise ProtocolError("Failed to parse message.") from e

    @classmethod
    def of(cls, message_type: MessageType, data: Any = None) -> "Envelope":
        return cls(type=message_type.value, data=data)

    @classmethod
    def error(cls, message: str) -> "Envelope":
        return cls.of(MessageType.ERROR, message)

    def encode(self) -> str:
        return self.model_dump_json()


class Scope(str, Enum):
    """Who receives an operation's reply."""

    UNICAST = "unicast"      # the requesting connection only
    BROADCAST = "broadcast"  # every open connection, requester included


@dataclass(frozen=True)
class Outcome:
    """Result of a registry operation, routed by the dispatcher."""

    envelope: Envelope
    scope: Scope = Scope.UNICAST

    @classmethod
    def reply(cls, message_type: MessageType, data: Any = None) -> "Outcome":
        return cls(Envelope.of(message_type, data), Scope.UNICAST)

    @classmethod
    def publish(cls, message_type: MessageType, data: Any = None) -> "Outcome":
        return cls(Envelope.of(message_type, data), Scope.BROADCAST)
