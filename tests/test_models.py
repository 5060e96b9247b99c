"""Unit tests for model classes."""

from chatserver.models.client import Client
from chatserver.models.command import Command
from chatserver.models.message import (
    ErrorMessage,
    MessageType,
    NickChange,
    NickList,
    Notice,
    UserConnected,
    UserDisconnected,
    UserSays,
)


def test_command_creation():
    """Test Command model creation and methods."""
    command = Command("nick", "alice")
    assert command.name == "nick"
    assert command.value == "alice"

    assert Command.from_dict({"command": "nick", "value": "alice"}) == command


def test_command_empty_value_is_absent():
    """Test that an empty argument is normalised to None."""
    assert Command("say", "").value is None
    assert Command.from_dict({"command": "who"}).value is None


def test_message_wire_format():
    """Test every outbound message serialises to its tagged record."""
    assert UserConnected("a").to_dict() == {"type": "user-connected", "nick": "a"}
    assert UserDisconnected("a").to_dict() == {"type": "user-disconnected", "nick": "a"}
    assert UserSays("a", "hi <b>").to_dict() == {"type": "user-says", "nick": "a", "text": "hi <b>"}
    assert NickChange("a", "b").to_dict() == {"type": "nick-change", "oldNick": "a", "newNick": "b"}
    assert NickList(["a", "b"]).to_dict() == {"type": "nick-list", "list": ["a", "b"]}
    assert ErrorMessage("bad").to_dict() == {"type": "error", "text": "bad"}
    assert Notice("bye").to_dict() == {"type": "notice", "text": "bye"}


def test_message_types_are_distinct():
    """Test each message class carries its own discriminator."""
    assert UserSays("a", "x").type is MessageType.USER_SAYS
    assert ErrorMessage("x") != Notice("x")
    assert Notice.shutdown() == Notice("Shutting down server")


def test_client_model(make_channel):
    """Test Client model functionality."""
    channel = make_channel()
    client = Client(id="abc", nick="abc", channel=channel)

    assert client.id == "abc"
    assert client.nick == "abc"
    assert repr(client) == "Client(id='abc', nick='abc')"

    client.send(Notice("hello"))
    assert channel.messages == [Notice("hello")]
