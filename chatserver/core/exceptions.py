"""Custom exceptions for the chat engine."""


class ChatError(Exception):
    """Base exception for chat-related errors."""
    pass


class ProtocolError(ChatError):
    """Exception raised when a client sends something the server cannot interpret."""
    pass


class MalformedMessageError(ProtocolError):
    """Exception raised for payloads that are neither text nor a command record."""

    def __init__(self, payload):
        super().__init__(f"Malformed message: '{payload}'")
        self.payload = payload


class UnknownCommandError(ProtocolError):
    """Exception raised when no handler is registered for a command name."""

    def __init__(self, name: str):
        super().__init__(f"Unknown command '{name}'")
        self.name = name


class ValidationError(ChatError):
    """Exception raised when a command's argument is rejected."""
    pass


class NickInUseError(ValidationError):
    """Exception raised when a nick already belongs to another client."""

    def __init__(self, nick: str):
        super().__init__(f"The nick '{nick}' is already taken")
        self.nick = nick


class StaleClientError(ChatError):
    """Exception raised when a client id is no longer registered."""
    pass


class ChannelClosedError(ChatError):
    """Exception raised when sending on a channel that is already closed."""
    pass


class SessionClosedError(ChatError):
    """Exception raised when connecting to a session manager that has shut down."""
    pass
