class BridgeError(Exception):
    """Base class for errors raised by the bridge library."""


class MissingCredentialsError(BridgeError, ValueError):
    pass


class AuthenticationError(BridgeError, RuntimeError):
    pass


class BrandNotFoundError(BridgeError, LookupError):
    def __init__(self, bid: str):
        super().__init__(f"Brand not found in state store or file store for bid {bid}")
        self.bid = bid


class EventValidationError(BridgeError, ValueError):
    pass


class EventPublishError(BridgeError, RuntimeError):
    pass


class AemRequestError(BridgeError, RuntimeError):
    pass


class ActionInvocationError(BridgeError, RuntimeError):
    pass
