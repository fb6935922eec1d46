"""Alert reconciliation — webhook decoding, decision logic, request handling."""


class ReceiverError(Exception):
    """Base receiver exception. Terminal for the current request."""


class MethodError(ReceiverError):
    """Webhook called with a method other than POST (-> HTTP 405)."""


class TransportError(ReceiverError):
    """Request body could not be read (-> HTTP 500)."""


class ReadError(TransportError):
    """The body stream failed before decoding started."""


class FormatError(ReceiverError):
    """Request body is not a webhook message (-> HTTP 400)."""


class DecodeError(FormatError):
    """Malformed JSON or a payload that does not match the message shape."""


class TrackerError(ReceiverError):
    """Issue tracker call failed or timed out (-> HTTP 500)."""


class ListError(TrackerError):
    """Listing the open issues failed."""
