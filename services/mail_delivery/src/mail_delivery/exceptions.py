"""Exception types raised inside the delivery pipeline."""


class TransportError(Exception):
    """Raised by a gateway when the underlying transport rejects a send.

    The raw transport exception is kept on ``cause`` (and as ``__cause__``)
    so the classifier can inspect it.
    """

    def __init__(self, cause: BaseException) -> None:
        self.cause = cause
        super().__init__(f"{type(cause).__name__}: {cause}")
