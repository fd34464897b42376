"""Exception taxonomy for mudpane.

Only connection-level errors (BackendError and subclasses) cross the Session
boundary into the user-visible surface. Rendering failures are recovered
locally and never raise.
"""


class MudpaneError(Exception):
    """Base class for all mudpane errors."""


class BackendError(MudpaneError):
    """The backend connection failed or is unusable."""


class ConnectError(BackendError):
    """Connection establishment failed."""


class SendError(BackendError):
    """Outgoing input could not be handed to the backend."""


class PaletteError(MudpaneError, ValueError):
    """Palette configuration is malformed."""
