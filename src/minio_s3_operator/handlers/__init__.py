"""Handler modules for CRD resources."""

# Import handlers to register them - all handlers register themselves via @kopf decorators
from . import bucket  # noqa: F401
from . import canned_policy  # noqa: F401
from . import group  # noqa: F401
from . import user  # noqa: F401
