"""Pydantic schemas for request/response validation."""

from .booking import *  # noqa: F403
from .cart import *  # noqa: F403
from .common import *  # noqa: F403
from .equipment import *  # noqa: F403
from .health import *  # noqa: F403
from .inventory import *  # noqa: F403
from .maintenance import *  # noqa: F403
from .notification import *  # noqa: F403
from .payment import *  # noqa: F403
from .stock_order import *  # noqa: F403
from .supplier import *  # noqa: F403
from .tour import *  # noqa: F403
from .user import *  # noqa: F403
