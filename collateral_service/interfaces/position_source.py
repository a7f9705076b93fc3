"""Position source protocol — account holdings provider."""
from typing import Protocol, Sequence

from ..models import AccountPosition


class PositionSource(Protocol):
    """Abstract interface for fetching account holdings.

    Returns one entry per recognized account; unknown accounts may be omitted.
    """

    def get_positions(self, account_ids: Sequence[str]) -> list[AccountPosition]: ...
