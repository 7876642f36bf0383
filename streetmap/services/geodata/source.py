from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Optional

from streetmap.services.geodata.errors import ServiceUnavailable

RetryHook = Callable[[int, ServiceUnavailable], None]


class GeodataSource(ABC):
    """Geodata query service abstract interface"""

    @abstractmethod
    async def fetch(self, query: str, endpoints: Optional[List[str]] = None) -> Dict:
        """Run a query against the endpoints in order; the first success wins.

        Raises:
            ServiceUnavailable: every endpoint failed
        """
        pass

    @abstractmethod
    async def fetch_with_retry(
        self,
        query: str,
        *,
        attempts: Optional[int] = None,
        base_delay: Optional[float] = None,
        on_retry: Optional[RetryHook] = None,
    ) -> Dict:
        """Repeat ``fetch`` over the whole endpoint list with linear backoff.

        Args:
            attempts: Total passes over the endpoint list
            base_delay: Attempt n waits n * base_delay before the next pass
            on_retry: Called with (failed attempt number, error) before each wait
        """
        pass
