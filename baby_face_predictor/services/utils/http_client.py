# baby_face_predictor/services/utils/http_client.py
import aiohttp
import structlog

from baby_face_predictor.data.settings import HttpConfig, settings

logger = structlog.get_logger(__name__)


class ProviderSession:
    """
    Lazily opened aiohttp session shared by every provider client.

    Opened on first use inside the running loop and reopened if something
    closed it; the application closes it on shutdown.
    """

    def __init__(self, config: HttpConfig | None = None) -> None:
        self._config = config or settings.http
        self._session: aiohttp.ClientSession | None = None

    @property
    def is_open(self) -> bool:
        return self._session is not None and not self._session.closed

    async def session(self) -> aiohttp.ClientSession:
        if not self.is_open:
            config = self._config
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(
                    total=None,
                    connect=config.connect_timeout_s,
                    sock_read=config.read_timeout_s,
                ),
                connector=aiohttp.TCPConnector(limit=config.connection_limit, ttl_dns_cache=60),
                headers={"User-Agent": config.user_agent},
                trust_env=True,
            )
            logger.debug("Opened provider HTTP session", limit=config.connection_limit)
        return self._session

    async def close(self) -> None:
        if self.is_open:
            await self._session.close()
            logger.debug("Closed provider HTTP session")
        self._session = None


http_client = ProviderSession()
