"""Process-wide cache of authenticated clients, one per region."""
import logging
import threading
from concurrent.futures import Future
from typing import Callable, Dict, Optional

import boto3
from botocore.config import Config as BotocoreConfig

from awssweep.core.config import Config


class RegionalClient:
    """A boto3 session bound to one region, plus the caller's account ID.

    Service clients are created on first use and then reused; botocore
    clients are safe to share between threads.
    """

    def __init__(self, session: boto3.session.Session, region: str, account_id: Optional[str] = None,
                 botocore_config: Optional[BotocoreConfig] = None):
        self.session = session
        self.region = region
        self.account_id = account_id
        self.botocore_config = botocore_config
        self._clients = {}
        self._lock = threading.Lock()

    def client(self, service_name: str):
        with self._lock:
            client = self._clients.get(service_name)
            if client is None:
                client = self.session.client(service_name, region_name=self.region, config=self.botocore_config)
                self._clients[service_name] = client
            return client

    def __repr__(self):
        return f"RegionalClient(region={self.region!r}, account_id={self.account_id!r})"


def create_regional_client(region: str, config: Optional[Config] = None) -> RegionalClient:
    """Create a session for the region and verify its credentials."""
    config = config or Config()
    botocore_config = BotocoreConfig(
        max_pool_connections=config.max_pool_connections,
        retries={'mode': config.retry_mode, 'total_max_attempts': config.retry_max_attempts},
    )
    session = boto3.session.Session(profile_name=config.profile, region_name=region)
    sts = session.client('sts', region_name=region, config=botocore_config)
    account_id = sts.get_caller_identity()['Account']
    logging.info(f"[{region}] Authenticated as account {account_id}", extra={'region': region})
    return RegionalClient(session, region, account_id, botocore_config)


class ClientCache:
    """Lazily creates and caches one RegionalClient per region.

    Concurrent first requests for a region share a single creation attempt
    and all observe its result, including its exception. Failed creations
    are not cached, so a later call tries again.
    """

    def __init__(self, factory: Optional[Callable[[str], RegionalClient]] = None, config: Optional[Config] = None):
        self._config = config
        self._factory = factory or (lambda region: create_regional_client(region, self._config))
        self._entries: Dict[str, Future] = {}
        self._lock = threading.Lock()

    def get(self, region: str) -> RegionalClient:
        with self._lock:
            future = self._entries.get(region)
            creator = future is None
            if creator:
                future = Future()
                self._entries[region] = future

        if creator:
            try:
                future.set_result(self._factory(region))
            except BaseException as e:
                with self._lock:
                    if self._entries.get(region) is future:
                        del self._entries[region]
                future.set_exception(e)
                logging.error(f"[{region}] Error creating client: {e}", extra={'region': region})

        return future.result()

    def __contains__(self, region: str) -> bool:
        with self._lock:
            future = self._entries.get(region)
        return future is not None and future.done() and future.exception() is None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()


_SHARED_CACHE: Optional[ClientCache] = None
_SHARED_LOCK = threading.Lock()


def shared_client_cache(config: Optional[Config] = None) -> ClientCache:
    """Return the process-wide client cache, creating it on first use."""
    global _SHARED_CACHE
    with _SHARED_LOCK:
        if _SHARED_CACHE is None:
            _SHARED_CACHE = ClientCache(config=config)
        return _SHARED_CACHE
