"""Process-wide wiring of the client components."""

import logging

from dappvotes.abi import load_abi
from dappvotes.cache.memory import MemoryCacheBackend
from dappvotes.cache.redis import RedisCacheBackend
from dappvotes.config import Settings, get_settings
from dappvotes.core.cache import CacheBackend
from dappvotes.core.provider import ChainProvider
from dappvotes.providers.resolver import ProviderResolver
from dappvotes.providers.wallet import WalletBridge
from dappvotes.providers.web3_provider import Web3ChainProvider
from dappvotes.services.cache_store import CacheStore
from dappvotes.services.error_reporter import ErrorReporter, Notifier
from dappvotes.services.gateway import ContractGateway
from dappvotes.services.history_scanner import TransactionHistoryScanner
from dappvotes.services.retry import RetryExecutor
from dappvotes.services.throttle import ThrottleGuard
from dappvotes.services.voting import VotingService

logger = logging.getLogger(__name__)

_cache_instance: CacheBackend | None = None
_throttle_instance: ThrottleGuard | None = None
_wallet_instance: WalletBridge | None = None
_resolver_instance: ProviderResolver | None = None
_reporter_instance: ErrorReporter | None = None
_voting_service: VotingService | None = None


def get_cache_backend(settings: Settings | None = None) -> CacheBackend:
    """Get or create cache backend instance."""
    global _cache_instance
    settings = settings or get_settings()

    if _cache_instance is None:
        if settings.cache_backend == "redis":
            _cache_instance = RedisCacheBackend(redis_url=settings.redis_url)
        else:
            _cache_instance = MemoryCacheBackend()

    return _cache_instance


def get_throttle_guard(settings: Settings | None = None) -> ThrottleGuard:
    """Get or create the shared throttle guard."""
    global _throttle_instance
    settings = settings or get_settings()

    if _throttle_instance is None:
        _throttle_instance = ThrottleGuard(default_interval_ms=settings.throttle_interval_ms)

    return _throttle_instance


def get_error_reporter(
    settings: Settings | None = None,
    notifier: Notifier | None = None,
) -> ErrorReporter:
    """
    Get or create the error reporter.

    A notifier passed after the reporter exists is attached to it.
    """
    global _reporter_instance
    settings = settings or get_settings()

    if _reporter_instance is None:
        _reporter_instance = ErrorReporter(
            notifier=notifier,
            development=settings.is_development,
        )
    elif notifier is not None:
        _reporter_instance.attach_notifier(notifier)

    return _reporter_instance


def get_wallet_bridge(settings: Settings | None = None) -> WalletBridge | None:
    """Get or create the wallet bridge. None unless interactive with a wallet URL."""
    global _wallet_instance
    settings = settings or get_settings()

    if _wallet_instance is None and settings.is_interactive and settings.wallet_url:
        _wallet_instance = WalletBridge(settings.wallet_url, timeout=settings.request_timeout)

    return _wallet_instance


def get_provider_resolver(settings: Settings | None = None) -> ProviderResolver:
    """Get or create the provider resolver."""
    global _resolver_instance
    settings = settings or get_settings()

    if _resolver_instance is None:

        def provider_factory(url: str) -> ChainProvider:
            return Web3ChainProvider(url, timeout=settings.request_timeout)

        _resolver_instance = ProviderResolver(
            provider_factory=provider_factory,
            reporter=get_error_reporter(settings),
            rpc_url=settings.rpc_url,
            execution_mode=settings.execution_mode,
            wallet=get_wallet_bridge(settings),
        )

    return _resolver_instance


def get_voting_service(
    settings: Settings | None = None,
    notifier: Notifier | None = None,
) -> VotingService:
    """Get or create the voting service and everything it depends on."""
    global _voting_service
    settings = settings or get_settings()

    reporter = get_error_reporter(settings, notifier)

    if _voting_service is None:
        abi = load_abi(settings.contract_abi_path or None)
        resolver = get_provider_resolver(settings)

        _voting_service = VotingService(
            gateway=ContractGateway(
                resolver=resolver,
                contract_address=settings.contract_address,
                abi=abi,
                execution_mode=settings.execution_mode,
            ),
            cache=CacheStore(
                get_cache_backend(settings),
                freshness_ms=settings.cache_freshness_ms,
            ),
            throttle=get_throttle_guard(settings),
            retry=RetryExecutor(
                max_attempts=settings.retry_attempts,
                delay_ms=settings.retry_delay_ms,
            ),
            reporter=reporter,
            scanner=TransactionHistoryScanner(
                resolver=resolver,
                contract_address=settings.contract_address,
                abi=abi,
            ),
            wallet=get_wallet_bridge(settings),
            throttle_interval_ms=settings.throttle_interval_ms,
            settle_delay_ms=settings.settle_delay_ms,
        )
        logger.info(
            f"[Dependencies] {settings.app_name} v{settings.app_version} "
            f"mode={settings.execution_mode.value} cache={settings.cache_backend}"
        )

    return _voting_service


async def cleanup_dependencies() -> None:
    """Cleanup dependency instances on shutdown."""
    global _cache_instance, _throttle_instance, _wallet_instance
    global _resolver_instance, _reporter_instance, _voting_service

    if _cache_instance:
        await _cache_instance.close()
        _cache_instance = None

    if _resolver_instance:
        await _resolver_instance.close()
        _resolver_instance = None

    if _wallet_instance:
        await _wallet_instance.close()
        _wallet_instance = None

    _throttle_instance = None
    _reporter_instance = None
    _voting_service = None
