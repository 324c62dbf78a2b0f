"""
Connection check for the RPC node, the DappVotes contract and the cache.
Run: python scripts/verify_connection.py
"""

import asyncio
import sys

from dappvotes.cache.redis import RedisCacheBackend
from dappvotes.config import get_settings
from dappvotes.logging_config import configure_logging
from dappvotes.providers.web3_provider import Web3ChainProvider
from dappvotes.services.gateway import is_empty_code


async def verify_rpc() -> bool:
    """Verify the node answers and report its head."""
    settings = get_settings()
    print("\n🔍 Testing RPC node...")
    print(f"   URL: {settings.rpc_url}")

    provider = Web3ChainProvider(settings.rpc_url, timeout=10)
    try:
        block = await provider.get_block_number()
        print(f"   ✅ RPC: connected, latest block {block}")
        return True
    except Exception as e:
        print(f"   ❌ RPC: ERROR - {e}")
        return False
    finally:
        await provider.close()


async def verify_contract() -> bool:
    """Verify bytecode is deployed at the configured address."""
    settings = get_settings()
    print("\n🔍 Checking contract deployment...")
    print(f"   Address: {settings.contract_address}")

    provider = Web3ChainProvider(settings.rpc_url, timeout=10)
    try:
        code = await provider.get_code(settings.contract_address)
        if is_empty_code(code):
            print("   ❌ Contract: no bytecode at address")
            return False
        print(f"   ✅ Contract: {len(code)} bytes of bytecode")
        return True
    except Exception as e:
        print(f"   ❌ Contract: ERROR - {e}")
        return False
    finally:
        await provider.close()


async def verify_cache() -> bool:
    """Verify the Redis cache when it is the configured backend."""
    settings = get_settings()
    print("\n🔍 Testing cache backend...")
    print(f"   Backend: {settings.cache_backend}")

    if settings.cache_backend != "redis":
        print("   ✅ Memory cache: nothing to check")
        return True

    cache = RedisCacheBackend(redis_url=settings.redis_url)
    try:
        if not await cache.ping():
            print("   ❌ Redis: ping failed")
            return False
        print("   ✅ Redis: connection OK")

        key = cache.make_key("verify_connection")
        await cache.set(key, {"ok": True})
        value = await cache.get(key)
        await cache.delete(key)
        if value == {"ok": True}:
            print("   ✅ Redis: read/write OK")
            return True
        print("   ❌ Redis: read/write FAILED")
        return False
    finally:
        await cache.close()


async def main() -> int:
    """Run all verification checks."""
    configure_logging()
    print("=" * 60)
    print("🚀 DappVotes - Connection check")
    print("=" * 60)

    results = {
        "rpc": await verify_rpc(),
        "contract": await verify_contract(),
        "cache": await verify_cache(),
    }

    print("\n" + "=" * 60)
    print("📊 SUMMARY")
    print("=" * 60)

    for service, ok in results.items():
        status = "✅ OK" if ok else "❌ FAILED"
        print(f"{service.upper():15} {status}")

    if all(results.values()):
        print("\n🎉 Everything is reachable!")
        return 0

    print("\n⚠️  Some checks failed. Review your settings.")
    if not results["rpc"]:
        print("   - RPC: check DAPPVOTES_RPC_URL (or NEXT_APP_RPC_URL) and that the node is running")
    if not results["contract"]:
        print("   - Contract: deploy DappVotes and set DAPPVOTES_CONTRACT_ADDRESS")
    if not results["cache"]:
        print("   - Redis: check DAPPVOTES_REDIS_URL")
    return 1


if __name__ == "__main__":
    exit_code = asyncio.run(main())
    sys.exit(exit_code)
