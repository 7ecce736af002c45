"""
Resolve the contract ABI: local cache first, then the block explorer.
"""

import logging
from pathlib import Path

from src.data.io import read_abi_file, write_abi_file
from src.venues.arbiscan_client import ArbiscanClient

logger = logging.getLogger(__name__)


def resolve_contract_abi(
    address: str,
    cache_path: Path | str,
    client: ArbiscanClient,
    refresh: bool = False,
) -> list[dict]:
    """
    Return the contract ABI, fetching and caching it when needed.

    **Workflow**:
      1. If the cache file exists (and refresh is False), load and return it.
         A corrupt cache file is logged and ignored.
      2. Otherwise fetch the ABI from Arbiscan.
      3. Write it to the cache file and return it. A failed cache write is
         logged; the fetched ABI is still returned.

    Args:
        address: Contract address.
        cache_path: ABI cache file (contract-abi.json by default).
        client: Arbiscan client used on a cache miss.
        refresh: Skip the cache and always fetch.

    Returns:
        ABI as a list of entry dicts.

    Raises:
        ArbiscanClientError: If the fetch fails (see ArbiscanClient).
    """
    cache_path = Path(cache_path)

    if cache_path.exists() and not refresh:
        try:
            abi = read_abi_file(cache_path)
            logger.info("Loaded contract ABI from %s", cache_path)
            return abi
        except ValueError as e:
            logger.warning("Error loading ABI file, will fetch from Arbiscan: %s", e)

    logger.info("Fetching contract ABI for %s from Arbiscan", address)
    abi = client.get_contract_abi(address)
    try:
        write_abi_file(cache_path, abi)
    except OSError as e:
        logger.warning("Could not cache contract ABI, continuing without cache: %s", e)
        return abi

    logger.info("Contract ABI cached to %s", cache_path)
    return abi


def load_manual_abi(source_path: Path | str, cache_path: Path | str) -> list[dict]:
    """
    Load a user-supplied ABI file and copy it into the cache.

    Raises:
        FileNotFoundError: If source_path doesn't exist.
        ValueError: If the file is not a JSON ABI array.
        OSError: If the cache can't be written.
    """
    abi = read_abi_file(source_path)
    write_abi_file(cache_path, abi)
    logger.info("ABI loaded from %s and cached to %s", source_path, cache_path)
    return abi
