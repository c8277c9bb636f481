"""
Writes discovered product URLs to one text file per storefront.
"""

import re
from collections.abc import Iterable
from pathlib import Path

from product_scout.utils.logging import get_logger

logger = get_logger(__name__)

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]")


def output_path_for(domain: str, output_dir: Path | str = ".") -> Path:
    """
    Build the output file path for a domain.

    ``shop.example.com`` becomes ``<output_dir>/shop.example.com.txt``;
    characters that are unsafe in filenames (such as a port's ``:``)
    are replaced with ``_``.
    """
    safe_name = _UNSAFE_FILENAME_CHARS.sub("_", domain) or "unknown"
    return Path(output_dir) / f"{safe_name}.txt"


def write_product_urls(
    domain: str,
    urls: Iterable[str],
    output_dir: Path | str = ".",
) -> Path:
    """
    Write product URLs, one per line, to the domain's output file.

    Args:
        domain: Storefront domain the URLs belong to
        urls: Product URLs, in any order
        output_dir: Directory to write into; created if missing

    Returns:
        Path of the written file
    """
    path = output_path_for(domain, output_dir)
    path.parent.mkdir(parents=True, exist_ok=True)

    lines = list(urls)
    path.write_text("\n".join(lines), encoding="utf-8")

    logger.info(f"Product links saved to {path} ({len(lines)} URLs)")
    return path
