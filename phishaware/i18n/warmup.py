"""
Cache warming for translations.

Pre-translates the dashboard's static strings (built-in UI strings plus
YAML string catalogs) so the first user to switch language never waits on
a cold cache.

Run on:
- Deploy (recommended, with --save so the API loads the snapshot)
- Application startup (optional, async)

Usage:
    # Warm priority languages
    await warm_translation_cache()

    # Warm specific languages
    await warm_translation_cache(languages=["ur"])

    # CLI
    python -m phishaware.i18n.warmup -l ur --save data/translations.json
"""

from __future__ import annotations

import argparse
import asyncio
from pathlib import Path
from typing import Any

import yaml

from phishaware.config import get_settings
from phishaware.i18n.client import BatchTranslateClient
from phishaware.i18n.context import get_context
from phishaware.i18n.languages import (
    Language,
    WARM_UP_LANGUAGES,
    get_language_name,
    normalize_language_code,
)


# =============================================================================
# Content Loaders
# =============================================================================


def _collect_strings(node: Any, out: list[str]) -> None:
    if isinstance(node, str):
        out.append(node)
    elif isinstance(node, list):
        for item in node:
            _collect_strings(item, out)
    elif isinstance(node, dict):
        for value in node.values():
            _collect_strings(value, out)


def load_string_catalogs(catalog_dir: str = "config/strings") -> list[str]:
    """
    Load UI strings from YAML catalogs.

    A catalog has a `strings` key holding a list, or a mapping of section
    name to list. Other top-level keys (page, description) are metadata.
    """
    strings: list[str] = []
    catalog_path = Path(catalog_dir)

    if not catalog_path.exists():
        print(f"⚠️  String catalog directory not found: {catalog_dir}")
        return strings

    for yaml_file in sorted([*catalog_path.glob("*.yaml"), *catalog_path.glob("*.yml")]):
        try:
            with open(yaml_file, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            print(f"  ⚠️  Error loading {yaml_file}: {e}")
            continue

        if isinstance(data, dict) and "strings" in data:
            _collect_strings(data["strings"], strings)
        elif isinstance(data, list):
            _collect_strings(data, strings)

    return [s for s in strings if s and s.strip()]


# Strings shared by every dashboard page
UI_STRINGS = [
    # Navigation
    "Dashboard",
    "Simulations",
    "Email Phishing",
    "WhatsApp Phishing",
    "Voice Phishing",
    "Incident Reporting",
    "Training Modules",
    "Leaderboards",
    "Certificates",
    "Organization Management",

    # Channels
    "Email",
    "WhatsApp",
    "Voice",
    "Both Channels",

    # Campaign status
    "Draft",
    "Scheduled",
    "Running",
    "Completed",
    "Paused",
    "Cancelled",

    # Actions
    "Create Campaign",
    "View Details",
    "Start",
    "Pause",
    "Resume",
    "Cancel",
    "Delete",
    "Submit",
    "Close",

    # Engagement
    "Opened",
    "Clicked",
    "Credentials Submitted",
    "Reported",
    "Learning Score",

    # Status
    "Loading...",
    "Submitting...",
    "No data available",

    # Errors
    "Authentication required. Please log in again.",
    "Something went wrong",
    "Please try again",
]


# =============================================================================
# Cache Warming
# =============================================================================


def _unique(texts: list[str]) -> list[str]:
    return list(dict.fromkeys(t for t in texts if t and t.strip()))


async def warm_translation_cache(
    languages: list[str | Language] | None = None,
    include_catalogs: bool = True,
    include_ui: bool = True,
    catalog_dir: str = "config/strings",
    batch_size: int = 50,
    client: BatchTranslateClient | None = None,
    verbose: bool = True,
) -> dict[str, Any]:
    """
    Pre-warm translation cache.

    Args:
        languages: Languages to warm (defaults to WARM_UP_LANGUAGES)
        include_catalogs: Include YAML string catalogs
        include_ui: Include built-in UI strings
        catalog_dir: Path to string catalog YAML files
        batch_size: Texts per request
        client: Batch client (defaults to the process-wide one)
        verbose: Print progress

    Returns:
        Stats dict with counts
    """
    if languages is None:
        languages = WARM_UP_LANGUAGES

    client = client or get_context().client
    lang_codes = [
        normalize_language_code(lang) for lang in languages
        if not client.is_source(normalize_language_code(lang))
    ]

    if verbose:
        print("=" * 60)
        print("🔥 TRANSLATION CACHE WARM-UP")
        print("=" * 60)
        print(f"\nTarget languages: {', '.join(lang_codes) or '(none)'}")

    all_texts: list[str] = []

    if include_catalogs:
        catalog_strings = load_string_catalogs(catalog_dir)
        all_texts.extend(catalog_strings)
        if verbose:
            print(f"\n📚 Loaded {len(catalog_strings)} catalog strings")

    if include_ui:
        all_texts.extend(UI_STRINGS)
        if verbose:
            print(f"🖥️  Added {len(UI_STRINGS)} UI strings")

    all_texts = _unique(all_texts)

    if verbose:
        print(f"\n📊 Total unique texts: {len(all_texts)}")

    stats = {
        "languages": len(lang_codes),
        "texts": len(all_texts),
        "translations": 0,
        "cached": 0,
        "errors": 0,
    }

    for lang in lang_codes:
        if verbose:
            print(f"\n🌍 Warming {get_language_name(lang)} ({lang})...")

        for i in range(0, len(all_texts), batch_size):
            batch = all_texts[i:i + batch_size]
            uncached = [text for text in batch if not client.is_cached(text, lang)]
            stats["cached"] += len(batch) - len(uncached)

            if uncached:
                failures = client.failure_count
                await client.translate_batch(uncached, lang)
                if client.failure_count > failures:
                    stats["errors"] += 1
                stats["translations"] += sum(
                    1 for text in uncached if client.is_cached(text, lang)
                )

            if verbose:
                progress = min(i + batch_size, len(all_texts))
                print(f"   {progress}/{len(all_texts)} texts", end="\r")

        if verbose:
            print(f"   ✓ {lang} complete")

    if verbose:
        print("\n" + "=" * 60)
        print("✅ WARM-UP COMPLETE")
        print("=" * 60)
        print(f"   Already cached: {stats['cached']}")
        print(f"   New translations: {stats['translations']}")
        print(f"   Failed batches: {stats['errors']}")

    return stats


async def warm_single_language(
    language: str | Language,
    texts: list[str] | None = None,
    client: BatchTranslateClient | None = None,
    verbose: bool = True,
) -> int:
    """
    Warm cache for a single language.

    Useful when a language is selected for the first time.

    Returns:
        Number of new translations cached
    """
    lang = normalize_language_code(language)
    client = client or get_context().client

    if texts is None:
        texts = [*load_string_catalogs(), *UI_STRINGS]
    texts = _unique(texts)

    uncached = [text for text in texts if not client.is_cached(text, lang)]

    if verbose:
        print(f"🔥 Warming {get_language_name(lang)}: {len(uncached)}/{len(texts)} texts...")

    if uncached:
        await client.translate_batch(uncached, lang)

    count = sum(1 for text in uncached if client.is_cached(text, lang))
    if verbose:
        print(f"   ✓ Translated {count} texts ({len(texts) - len(uncached)} already cached)")
    return count


# =============================================================================
# CLI Entry Point
# =============================================================================


def main(argv: list[str] | None = None) -> dict[str, Any]:
    """Run cache warm-up from command line."""
    parser = argparse.ArgumentParser(
        description="Warm translation cache for priority languages"
    )
    parser.add_argument(
        "--languages", "-l",
        nargs="+",
        help="Specific languages to warm (default: priority languages)"
    )
    parser.add_argument(
        "--catalog-dir",
        default="config/strings",
        help="Path to string catalog YAML files"
    )
    parser.add_argument(
        "--save",
        help="Write the warmed cache to this snapshot file"
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Minimal output"
    )

    args = parser.parse_args(argv)
    context = get_context()

    stats = asyncio.run(warm_translation_cache(
        languages=args.languages,
        catalog_dir=args.catalog_dir,
        batch_size=get_settings().translation_batch_size,
        client=context.client,
        verbose=not args.quiet,
    ))

    save_path = args.save or get_settings().translation_cache_file
    if save_path:
        context.store.save(save_path)

    return stats


if __name__ == "__main__":
    main()
