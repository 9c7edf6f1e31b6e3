"""
Document-level translation helpers.

Backend payloads (campaigns, courses, incidents) mix translatable text with
ids, dates and numbers. Instead of picking strings out by hand per entity,
describe the translatable fields with dotted paths and let
`extract_translatable` / `rehydrate` do the bookkeeping:

    paths = ["title", "submodules.*.title"]
    texts = extract_translatable(course, paths)
    translated = rehydrate(course, paths, await client.translate_batch(texts, "ur"))

Path segments are dict keys, list indexes, or `*` for every element of a
list (or every value of a dict). Only string values are collected; missing
keys and non-string values are skipped the same way in both directions, so
positions always line up, duplicates included.
"""

from __future__ import annotations

import copy
from typing import Any, Callable, Iterator

from phishaware.i18n.context import TranslationContext, get_context


# Translatable fields of the entities the dashboard renders
ENTITY_FIELDS: dict[str, list[str]] = {
    "campaign": ["name", "description", "status"],
    "course": ["title", "description", "submodules.*.title", "submodules.*.description"],
    "incident": ["subject", "category", "status"],
    "certificate": ["course_title", "title"],
    "leaderboard_entry": ["department", "badge"],
}


def _split(path: str) -> list[str]:
    return [part for part in path.split(".") if part]


def _children(node: Any, part: str) -> Iterator[tuple[Any, Any]]:
    """Yield (container, key) pairs addressed by one path segment."""
    if part == "*":
        if isinstance(node, list):
            yield from ((node, i) for i in range(len(node)))
        elif isinstance(node, dict):
            yield from ((node, k) for k in list(node.keys()))
    elif isinstance(node, dict):
        if part in node:
            yield node, part
    elif isinstance(node, list) and part.lstrip("-").isdigit():
        index = int(part)
        if -len(node) <= index < len(node):
            yield node, index


def _slots(node: Any, parts: list[str]) -> Iterator[tuple[Any, Any]]:
    """Yield (container, key) for every string value at the end of `parts`."""
    if not parts:
        return
    head, rest = parts[0], parts[1:]
    for container, key in _children(node, head):
        if rest:
            yield from _slots(container[key], rest)
        elif isinstance(container[key], str):
            yield container, key


def extract_translatable(obj: Any, field_paths: list[str]) -> list[str]:
    """
    Collect the strings at `field_paths`, in path order then document order.
    """
    texts: list[str] = []
    for path in field_paths:
        texts.extend(container[key] for container, key in _slots(obj, _split(path)))
    return texts


def rehydrate(obj: Any, field_paths: list[str], translations: list[str]) -> Any:
    """
    Return a deep copy of `obj` with the strings at `field_paths` replaced.

    `translations` must line up with `extract_translatable(obj, field_paths)`.

    Raises:
        ValueError: translations has the wrong length
    """
    result = copy.deepcopy(obj)
    slots = [slot for path in field_paths for slot in _slots(result, _split(path))]

    if len(slots) != len(translations):
        raise ValueError(
            f"Expected {len(slots)} translations for {len(field_paths)} paths, "
            f"got {len(translations)}"
        )

    for (container, key), text in zip(slots, translations):
        container[key] = text
    return result


async def translate_fields(
    obj: Any,
    field_paths: list[str],
    context: TranslationContext | None = None,
) -> Any:
    """
    Translate the fields of one payload into the context's language.

    The original object is left unchanged.
    """
    context = context or get_context()
    if context.is_source_language:
        return copy.deepcopy(obj)

    texts = extract_translatable(obj, field_paths)
    await context.pre_translate(texts)
    return rehydrate(obj, field_paths, [context.t(text) for text in texts])


async def translate_entities(
    entities: list[dict[str, Any]],
    kind: str,
    context: TranslationContext | None = None,
) -> list[dict[str, Any]]:
    """Translate a list of known entities (see ENTITY_FIELDS) in one batch."""
    if kind not in ENTITY_FIELDS:
        raise ValueError(f"Unknown entity kind: {kind}")
    paths = [f"*.{path}" for path in ENTITY_FIELDS[kind]]
    return await translate_fields(entities, paths, context)


def collector(
    static: list[str],
    *sources: Callable[[], tuple[Any, list[str]]],
) -> Callable[[], list[str]]:
    """
    Build a TranslatedPage collector from static strings plus dynamic payloads.

    Each source returns (payload, field_paths) at collection time, so data
    fetched after the page was created is included in the next warm-up.
    """
    def collect() -> list[str]:
        texts = list(static)
        for source in sources:
            payload, paths = source()
            texts.extend(extract_translatable(payload, paths))
        return texts

    return collect
