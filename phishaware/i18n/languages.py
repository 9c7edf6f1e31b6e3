"""
Supported languages and utilities.

The dashboard is authored in English. Urdu is the primary target; the
remaining codes are accepted so organizations can roll out other locales
without code changes.
"""

from enum import Enum


class Language(str, Enum):
    """Supported languages."""

    # === Launch languages ===
    EN = "en"      # English (source)
    UR = "ur"      # Urdu - RTL

    # === Regional ===
    HI = "hi"      # Hindi
    PA = "pa"      # Punjabi
    BN = "bn"      # Bengali
    SD = "sd"      # Sindhi - RTL
    PS = "ps"      # Pashto - RTL
    AR = "ar"      # Arabic - RTL
    FA = "fa"      # Persian - RTL

    # === International ===
    ES = "es"      # Spanish
    FR = "fr"      # French
    DE = "de"      # German
    PT = "pt"      # Portuguese
    ZH = "zh"      # Chinese (Simplified)
    TR = "tr"      # Turkish
    ID = "id"      # Indonesian
    MS = "ms"      # Malay


# Human-readable names
LANGUAGE_NAMES: dict[str, str] = {
    "en": "English",
    "ur": "Urdu",
    "hi": "Hindi",
    "pa": "Punjabi",
    "bn": "Bengali",
    "sd": "Sindhi",
    "ps": "Pashto",
    "ar": "Arabic",
    "fa": "Persian",
    "es": "Spanish",
    "fr": "French",
    "de": "German",
    "pt": "Portuguese",
    "zh": "Chinese (Simplified)",
    "tr": "Turkish",
    "id": "Indonesian",
    "ms": "Malay",
}

# Names in the language itself, for the language picker
NATIVE_NAMES: dict[str, str] = {
    "en": "English",
    "ur": "اردو",
    "hi": "हिन्दी",
    "pa": "ਪੰਜਾਬੀ",
    "bn": "বাংলা",
    "sd": "سنڌي",
    "ps": "پښتو",
    "ar": "العربية",
    "fa": "فارسی",
    "es": "Español",
    "fr": "Français",
    "de": "Deutsch",
    "pt": "Português",
    "zh": "中文",
    "tr": "Türkçe",
    "id": "Bahasa Indonesia",
    "ms": "Bahasa Melayu",
}


# =============================================================================
# Language Groups
# =============================================================================


# Languages to pre-warm cache for on deploy
WARM_UP_LANGUAGES: list[Language] = [
    Language.UR,
]


# RTL languages (need mirrored layout)
RTL_LANGUAGES: list[Language] = [
    Language.UR,
    Language.SD,
    Language.PS,
    Language.AR,
    Language.FA,
]


# All supported (for API)
SUPPORTED_LANGUAGES = list(Language)


# =============================================================================
# Utilities
# =============================================================================


_VARIANTS = {
    "english": "en",
    "urdu": "ur",
    "hindi": "hi",
    "punjabi": "pa",
    "bengali": "bn",
    "bangla": "bn",
    "sindhi": "sd",
    "pashto": "ps",
    "pushto": "ps",
    "arabic": "ar",
    "persian": "fa",
    "farsi": "fa",
    "spanish": "es",
    "french": "fr",
    "german": "de",
    "portuguese": "pt",
    "chinese": "zh",
    "turkish": "tr",
    "indonesian": "id",
    "malay": "ms",
    # Regional tags collapse to the base language
    "en-us": "en",
    "en-gb": "en",
    "ur-pk": "ur",
    "ur-in": "ur",
    "zh-cn": "zh",
    "pt-br": "pt",
}


def normalize_language_code(code: str | Language) -> str:
    """Normalize language code to standard form."""
    if isinstance(code, Language):
        return code.value
    code = str(code).lower().strip().replace("_", "-")
    return _VARIANTS.get(code, code)


def get_language_name(code: str) -> str:
    """Get human-readable language name."""
    return LANGUAGE_NAMES.get(normalize_language_code(code), code)


def get_native_name(code: str) -> str:
    return NATIVE_NAMES.get(normalize_language_code(code), code)


def is_rtl(code: str) -> bool:
    """Check if language is right-to-left."""
    return normalize_language_code(code) in {lang.value for lang in RTL_LANGUAGES}


def get_language_by_code(code: str) -> Language | None:
    """Get Language enum by code."""
    code = normalize_language_code(code)
    try:
        return Language(code)
    except ValueError:
        return None
