# app/core/i18n.py
from types import MappingProxyType
from typing import Literal, Mapping

from fastapi import Request

Language = Literal["en", "jp"]

SUPPORTED_LANGUAGES: tuple[str, ...] = ("en", "jp")
DEFAULT_LANGUAGE: Language = "en"

# Column suffix used for localized catalog fields (name_en / name_jp, ...)
LOCALIZED_SUFFIXES: Mapping[str, str] = MappingProxyType({"en": "en", "jp": "jp"})


def detect_language(request: Request) -> Language:
    """
    Resolve the request language.

    Order:
      1. ?lang=en|jp query parameter
      2. Accept-Language header containing "ja" -> "jp"
      3. default "en"
    """
    lang_param = request.query_params.get("lang")
    if lang_param in SUPPORTED_LANGUAGES:
        return lang_param  # type: ignore[return-value]

    accept_language = request.headers.get("accept-language", "")
    if "ja" in accept_language:
        return "jp"

    return DEFAULT_LANGUAGE


def get_language(request: Request) -> Language:
    """
    FastAPI dependency returning the language attached by the middleware.

    Falls back to detecting it directly when the middleware is not installed
    (e.g. a router mounted on a bare app).
    """
    lang = getattr(request.state, "lang", None)
    if lang is None:
        lang = detect_language(request)
    return lang


def localized(obj: object, field: str, lang: Language) -> str | None:
    """
    Pick `<field>_<lang>` from a model, falling back to English.

        localized(product, "name", "jp") -> product.name_jp or product.name_en
    """
    suffix = LOCALIZED_SUFFIXES[lang]
    value = getattr(obj, f"{field}_{suffix}", None)
    if not value and suffix != "en":
        value = getattr(obj, f"{field}_en", None)
    return value
