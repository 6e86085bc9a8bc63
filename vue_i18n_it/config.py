"""Settings read from a dotenv file, the environment and command line flags."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, replace
from pathlib import Path

ENV_ASSIGN_RE = re.compile(
    r"^(?:export\s+)?(?P<key>[A-Za-z_][A-Za-z0-9_]*)\s*=\s*(?P<value>.*)$"
)
TRUTHY = {"1", "true", "yes", "on"}

LANGUAGE_NAMES = {
    "zh": "简体中文",
    "cht": "繁體中文",
    "en": "English",
    "jp": "日本語",
    "kor": "한국어",
    "fra": "Français",
    "de": "Deutsch",
    "spa": "Español",
    "ru": "Русский",
    "pt": "Português",
    "it": "Italiano",
    "vie": "Tiếng Việt",
    "th": "ไทย",
    "ara": "العربية",
}


@dataclass(frozen=True)
class Settings:
    function: str = "$t"
    languages: tuple[str, ...] = ("en",)
    source_language: str = "zh"
    auto_translate: bool = False
    app_id: str = ""
    app_key: str = ""
    timeout_sec: int = 30
    retries: int = 2

    @property
    def has_credentials(self) -> bool:
        return bool(self.app_id and self.app_key)

    def with_overrides(self, **changes: object) -> Settings:
        return replace(self, **{k: v for k, v in changes.items() if v is not None})


DOUBLE_QUOTE_ESCAPES = {"n": "\n", "r": "\r", '"': '"', "\\": "\\"}
SINGLE_QUOTE_ESCAPES = {"'": "'", "\\": "\\"}
ESCAPE_RE = re.compile(r"\\(.)", re.DOTALL)


def unescape(text: str, escapes: dict[str, str]) -> str:
    """Resolve backslash escapes in one pass; unknown ones are kept as written."""
    return ESCAPE_RE.sub(lambda m: escapes.get(m.group(1), m.group(0)), text)


def parse_env_value(raw: str) -> str:
    value = raw.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "'\"":
        escapes = DOUBLE_QUOTE_ESCAPES if value[0] == '"' else SINGLE_QUOTE_ESCAPES
        return unescape(value[1:-1], escapes)

    # KEY=abc # comment
    comment = re.search(r"(?:^|\s)#", value)
    if comment:
        value = value[: comment.start()]
    return value.rstrip()


def load_env_file(env_file: Path) -> int:
    """Copy assignments from ``env_file`` into ``os.environ`` without overriding."""
    if not env_file.is_file():
        return 0

    text = env_file.read_text(encoding="utf-8", errors="ignore")
    assignments = (ENV_ASSIGN_RE.match(line.strip()) for line in text.splitlines())
    loaded = 0
    for match in filter(None, assignments):
        key = match.group("key")
        if key not in os.environ:
            os.environ[key] = parse_env_value(match.group("value"))
            loaded += 1
    return loaded


def parse_languages(raw: str | None) -> tuple[str, ...]:
    if not raw:
        return ()
    return tuple(lang.strip() for lang in raw.split(",") if lang.strip())


def env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None
    if value < 0:
        raise ValueError(f"{name} must be >= 0")
    return value


def load_settings() -> Settings:
    return Settings(
        function=os.getenv("VUE_I18N_FUNCTION", "").strip() or "$t",
        languages=parse_languages(os.getenv("VUE_I18N_LANGUAGES")) or ("en",),
        source_language=os.getenv("VUE_I18N_SOURCE_LANGUAGE", "").strip() or "zh",
        auto_translate=os.getenv("VUE_I18N_AUTO_TRANSLATE", "").strip().lower() in TRUTHY,
        app_id=os.getenv("BAIDU_TRANSLATE_APP_ID", "").strip(),
        app_key=os.getenv("BAIDU_TRANSLATE_APP_KEY", "").strip(),
        timeout_sec=env_int("VUE_I18N_TIMEOUT_SEC", 30),
        retries=env_int("VUE_I18N_RETRIES", 2),
    )


def language_name(code: str) -> str:
    return LANGUAGE_NAMES.get(code, code)
