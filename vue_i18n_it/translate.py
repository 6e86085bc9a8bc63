"""Baidu general translation API client.

Example:
    client = BaiduTranslateClient(app_id, app_key)
    client.translate(["你好"], source="zh", target="en")
"""

from __future__ import annotations

import concurrent.futures
import hashlib
import json
import logging
import time
import urllib.error
import urllib.parse
import urllib.request
from collections.abc import Iterable
from dataclasses import dataclass

from .config import Settings
from .errors import ConfigurationError, TranslationError
from .models import Entry

logger = logging.getLogger(__name__)

API_URL = "https://fanyi-api.baidu.com/api/trans/vip/translate"
TRANSIENT_HTTP_CODES = {408, 425, 429, 500, 502, 503, 504}
# Rate limit and server busy codes reported in the JSON body.
TRANSIENT_API_CODES = {"54003", "52001", "52002"}


@dataclass(frozen=True)
class TranslatedText:
    source: str
    translated: str


def sign(app_id: str, query: str, salt: str, app_key: str) -> str:
    return hashlib.md5(f"{app_id}{query}{salt}{app_key}".encode("utf-8")).hexdigest()


class BaiduTranslateClient:
    def __init__(
        self,
        app_id: str,
        app_key: str,
        timeout_sec: int = 30,
        retries: int = 2,
        api_url: str = API_URL,
    ) -> None:
        if not app_id or not app_key:
            raise ConfigurationError(
                "Missing translation credentials. Set BAIDU_TRANSLATE_APP_ID and "
                "BAIDU_TRANSLATE_APP_KEY in the environment or .env."
            )
        self.app_id = app_id
        self.app_key = app_key
        self.timeout_sec = timeout_sec
        self.retries = retries
        self.api_url = api_url

    @classmethod
    def from_settings(cls, settings: Settings) -> BaiduTranslateClient:
        return cls(
            settings.app_id,
            settings.app_key,
            timeout_sec=settings.timeout_sec,
            retries=settings.retries,
        )

    def build_url(self, texts: list[str], source: str, target: str) -> str:
        query = "\n".join(texts)
        salt = str(int(time.time() * 1000))
        params = {
            "q": query,
            "from": source,
            "to": target,
            "appid": self.app_id,
            "salt": salt,
            "sign": sign(self.app_id, query, salt, self.app_key),
        }
        return f"{self.api_url}?{urllib.parse.urlencode(params)}"

    def request(self, texts: list[str], source: str, target: str) -> dict:
        last_error: Exception | None = None
        for attempt in range(self.retries + 1):
            request = urllib.request.Request(
                url=self.build_url(texts, source, target),
                method="GET",
            )
            try:
                with urllib.request.urlopen(request, timeout=self.timeout_sec) as response:
                    data = json.loads(response.read().decode("utf-8"))
            except (urllib.error.HTTPError, urllib.error.URLError, TimeoutError) as exc:
                last_error = exc
                if isinstance(exc, urllib.error.HTTPError) and exc.code not in TRANSIENT_HTTP_CODES:
                    break
            except ValueError as exc:
                raise TranslationError(target, f"malformed response: {exc}") from exc
            else:
                if not isinstance(data, dict):
                    raise TranslationError(target, "malformed response: expected an object")
                code = str(data.get("error_code", "") or "")
                if not code or code == "52000":
                    return data
                last_error = TranslationError(
                    target, f"API error {code}: {data.get('error_msg', '')}".rstrip(": ")
                )
                if code not in TRANSIENT_API_CODES:
                    break

            if attempt < self.retries:
                time.sleep(min(8, 2**attempt))

        if isinstance(last_error, TranslationError):
            raise last_error
        raise TranslationError(target, f"request failed: {last_error}") from last_error

    def translate(self, texts: list[str], source: str, target: str) -> list[TranslatedText]:
        if not texts:
            return []
        data = self.request(texts, source, target)
        items = data.get("trans_result")
        if items is None:
            return []
        if not isinstance(items, list):
            raise TranslationError(target, "malformed response: trans_result is not a list")
        out: list[TranslatedText] = []
        for item in items:
            if not isinstance(item, dict):
                raise TranslationError(target, "malformed response: bad trans_result item")
            out.append(TranslatedText(str(item.get("src", "")), str(item.get("dst", ""))))
        return out


def flatten(text: str) -> str:
    return " ".join(text.split())


def translate_entries(
    entries: Iterable[Entry],
    client: BaiduTranslateClient,
    languages: Iterable[str],
    source: str = "zh",
    concurrency: int = 4,
) -> dict[str, TranslationError]:
    """Fill ``entry.translations`` for keyed entries, one request per language.

    Returns the languages that failed. Other languages are still filled in.
    """
    keyed = [entry for entry in entries if entry.key]
    languages = [lang for lang in languages if lang != source]
    if not keyed or not languages:
        return {}

    # The API splits its query on line breaks.
    texts = list(dict.fromkeys(flatten(entry.value) for entry in keyed))
    results: dict[str, list[TranslatedText]] = {}
    failures: dict[str, TranslationError] = {}

    with concurrent.futures.ThreadPoolExecutor(max_workers=max(1, concurrency)) as executor:
        future_map = {
            executor.submit(client.translate, texts, source, lang): lang for lang in languages
        }
        for future in concurrent.futures.as_completed(future_map):
            lang = future_map[future]
            try:
                results[lang] = future.result()
            except TranslationError as exc:
                logger.warning("translation to %s failed: %s", lang, exc.message)
                failures[lang] = exc

    for lang, items in results.items():
        lookup = {item.source: item.translated.strip() for item in items}
        for entry in keyed:
            entry.translations[lang] = lookup.get(flatten(entry.value), "")
    return failures
