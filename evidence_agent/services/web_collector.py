"""
Web collection: three public search providers behind the approval gate.

Providers are queried in a fixed order (SearX, DuckDuckGo, Wikipedia). Every
outbound request is shown to the approval gate before it runs. A rejected,
failed or empty provider contributes nothing and the next one is tried; no
provider failure is fatal.

Policies:
- "aggregate" (default): query every provider and join all non-empty texts.
- "first_success": stop at the first provider with a non-empty text.
"""

import logging
import re
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Callable
from urllib.parse import quote, urlencode

import httpx
import nltk

from evidence_agent.core.config import (
    DUCKDUCKGO_URL,
    SEARX_URL,
    WEB_CONCURRENT_PROVIDERS,
    WEB_HTTP_TIMEOUT,
    WEB_SEARCH_POLICY,
    WEB_USER_AGENT,
    WIKIPEDIA_SUMMARY_URL,
)
from evidence_agent.services.approval import ApprovalGate

logger = logging.getLogger(__name__)

NO_WEB_RESULTS = "No relevant information found on the internet."

POLICY_AGGREGATE = "aggregate"
POLICY_FIRST_SUCCESS = "first_success"

KeywordExtractor = Callable[[str], list[str]]
PosTagger = Callable[[list[str]], list[tuple[str, str]]]

_TAGGER_RESOURCE = "averaged_perceptron_tagger_eng"
_PROPER_NOUN_TAGS = frozenset({"NNP", "NNPS"})
_NOUN_TAGS = frozenset({"NN", "NNS"})

_STOPWORDS = frozenset({
    # English
    "a", "an", "and", "are", "as", "at", "be", "by", "can", "did", "do", "does", "for", "from",
    "how", "i", "in", "is", "it", "me", "my", "of", "on", "or", "tell", "that", "the", "this",
    "to", "was", "were", "what", "when", "where", "which", "who", "why", "with", "you", "about",
    "list", "explain", "show", "describe", "give", "find", "name", "please", "search", "summarize",
    # Portuguese
    "qual", "quais", "quem", "quando", "onde", "o", "os", "de", "da", "em", "um", "uma",
    "para", "é", "foi", "que", "com", "como", "e", "por", "na", "no", "liste", "explique",
    "mostre", "descreva",
})

_QUOTED = re.compile(r"\"([^\"]+)\"")
_TOKEN = re.compile(r"[\w][\w'\-]*", re.UNICODE)


# ------------------ Keyword extraction ------------------

@lru_cache(maxsize=1)
def _ensure_tagger_data() -> None:
    try:
        nltk.data.find(f"taggers/{_TAGGER_RESOURCE}")
    except LookupError:
        nltk.download(_TAGGER_RESOURCE, quiet=True)


def _nltk_tagger(tokens: list[str]) -> list[tuple[str, str]]:
    _ensure_tagger_data()
    return nltk.pos_tag(tokens)


def _noun_phrases(tagged: list[tuple[str, str]]) -> list[str]:
    """Runs of proper nouns as one phrase, common nouns as single words; stopwords dropped."""
    phrases: list[str] = []
    run: list[str] = []
    for word, tag in list(tagged) + [("", "")]:
        is_stopword = word.lower() in _STOPWORDS
        if tag in _PROPER_NOUN_TAGS and not is_stopword:
            run.append(word)
            continue
        if run:
            phrases.append(" ".join(run))
            run = []
        if tag in _NOUN_TAGS and not is_stopword:
            phrases.append(word)
    return phrases


def extract_keywords(question: str, tagger: PosTagger | None = None) -> list[str]:
    """
    Pick search keywords from a question.

    First choice: quoted phrases, then nouns and proper-noun runs found by the
    part-of-speech tagger (nltk by default). Without tagger data, or when no
    noun is found: the question's tokens minus stopwords. Non-empty input
    always gives a non-empty list.
    """
    text = (question or "").strip()
    if not text:
        return []

    keywords: list[str] = [q.strip() for q in _QUOTED.findall(text) if q.strip()]
    tokens = _TOKEN.findall(_QUOTED.sub(" ", text))
    if tokens:
        try:
            keywords.extend(_noun_phrases((tagger or _nltk_tagger)(tokens)))
        except LookupError as e:
            logger.warning("[web:extract_keywords] POS tagger unavailable, using stopword filter: %s", e)
    if keywords:
        return list(dict.fromkeys(keywords))

    tokens = _TOKEN.findall(text)
    filtered = [t for t in tokens if t.lower() not in _STOPWORDS]
    if filtered:
        return filtered
    return tokens or [text]


# ------------------ Providers ------------------

@dataclass(frozen=True)
class OutboundRequest:
    method: str
    url: str

    @property
    def command(self) -> str:
        """Verbatim text shown to the approval gate."""
        return f"{self.method} {self.url}"


def _searx_request(question: str, keywords: list[str]) -> OutboundRequest:
    return OutboundRequest("GET", f"{SEARX_URL}?{urlencode({'q': question, 'format': 'json'})}")


def _duckduckgo_request(question: str, keywords: list[str]) -> OutboundRequest:
    params = {"q": " ".join(keywords), "format": "json", "no_redirect": "1", "no_html": "1"}
    return OutboundRequest("GET", f"{DUCKDUCKGO_URL}?{urlencode(params)}")


def _wikipedia_request(question: str, keywords: list[str]) -> OutboundRequest:
    return OutboundRequest("GET", WIKIPEDIA_SUMMARY_URL + quote(" ".join(keywords), safe=""))


def _searx_extract(data: Any) -> str:
    first = data["results"][0]
    for key in ("content", "snippet", "description"):
        value = first.get(key)
        if isinstance(value, str) and value.strip():
            return value
    return ""


def _duckduckgo_extract(data: Any) -> str:
    if data.get("AbstractText"):
        return data["AbstractText"]
    topics = data.get("RelatedTopics") or []
    if topics:
        return topics[0].get("Text") or ""
    return ""


def _wikipedia_extract(data: Any) -> str:
    return data.get("extract") or ""


@dataclass(frozen=True)
class SearchProvider:
    name: str
    build_request: Callable[[str, list[str]], OutboundRequest]
    extract: Callable[[Any], str]


DEFAULT_PROVIDERS: tuple[SearchProvider, ...] = (
    SearchProvider("SearX", _searx_request, _searx_extract),
    SearchProvider("DuckDuckGo", _duckduckgo_request, _duckduckgo_extract),
    SearchProvider("Wikipedia", _wikipedia_request, _wikipedia_extract),
)


# ------------------ Results ------------------

@dataclass(frozen=True)
class WebSearchResult:
    text: str
    sources: list[str] = field(default_factory=list)
    rejected_commands: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class WebSearchReport:
    """Detailed outcome of one web search, for tool callers."""

    success: bool
    data: str
    execution_time_ms: int
    source: str
    query: str
    keywords: list[str]
    sources_used: list[str]
    error: str | None = None


# ------------------ Collector ------------------

class WebCollector:
    """
    Queries the providers for a question. The approval gate is injected and
    shared by every request this collector makes.
    """

    def __init__(
        self,
        gate: ApprovalGate,
        providers: tuple[SearchProvider, ...] = DEFAULT_PROVIDERS,
        keyword_extractor: KeywordExtractor = extract_keywords,
        policy: str = WEB_SEARCH_POLICY,
        concurrent: bool = WEB_CONCURRENT_PROVIDERS,
        transport: httpx.BaseTransport | None = None,
        timeout: float = WEB_HTTP_TIMEOUT,
    ) -> None:
        if policy not in (POLICY_AGGREGATE, POLICY_FIRST_SUCCESS):
            raise ValueError(f"unknown web search policy: {policy!r}")
        self.gate = gate
        self.providers = providers
        self.keyword_extractor = keyword_extractor
        self.policy = policy
        self.concurrent = concurrent
        self._transport = transport
        self._timeout = timeout

    def _client(self) -> httpx.Client:
        return httpx.Client(
            transport=self._transport,
            timeout=self._timeout,
            follow_redirects=True,
            headers={"User-Agent": WEB_USER_AGENT, "Accept": "application/json"},
        )

    def _query_provider(
        self, client: httpx.Client, provider: SearchProvider, question: str, keywords: list[str]
    ) -> tuple[str, str | None]:
        """
        Run one provider. Returns (text, rejected command). Any rejection or
        failure gives an empty text; the command is returned only when the
        gate rejected it.
        """
        request = provider.build_request(question, keywords)
        if not self.gate.request(request.command):
            logger.info("[web:%s] skipped (not approved)", provider.name)
            return "", request.command
        try:
            response = client.request(request.method, request.url)
        except httpx.HTTPError as e:
            logger.warning("[web:%s] request failed: %s", provider.name, e)
            return "", None
        if response.status_code != 200:
            logger.warning("[web:%s] HTTP %s", provider.name, response.status_code)
            return "", None
        try:
            data = response.json()
        except ValueError as e:
            logger.warning("[web:%s] invalid JSON: %s", provider.name, e)
            return "", None
        try:
            text = provider.extract(data)
        except (KeyError, IndexError, TypeError, AttributeError) as e:
            logger.info("[web:%s] no usable field: %r", provider.name, e)
            return "", None
        text = text.strip() if isinstance(text, str) else ""
        logger.info("[web:%s] OUT text_len=%d", provider.name, len(text))
        return text, None

    def search(self, question: str) -> WebSearchResult:
        """
        Search every provider (or until the first hit under first_success).
        Returns the joined texts and contributing provider names in provider
        order, or NO_WEB_RESULTS with no sources. Commands the gate rejected
        during this call are returned with the result.
        """
        keywords = self.keyword_extractor(question)
        logger.info("[web:search] IN  question=%r keywords=%s policy=%s", question, keywords, self.policy)
        results: list[tuple[str, str]] = []
        rejected: list[str] = []
        with self._client() as client:
            if self.policy == POLICY_AGGREGATE and self.concurrent:
                with ThreadPoolExecutor(max_workers=len(self.providers) or 1) as pool:
                    outcomes = list(pool.map(lambda p: self._query_provider(client, p, question, keywords), self.providers))
                results = [(p.name, text) for p, (text, _) in zip(self.providers, outcomes) if text]
                rejected = [command for _, command in outcomes if command]
            else:
                for provider in self.providers:
                    text, command = self._query_provider(client, provider, question, keywords)
                    if command:
                        rejected.append(command)
                    if text:
                        results.append((provider.name, text))
                        if self.policy == POLICY_FIRST_SUCCESS:
                            break

        if not results:
            logger.info("[web:search] OUT no provider returned information rejected=%d", len(rejected))
            return WebSearchResult(text=NO_WEB_RESULTS, sources=[], rejected_commands=rejected)
        sources = [name for name, _ in results]
        logger.info("[web:search] OUT sources=%s rejected=%d", sources, len(rejected))
        return WebSearchResult(text="\n\n".join(t for _, t in results), sources=sources, rejected_commands=rejected)

    def run_report(self, question: str) -> WebSearchReport:
        """Run search() and describe it with timing, keywords and sources."""
        start = time.monotonic()
        keywords = self.keyword_extractor(question)
        try:
            result = self.search(question)
        except Exception as e:
            logger.warning("[web:run_report] search failed: %s", e)
            return WebSearchReport(
                success=False,
                data="",
                execution_time_ms=int((time.monotonic() - start) * 1000),
                source="multiple providers",
                query=question,
                keywords=keywords,
                sources_used=[],
                error=str(e),
            )
        return WebSearchReport(
            success=bool(result.sources),
            data=result.text,
            execution_time_ms=int((time.monotonic() - start) * 1000),
            source=" + ".join(result.sources) or "multiple providers",
            query=question,
            keywords=keywords,
            sources_used=list(result.sources),
        )
