"""Sentiment classifier services.

Both classifiers take an ordered batch of texts and return an equal-length
ordered list of SentimentResult. Errors never leave `classify_batch`: a
failed batch comes back as neutral results with score 0.
"""

import hashlib
import json
import logging
import math
import re
from textwrap import dedent
from typing import Any, List, Sequence

import openai
from diskcache import Cache
from tenacity import retry, stop_after_attempt, wait_exponential
from vaderSentiment.vaderSentiment import SentimentIntensityAnalyzer

from ..core.config import settings
from ..core.constants import CacheConstants, PromptConstants, SentimentConstants
from ..core.models import SentimentResult

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "You are a sentiment classifier. You output strict JSON only."

CLASSIFY_PROMPT = dedent("""
Analyze the sentiment of the following comments. The comments may be in any language,
including Arabic dialects; judge the sentiment the author expresses.

Return ONLY a JSON array with exactly one object per comment, in the same order as the
input. Each object has:
- "sentiment": one of "positive", "negative", "neutral"
- "score": a number from -1.0 (most negative) to 1.0 (most positive)

No prose, no markdown, no code fences.

Comments:
""").strip()


def neutral_results(count: int) -> List[SentimentResult]:
    """Substitute results for a failed batch."""
    return [SentimentResult.neutral() for _ in range(count)]


def _strip_code_fences(s: str) -> str:
    s = s.strip()
    return re.sub(r"^```(?:json)?|```$", "", s, flags=re.IGNORECASE | re.MULTILINE).strip()


def _safe_json_loads(s: str) -> Any:
    """Parse JSON from an LLM response, tolerating code fences and surrounding prose."""
    cleaned = _strip_code_fences(s or "")
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError:
        array_match = re.search(r"\[.*\]", cleaned, re.DOTALL)
        if array_match:
            return json.loads(array_match.group(0))
        raise ValueError(f"Could not parse JSON from: {cleaned[:200]}...")


def _coerce_result(item: Any) -> SentimentResult:
    if not isinstance(item, dict):
        raise ValueError(f"Expected an object per comment, got {type(item).__name__}")
    sentiment = str(item.get("sentiment", "")).strip().lower()
    if sentiment not in SentimentConstants.LABELS:
        sentiment = SentimentConstants.NEUTRAL
    score = float(item.get("score", 0.0))
    if not math.isfinite(score):
        raise ValueError(f"Non-finite score: {score}")
    score = max(SentimentConstants.MIN_SCORE, min(SentimentConstants.MAX_SCORE, score))
    return SentimentResult(sentiment=sentiment, score=score)


def parse_results(response: str, expected: int) -> List[SentimentResult]:
    """
    Turn a raw classifier response into results.

    Raises ValueError when the response is not a list of `expected` objects;
    unknown labels inside an otherwise valid response count as neutral.
    """
    data = _safe_json_loads(response)
    if isinstance(data, dict):
        # {"results": [...]} style wrappers
        lists = [v for v in data.values() if isinstance(v, list)]
        data = lists[0] if len(lists) == 1 else data
    if not isinstance(data, list):
        raise ValueError(f"Expected a JSON array, got {type(data).__name__}")
    if len(data) != expected:
        raise ValueError(f"Expected {expected} results, got {len(data)}")
    return [_coerce_result(item) for item in data]


class ClassifierFactory:
    """Factory for creating sentiment classifiers."""

    @staticmethod
    def create():
        """Create the OpenAI classifier when a key is configured, else the lexicon fallback."""
        if settings.effective_openai_key:
            return OpenAIClassifier()
        return LexiconClassifier()


class OpenAIClassifier:
    """OpenAI chat-completion sentiment classifier with an on-disk response cache."""

    def __init__(self, client=None, model: str = None, cache=None):
        self.client = client or openai.OpenAI(
            api_key=settings.effective_openai_key,
            timeout=settings.request_timeout,
        )
        self.model = model or settings.openai_model
        self.cache = cache if cache is not None else Cache(settings.cache_dir)
        logger.info(f"OpenAI classifier initialized with model {self.model}")

    def _build_prompt(self, texts: Sequence[str]) -> str:
        lines = "\n".join(f"{i}: {text}" for i, text in enumerate(texts))
        return f"{CLASSIFY_PROMPT}\n{lines}"

    def _cache_key(self, texts: Sequence[str]) -> str:
        payload = json.dumps([self.model, PromptConstants.PROMPT_VERSION, list(texts)], ensure_ascii=False)
        return hashlib.md5(payload.encode("utf-8")).hexdigest()

    @retry(
        stop=stop_after_attempt(settings.classifier_max_attempts),
        wait=wait_exponential(multiplier=settings.retry_delay, max=settings.retry_backoff * 10),
        reraise=True,
    )
    def _complete(self, prompt: str, max_tokens: int) -> str:
        response = self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            max_tokens=max_tokens,
            temperature=PromptConstants.TEMPERATURE,
        )
        return response.choices[0].message.content or ""

    def classify_batch(self, texts: Sequence[str]) -> List[SentimentResult]:
        """Classify a batch; any failure yields neutral results of the same length."""
        if not texts:
            return []

        cache_key = self._cache_key(texts)
        try:
            cached = self.cache.get(cache_key)
        except Exception as e:
            logger.warning(f"Classifier cache read failed, treating as a miss: {e}")
            cached = None
        if cached:
            logger.debug(f"Cache hit for classifier batch: {cache_key[:CacheConstants.CACHE_KEY_LENGTH]}...")
            return [SentimentResult(**item) for item in cached]

        max_tokens = max(PromptConstants.MIN_MAX_TOKENS, PromptConstants.MAX_TOKENS_PER_COMMENT * len(texts))
        try:
            response = self._complete(self._build_prompt(texts), max_tokens)
            results = parse_results(response, len(texts))
        except Exception as e:
            logger.error(f"Sentiment classification failed for batch of {len(texts)}: {e}")
            return neutral_results(len(texts))

        try:
            self.cache.set(
                cache_key,
                [{"sentiment": r.sentiment, "score": r.score} for r in results],
                expire=3600 * CacheConstants.CACHE_TTL_HOURS,
            )
        except Exception as e:
            logger.warning(f"Classifier cache write failed: {e}")
        return results


class LexiconClassifier:
    """Offline fallback classifier based on VADER compound scores."""

    def __init__(self):
        self.analyzer = SentimentIntensityAnalyzer()
        logger.warning("No OpenAI key configured; using VADER lexicon classifier")

    def _classify(self, text: str) -> SentimentResult:
        compound = float(self.analyzer.polarity_scores(text)["compound"])
        if compound >= SentimentConstants.LEXICON_POSITIVE_THRESHOLD:
            label = SentimentConstants.POSITIVE
        elif compound <= SentimentConstants.LEXICON_NEGATIVE_THRESHOLD:
            label = SentimentConstants.NEGATIVE
        else:
            label = SentimentConstants.NEUTRAL
        return SentimentResult(sentiment=label, score=compound)

    def classify_batch(self, texts: Sequence[str]) -> List[SentimentResult]:
        try:
            return [self._classify(text) for text in texts]
        except Exception as e:
            logger.error(f"Lexicon classification failed for batch of {len(texts)}: {e}")
            return neutral_results(len(texts))
