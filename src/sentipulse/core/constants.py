"""Constants and configuration values for Sentipulse."""

# Batch Processing Constants
class BatchConstants:
    """Constants related to batching and pacing classifier requests."""

    DEFAULT_BATCH_SIZE = 10  # records per classifier request
    MIN_BATCH_SIZE = 1
    MAX_BATCH_SIZE = 100
    DEFAULT_DELAY_MS = 1000  # pause between batches (rate limiting)


# Sentiment Constants
class SentimentConstants:
    """Sentiment labels and their trend-score mapping."""

    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"
    LABELS = (POSITIVE, NEGATIVE, NEUTRAL)

    # Per-record mapped score appended to the score history
    SCORE_MAP = {
        POSITIVE: 100,
        NEGATIVE: -100,
        NEUTRAL: 0,
    }

    MIN_SCORE = -1.0  # classifier confidence range
    MAX_SCORE = 1.0

    # VADER compound thresholds for the lexicon fallback
    LEXICON_POSITIVE_THRESHOLD = 0.05
    LEXICON_NEGATIVE_THRESHOLD = -0.05


# Smoothing Constants
class TrendConstants:
    """Constants for the rolling trend smoother."""

    MIN_WINDOW = 3  # smallest trailing window
    WINDOW_DIVISOR = 10  # window grows with history length / 10


# Column Detection Constants
class ColumnConstants:
    """Keywords used to pre-select dataset columns."""

    TEXT_KEYWORDS = ["comment", "text", "review", "content", "body", "message", "tweet"]
    VERIFIED_KEYWORDS = ["verified", "is_verified", "isverified", "blue_tick"]
    ENGAGEMENT_KEYWORDS = ["engagement", "likes", "retweets", "shares", "views", "score"]

    # Fallback text column when no keyword matches (0-based)
    FALLBACK_TEXT_INDEX = 3

    # Verified-flag values treated as true (case-insensitive)
    VERIFIED_TRUE_VALUES = ("true", "1", "yes")


# Comparison Constants
class ComparisonConstants:
    """Default labels for the two sides of a comparison."""

    FIRST_LABEL = "Current Analysis"
    SECOND_LABEL = "Compared Brand"


# Prompt Constants
class PromptConstants:
    """Constants for the classifier prompt."""

    PROMPT_VERSION = "v1.0"  # part of the cache key
    MAX_TOKENS_PER_COMMENT = 40
    MIN_MAX_TOKENS = 200
    TEMPERATURE = 0.0


# Cache Constants
class CacheConstants:
    """Constants for caching behavior."""

    CACHE_TTL_HOURS = 24  # cache time-to-live in hours
    CACHE_KEY_LENGTH = 8  # length of cache key for logging


# File and Path Constants
class FileConstants:
    """Constants for file operations."""

    SUPPORTED_EXTENSIONS = ("csv", "xlsx", "xls", "json")
    CSV_EXPORT_HEADERS = ["id", "text", "sentiment", "score", "isVerified", "engagement"]
    CSV_EXPORT_TEMPLATE = "sentiment_results_{column}.csv"
    JSON_EXPORT_TEMPLATE = "sentiment_analysis_{column}.json"
    PROJECT_NAME_TEMPLATE = "Analysis - {column}"
    LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
