"""Local, model-free summary and keyword extraction used when the AI path fails."""
import re
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Tuple


@dataclass(frozen=True)
class LanguageProfile:
    """Language-specific rules for the local fallbacks."""
    name: str
    stop_words: FrozenSet[str]
    # Characters whose lowercase form differs from str.lower()
    lowercase_map: Dict[str, str] = field(default_factory=dict)
    invalid_input_keywords: Tuple[str, str] = ("content", "news")
    no_tokens_keywords: Tuple[str, str] = ("article", "news")
    no_keywords_keywords: Tuple[str, str] = ("general", "news")
    no_content_summary: str = "Content could not be summarized."
    no_sentence_summary: str = "Summary unavailable: no usable sentence found."

    def lower(self, text: str) -> str:
        for upper, lower in self.lowercase_map.items():
            text = text.replace(upper, lower)
        return text.lower()


TURKISH = LanguageProfile(
    name="Turkish",
    stop_words=frozenset({
        "bir", "bu", "şu", "ve", "ile", "için", "olan", "olarak", "da", "de",
        "daha", "çok", "tüm", "her", "gibi", "kadar", "sonra", "önce", "ama",
        "fakat", "ancak", "veya", "yahut", "hem", "hep", "hiç", "şey", "zaman"
    }),
    lowercase_map={"İ": "i", "I": "ı"},
    invalid_input_keywords=("içerik", "haber"),
    no_tokens_keywords=("makale", "haber"),
    no_keywords_keywords=("genel", "haber"),
    no_content_summary="İçerik özetlenemedi.",
    no_sentence_summary="Özet oluşturulamadı: Geçerli cümle bulunamadı.",
)

ENGLISH = LanguageProfile(
    name="English",
    stop_words=frozenset({
        "the", "and", "or", "but", "for", "with", "this", "that", "these",
        "those", "have", "has", "had", "were", "was", "been", "being", "will",
        "would", "could", "should", "might", "must", "from", "into", "about",
        "their", "there", "they", "what", "when", "which", "while", "also"
    }),
)

PROFILES = {profile.name.lower(): profile for profile in (TURKISH, ENGLISH)}

_SENTENCE_SPLIT = re.compile(r"[.!?]+")
# \w is Unicode-aware, so letters of any alphabet survive
_PUNCTUATION = re.compile(r"[^\w\s]")
_NUMERIC = re.compile(r"^\d+$")


def get_profile(language: str) -> LanguageProfile:
    """Resolve a language name to a profile, defaulting to Turkish."""
    return PROFILES.get((language or "").strip().lower(), TURKISH)


class KeywordExtractor:
    """Frequency based keyword extraction and extractive summaries."""

    max_keywords = 8
    max_sentences = 3
    max_summary_length = 500
    min_token_length = 3
    min_sentence_length = 10

    def __init__(self, profile: LanguageProfile = TURKISH):
        self.profile = profile

    def extract_keywords(self, text: str) -> List[str]:
        """Return up to eight of the most frequent meaningful words in the text."""
        if not text or not isinstance(text, str):
            return list(self.profile.invalid_input_keywords)

        words = _PUNCTUATION.sub("", self.profile.lower(text)).split()
        words = [
            word for word in words
            if len(word) > self.min_token_length
            and word not in self.profile.stop_words
            and not _NUMERIC.match(word)
        ]

        if not words:
            return list(self.profile.no_tokens_keywords)

        keywords = [
            word for word, _ in Counter(words).most_common(self.max_keywords)
            if len(word) > 2
        ]
        return keywords or list(self.profile.no_keywords_keywords)

    def fallback_summary(self, text: str) -> str:
        """Build an extractive summary from the first few sentences."""
        if not text or not isinstance(text, str):
            return self.profile.no_content_summary

        sentences = [s.strip() for s in _SENTENCE_SPLIT.split(text)]
        sentences = [s for s in sentences if len(s) > self.min_sentence_length]

        if not sentences:
            return self.profile.no_sentence_summary

        summary = ". ".join(sentences[:self.max_sentences]) + "."
        if len(summary) > self.max_summary_length:
            return summary[:self.max_summary_length - 3] + "..."
        return summary
