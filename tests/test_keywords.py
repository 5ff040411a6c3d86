"""Local keyword extraction and fallback summary tests."""
from shared.keywords import KeywordExtractor, TURKISH, ENGLISH, get_profile


class TestExtractKeywords:
    """Tests for KeywordExtractor.extract_keywords."""

    def test_most_frequent_words_first(self):
        extractor = KeywordExtractor()
        text = "Yapay zeka, yapay zeka ve teknoloji! 2024 bir yıl."

        keywords = extractor.extract_keywords(text)

        assert keywords[:3] == ["yapay", "zeka", "teknoloji"]

    def test_stop_words_numbers_and_short_tokens_removed(self):
        extractor = KeywordExtractor()

        keywords = extractor.extract_keywords("için olarak 12345 kedi ağaç")

        assert "için" not in keywords
        assert "olarak" not in keywords
        assert "12345" not in keywords
        assert keywords == ["kedi", "ağaç"]

    def test_turkish_dotted_capital_lowercased(self):
        extractor = KeywordExtractor()

        keywords = extractor.extract_keywords("İstanbul İstanbul")

        assert keywords == ["istanbul"]

    def test_at_most_eight_keywords(self):
        extractor = KeywordExtractor()
        text = " ".join(f"kelime{chr(97 + i)}" for i in range(20))

        assert len(extractor.extract_keywords(text)) == 8

    def test_invalid_input(self):
        extractor = KeywordExtractor()

        assert extractor.extract_keywords(None) == ["içerik", "haber"]
        assert extractor.extract_keywords("") == ["içerik", "haber"]

    def test_no_usable_tokens(self):
        extractor = KeywordExtractor()

        assert extractor.extract_keywords("ve bir 1234 da") == ["makale", "haber"]

    def test_english_profile(self):
        extractor = KeywordExtractor(ENGLISH)

        assert extractor.extract_keywords(None) == ["content", "news"]
        assert "would" not in extractor.extract_keywords("markets would rally markets")


class TestFallbackSummary:
    """Tests for KeywordExtractor.fallback_summary."""

    def test_first_three_long_sentences(self):
        extractor = KeywordExtractor()
        text = (
            "Birinci cümle burada yer alıyor. Kısa. İkinci cümle de burada! "
            "Üçüncü uzun cümle buradadır? Dördüncü cümle de var."
        )

        summary = extractor.fallback_summary(text)

        assert summary == (
            "Birinci cümle burada yer alıyor. İkinci cümle de burada. "
            "Üçüncü uzun cümle buradadır."
        )

    def test_truncated_to_500_chars(self):
        extractor = KeywordExtractor()
        sentence = "a" * 300
        text = f"{sentence}. {sentence}. {sentence}."

        summary = extractor.fallback_summary(text)

        assert len(summary) == 500
        assert summary.endswith("...")

    def test_no_content(self):
        extractor = KeywordExtractor()

        assert extractor.fallback_summary("") == "İçerik özetlenemedi."

    def test_no_valid_sentence(self):
        extractor = KeywordExtractor()

        assert extractor.fallback_summary("Kısa. Çok kısa.") == (
            "Özet oluşturulamadı: Geçerli cümle bulunamadı."
        )


def test_get_profile_defaults_to_turkish():
    assert get_profile("English") is ENGLISH
    assert get_profile(" english ") is ENGLISH
    assert get_profile("Klingon") is TURKISH
    assert get_profile(None) is TURKISH
