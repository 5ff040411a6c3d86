"""Summarization gateway around the Gemini generative model."""
import asyncio
import json
import logging
import re
import textwrap
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from google import genai
from google.genai import types

from shared.config import settings
from shared.exceptions import ModelResponseError, SummarizationInputError
from shared.keywords import KeywordExtractor, get_profile
from shared.utils import calculate_exponential_backoff

logger = logging.getLogger(__name__)


MAX_KEYWORDS = 10
CONNECTION_TEST_TEXT = (
    "This is a simple test to verify that the AI summarization service is working properly."
)

_CODE_FENCE = re.compile(r"```json\n?|\n?```")
_SUMMARY_FIELD = re.compile(r'"summary":\s*"([^"]+)"')
_KEYWORDS_FIELD = re.compile(r'"keywords":\s*\[(.*?)\]')


class SummaryLength(str, Enum):
    """How long the generated summary should be."""
    SHORT = "short"
    MEDIUM = "medium"
    LONG = "long"


class SummaryStyle(str, Enum):
    """Tone of the generated summary."""
    FORMAL = "formal"
    CASUAL = "casual"
    TECHNICAL = "technical"
    SIMPLIFIED = "simplified"


LENGTH_INSTRUCTIONS = {
    SummaryLength.SHORT: "1-2 sentences maximum",
    SummaryLength.MEDIUM: "3-4 sentences",
    SummaryLength.LONG: "5-7 sentences with more detail",
}

STYLE_INSTRUCTIONS = {
    SummaryStyle.FORMAL: "Use formal, professional language",
    SummaryStyle.CASUAL: "Use casual, conversational language",
    SummaryStyle.TECHNICAL: "Use technical terminology and precise language",
    SummaryStyle.SIMPLIFIED: "Use simple, easy-to-understand language",
}


@dataclass
class SummaryOptions:
    """Prompt options for a summarization request."""
    length: SummaryLength = SummaryLength.MEDIUM
    style: SummaryStyle = SummaryStyle.FORMAL
    language: str = field(default_factory=lambda: settings.ai_default_language)
    include_key_quotes: bool = False


@dataclass
class SummaryResult:
    """Summary text plus keywords (and quotes when requested)."""
    summary: str
    keywords: List[str]
    quotes: List[str] = field(default_factory=list)


def build_prompt(text: str, options: SummaryOptions) -> str:
    """Build the instruction prompt asking for a strict JSON answer."""
    length = LENGTH_INSTRUCTIONS[SummaryLength(options.length)]
    style = STYLE_INSTRUCTIONS[SummaryStyle(options.style)]
    language = options.language

    quotes_instruction = ""
    quotes_field = ""
    if options.include_key_quotes:
        quotes_instruction = "3. Key quotes from the text (if any noteworthy quotes exist)\n"
        quotes_field = ',\n  "quotes": ["quote1", "quote2"]'

    return textwrap.dedent(
        f"""\
        Please analyze the following text and provide:
        1. A summary ({length}) in {language}
        2. Key topics/keywords (in {language})
        {quotes_instruction}
        Writing style: {style}

        Respond with JSON only, using the following structure:
        """
    ) + (
        "{\n"
        '  "summary": "Your summary here...",\n'
        f'  "keywords": ["keyword1", "keyword2", "keyword3"]{quotes_field}\n'
        "}\n\n"
        f"Text to analyze:\n{text}\n"
    )


class SummarizationGateway:
    """
    Produces a summary and keywords for a text using the generative model.

    Model failures never reach the caller: after the configured number of
    attempts the gateway falls back to a local extractive summary and
    frequency based keywords. Only invalid input raises.
    """

    def __init__(
        self,
        client: Optional[Any] = None,
        model: Optional[str] = None,
        max_attempts: Optional[int] = None,
        retry_base_delay: Optional[float] = None,
        request_timeout: Optional[float] = None,
        max_input_chars: Optional[int] = None
    ):
        self._client = client
        self.model = model or settings.ai_model
        self.max_attempts = settings.ai_max_attempts if max_attempts is None else max_attempts
        self.retry_base_delay = (
            settings.ai_retry_base_delay if retry_base_delay is None else retry_base_delay
        )
        self.request_timeout = settings.ai_request_timeout if request_timeout is None else request_timeout
        self.max_input_chars = settings.ai_max_input_chars if max_input_chars is None else max_input_chars
        self.generation_config = types.GenerateContentConfig(
            max_output_tokens=settings.ai_max_output_tokens,
            temperature=settings.ai_temperature,
            top_p=settings.ai_top_p,
        )

    def _get_client(self) -> Any:
        """Create the Gemini client on first use (Vertex AI when a project is set)."""
        if self._client is None:
            if settings.google_cloud_project:
                self._client = genai.Client(
                    vertexai=True,
                    project=settings.google_cloud_project,
                    location=settings.google_cloud_location,
                )
            else:
                self._client = genai.Client(api_key=settings.google_api_key)
            logger.info(f"Generative AI client initialized for model {self.model}")
        return self._client

    def _validate_input(self, text: Any) -> str:
        if not text or not isinstance(text, str):
            raise SummarizationInputError("Text input is required and must be a string")

        trimmed = text.strip()
        if not trimmed:
            raise SummarizationInputError("Text input cannot be empty")

        if len(trimmed) > self.max_input_chars:
            logger.warning(
                f"Text too long ({len(trimmed)} chars), truncating to {self.max_input_chars} chars"
            )
            return trimmed[:self.max_input_chars]
        return text

    async def summarize(self, text: str, options: Optional[SummaryOptions] = None) -> SummaryResult:
        """Summarize text, always returning a usable result for valid input."""
        text = self._validate_input(text)
        options = options or SummaryOptions()
        extractor = KeywordExtractor(get_profile(options.language))

        logger.debug(f"Summarizing text of length: {len(text)}")

        try:
            result = await self._summarize_with_model(text, options, extractor)
        except Exception as e:
            logger.error(f"Unexpected error while summarizing, using fallback summary: {e}")
            result = None

        if result is None:
            return SummaryResult(
                summary=extractor.fallback_summary(text),
                keywords=extractor.extract_keywords(text),
            )
        return result

    async def _summarize_with_model(
        self,
        text: str,
        options: SummaryOptions,
        extractor: KeywordExtractor
    ) -> Optional[SummaryResult]:
        """Call the model with retries. Returns None once every attempt has failed."""
        prompt = build_prompt(text, options)
        last_error: Optional[Exception] = None

        for attempt in range(1, self.max_attempts + 1):
            try:
                generated = await self._generate(prompt)
                result = self._parse_response(generated, text, extractor)
                logger.debug("Successfully generated summary")
                return result
            except Exception as e:
                last_error = e
                logger.warning(f"Summarization attempt {attempt} failed: {e}")
                if attempt < self.max_attempts:
                    await asyncio.sleep(calculate_exponential_backoff(attempt - 1, self.retry_base_delay))

        logger.error(f"All {self.max_attempts} summarization attempts failed: {last_error}")
        return None

    async def _generate(self, prompt: str) -> str:
        """Run one model call and return the first candidate's text."""
        client = self._get_client()
        response = await asyncio.wait_for(
            client.aio.models.generate_content(
                model=self.model,
                contents=prompt,
                config=self.generation_config,
            ),
            timeout=self.request_timeout,
        )

        if response is None:
            raise ModelResponseError("No response received from model")

        candidates = getattr(response, "candidates", None)
        if not candidates:
            raise ModelResponseError("No candidates in model response")

        content = getattr(candidates[0], "content", None)
        parts = getattr(content, "parts", None) if content is not None else None
        generated = getattr(parts[0], "text", None) if parts else None
        if not generated or not isinstance(generated, str):
            raise ModelResponseError("Invalid response structure from model")

        return generated

    def _parse_response(self, generated: str, text: str, extractor: KeywordExtractor) -> SummaryResult:
        cleaned = _CODE_FENCE.sub("", generated).strip()
        try:
            parsed = json.loads(cleaned)
            if not isinstance(parsed, dict):
                raise ValueError("model response is not a JSON object")
        except ValueError:
            logger.warning("Failed to parse AI response as JSON, using fallback parsing")
            parsed = self._extract_fields(generated, text, extractor)

        return self._sanitize(parsed, text, extractor)

    def _extract_fields(self, generated: str, text: str, extractor: KeywordExtractor) -> Dict[str, Any]:
        """Pull summary/keywords out of almost-JSON output."""
        summary_match = _SUMMARY_FIELD.search(generated)
        if not summary_match:
            return {
                "summary": extractor.fallback_summary(text),
                "keywords": extractor.extract_keywords(text),
            }

        keywords_match = _KEYWORDS_FIELD.search(generated)
        if keywords_match:
            keywords = [k.strip().replace('"', "") for k in keywords_match.group(1).split(",")]
        else:
            keywords = extractor.extract_keywords(text)

        return {"summary": summary_match.group(1), "keywords": keywords}

    def _sanitize(self, parsed: Dict[str, Any], text: str, extractor: KeywordExtractor) -> SummaryResult:
        summary = parsed.get("summary")
        if not isinstance(summary, str) or not summary.strip():
            summary = extractor.fallback_summary(text)

        keywords = parsed.get("keywords")
        if not isinstance(keywords, list):
            keywords = extractor.extract_keywords(text)

        keywords = clean_keywords(keywords)
        if not keywords:
            keywords = extractor.extract_keywords(text)

        quotes = parsed.get("quotes")
        quotes = [q.strip() for q in quotes if isinstance(q, str) and q.strip()] if isinstance(quotes, list) else []

        return SummaryResult(summary=summary.strip(), keywords=keywords, quotes=quotes)

    async def test_connection(self) -> Dict[str, str]:
        """Check that the model answers. Reports failure instead of raising."""
        try:
            result = await self._summarize_with_model(
                CONNECTION_TEST_TEXT,
                SummaryOptions(length=SummaryLength.SHORT, language="English"),
                KeywordExtractor(get_profile("English")),
            )
        except Exception as e:
            logger.error(f"AI connection test failed: {e}")
            result = None

        if result is None:
            return {"status": "error", "message": "AI connection failed"}
        return {"status": "success", "message": "AI connection successful"}


def clean_keywords(keywords: List[Any], limit: int = MAX_KEYWORDS) -> List[str]:
    """Keep non-empty trimmed string keywords, deduplicated, at most `limit`."""
    cleaned: List[str] = []
    for keyword in keywords:
        if not isinstance(keyword, str):
            continue
        keyword = keyword.strip()
        if keyword and keyword not in cleaned:
            cleaned.append(keyword)
        if len(cleaned) >= limit:
            break
    return cleaned
