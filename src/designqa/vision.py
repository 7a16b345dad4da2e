"""Vision-model difference source.

Sends the reference and candidate images to an OpenAI vision model and turns
its JSON answer into :class:`DesignDifference` records. The answer carries no
positions, so every difference covers the whole display area. Output is not
deterministic and requires network access.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

from openai import OpenAI, OpenAIError

from .core.mapper import CoordinateMapper
from .core.types import DIFFERENCE_TYPES, PRIORITIES, DesignDifference
from .errors import VisionAnalysisError
from .messages import message
from .utils.image_ops import RasterImage, to_data_url

logger = logging.getLogger(__name__)

DEFAULT_VISION_MODEL = "gpt-4o"
DEFAULT_MAX_DIFFERENCES = 5

_LANGUAGES = {"en": "English", "es": "Spanish"}

PROMPT = """Analyze the visual differences between these two user interface images.
The first image is the reference design, the second is the implementation.
For each difference found provide:
1. type: exactly one of 'spacing', 'margin', 'color' or 'font'
2. description: explain the difference in {language}
3. priority: 'high', 'medium' or 'low' based on the visual impact

Important notes:
- Group similar differences
- Only report significant differences
- Focus on spacing, margins, colors and fonts
- At most {limit} differences in total

Format the response as a JSON object with a 'differences' array."""


def parse_vision_response(
    text: Optional[str],
    *,
    locale: str = "en",
    max_differences: int = DEFAULT_MAX_DIFFERENCES,
) -> List[Dict[str, str]]:
    """Validate the model answer and normalize its entries.

    Unknown types fall back to ``spacing`` and unknown priorities to
    ``medium``. An entry whose description is contained in an earlier entry
    of the same type is dropped.
    """

    if not text:
        raise VisionAnalysisError("Empty response from the vision model")
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise VisionAnalysisError(f"Vision model returned invalid JSON: {exc}") from exc
    if not isinstance(payload, dict) or not isinstance(payload.get("differences"), list):
        raise VisionAnalysisError("Vision model response has no 'differences' array")

    entries: List[Dict[str, str]] = []
    for item in payload["differences"]:
        if not isinstance(item, dict):
            continue
        entry = _normalize_entry(item, locale)
        if any(
            kept["type"] == entry["type"]
            and entry["description"].lower() in kept["description"].lower()
            for kept in entries
        ):
            continue
        entries.append(entry)
    return entries[:max_differences]


def _normalize_entry(item: Dict[str, Any], locale: str) -> Dict[str, str]:
    difference_type = str(item.get("type") or "").lower()
    if difference_type not in DIFFERENCE_TYPES:
        difference_type = "spacing"
    priority = str(item.get("priority") or "").lower()
    if priority not in PRIORITIES:
        priority = "medium"
    description = str(item.get("description") or "").strip() or message("vision_default", locale)
    return {"type": difference_type, "description": description, "priority": priority}


class VisionDifferenceSource:
    """Difference source backed by an OpenAI chat-completions vision model."""

    def __init__(
        self,
        client: Optional[Any] = None,
        *,
        model: str = DEFAULT_VISION_MODEL,
        api_key: Optional[str] = None,
        locale: str = "en",
        max_differences: int = DEFAULT_MAX_DIFFERENCES,
        max_tokens: int = 4096,
    ) -> None:
        self.model = model
        self.api_key = api_key
        self.locale = locale
        self.max_differences = max_differences
        self.max_tokens = max_tokens
        self._client = client

    def _get_client(self) -> Any:
        if self._client is None:
            if not self.api_key:
                raise VisionAnalysisError(
                    "An OpenAI API key is required for vision analysis; set OPENAI_API_KEY"
                )
            self._client = OpenAI(api_key=self.api_key)
            logger.info("Vision client initialized with model: %s", self.model)
        return self._client

    def _build_messages(self, reference: RasterImage, candidate: RasterImage) -> List[Dict[str, Any]]:
        prompt = PROMPT.format(
            language=_LANGUAGES.get(self.locale.split("-")[0], "English"),
            limit=self.max_differences,
        )
        return [
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": prompt},
                    {"type": "image_url", "image_url": {"url": to_data_url(reference)}},
                    {"type": "image_url", "image_url": {"url": to_data_url(candidate)}},
                ],
            }
        ]

    def find_differences(
        self,
        reference: RasterImage,
        candidate: RasterImage,
        mapper: CoordinateMapper,
    ) -> List[DesignDifference]:
        client = self._get_client()
        logger.info("Requesting vision analysis from %s", self.model)
        try:
            response = client.chat.completions.create(
                model=self.model,
                messages=self._build_messages(reference, candidate),
                max_tokens=self.max_tokens,
                response_format={"type": "json_object"},
            )
        except OpenAIError as exc:
            logger.error("Vision analysis request failed: %s", exc)
            raise VisionAnalysisError(f"Vision analysis request failed: {exc}") from exc

        if not response.choices:
            raise VisionAnalysisError("Vision model returned no choices")
        entries = parse_vision_response(
            response.choices[0].message.content,
            locale=self.locale,
            max_differences=self.max_differences,
        )
        logger.debug("Vision model reported %d differences", len(entries))

        counters: Dict[str, int] = {}
        differences: List[DesignDifference] = []
        for entry in entries:
            counters[entry["type"]] = counters.get(entry["type"], 0) + 1
            differences.append(
                DesignDifference(
                    id=f"vision-{entry['type']}-{counters[entry['type']]}",
                    type=entry["type"],
                    description=entry["description"],
                    location=mapper.full_area(),
                    priority=entry["priority"],
                )
            )
        return differences
