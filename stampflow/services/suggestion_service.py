from __future__ import annotations

from typing import Any, Optional

from mistralai import Mistral

from stampflow.core.config import Settings, get_settings
from stampflow.core.logging import configure_logging

logger = configure_logging("suggestion")

PROMPT_TEMPLATE = """
Analyze the following text extracted from a business PDF document.
Your goal is to find a specific Reference Number, Policy Number, Order ID, or PB Number that needs to be stamped.

Common formats include: "PB 123456", "Ref: #999", "PO-2024-X".

Return ONLY the code/number string found. Do not add labels like "Found:" or markdown.
If multiple exist, pick the most likely primary identifier.
If nothing resembling a code is found, return an empty string.

Text content:
"{text}"
"""


def build_suggestion_client(settings: Optional[Settings] = None) -> Optional[Mistral]:
    """إنشاء عميل Mistral من الإعدادات؛ يعيد None عند غياب المفتاح."""
    settings = settings or get_settings()
    api_key = (settings.mistral_api_key or "").strip()
    if not api_key:
        logger.warning("لم يتم ضبط مفتاح Mistral API؛ ميزة الاقتراح معطلة.")
        return None
    logger.info("تم تهيئة عميل Mistral للاقتراحات.")
    return Mistral(api_key=api_key)


class TextSuggestionAdapter:
    """
    اقتراح رمز مرجعي من نص الصفحة باستخدام نموذج Mistral.

    النتيجة استشارية فقط: أي فشل في الشبكة أو الاستجابة يعني "لا يوجد اقتراح"
    ولا يمنع عملية الختم.
    """

    def __init__(
        self,
        client: Any,
        model: Optional[str] = None,
        max_chars: Optional[int] = None,
        min_chars: Optional[int] = None,
    ) -> None:
        settings = get_settings()
        self.client = client
        self.model = model or settings.mistral_model
        self.max_chars = max_chars or settings.suggestion_max_chars
        self.min_chars = min_chars if min_chars is not None else settings.suggestion_min_chars

    def suggest(self, text: str) -> str:
        if self.client is None or not text or len(text) < self.min_chars:
            return ""

        prompt = PROMPT_TEMPLATE.format(text=text[: self.max_chars])
        try:
            response = self.client.chat.complete(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
            )
            content = response.choices[0].message.content if response.choices else None
        except Exception:
            logger.exception("Suggestion request to Mistral failed.")
            return ""

        if not isinstance(content, str):
            logger.warning("Mistral returned no usable suggestion.")
            return ""

        suggestion = content.strip()
        logger.info("Suggestion received (%s chars).", len(suggestion))
        return suggestion
