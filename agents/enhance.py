"""
Content enhancement — rewrite a report section with an LLM on request.

`ContentEnhancer` is the capability the API depends on; the LLM-backed
implementation keeps ``{placeholder}`` tags intact so unresolved fields
stay visible after enhancement.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from utils.llm import LLMClient

logger = logging.getLogger(__name__)


@dataclass
class EnhancementContext:
    application_name: str = ""
    organization_name: str = ""
    application_id: str = ""


class ContentEnhancer(ABC):

    @property
    def available(self) -> bool:
        return True

    @abstractmethod
    def enhance(
        self,
        section_title: str,
        original_content: str,
        user_request: str,
        context: EnhancementContext,
    ) -> str:
        ...


class LLMContentEnhancer(ContentEnhancer):
    """Asks the configured LLM to revise a section as an enterprise architect."""

    def __init__(self, client: Optional[LLMClient] = None) -> None:
        self.llm = client or LLMClient()

    @property
    def available(self) -> bool:
        return self.llm.enabled

    def enhance(self, section_title, original_content, user_request, context) -> str:
        prompt = self.build_prompt(section_title, original_content, user_request, context)
        logger.info("AI enhancing section: %s with request: %s", section_title, user_request)
        enhanced = self.llm.generate_text(prompt)
        if not enhanced:
            logger.warning("Empty completion for %s, keeping original content", section_title)
            return original_content
        return enhanced

    @staticmethod
    def build_prompt(
        section_title: str,
        original_content: str,
        user_request: str,
        context: EnhancementContext,
    ) -> str:
        return f"""
You are an enterprise architect helping to improve a report section.

IMPORTANT: Preserve any placeholder tags like {{application_name}}, {{organization_name}}, etc. that exist in the original content. These are template variables that must remain intact.

Section: {section_title}
Application: {context.application_name}
Organization: {context.organization_name}
Application ID: {context.application_id}

Original Content:
{original_content}

User Request:
{user_request}

Please enhance or modify the content based on the user's request while:
1. Keeping the same professional tone and structure
2. Preserving any placeholder tags (anything in curly braces like {{variable_name}})
3. Maintaining the technical accuracy and enterprise context
4. Ensuring the content remains relevant to the {section_title} section
5. Keeping it concise but informative (2-3 paragraphs maximum)

Return only the enhanced content, no additional formatting or explanations.
"""
