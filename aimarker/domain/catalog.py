"""Static catalog of subjects, exam boards and AI models.

Pure data plus a few lookups; nothing here performs I/O.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

HISTORY_LIMIT = 10
DEFAULT_RATE_LIMIT_MS = 30000


@dataclass(frozen=True)
class Choice:
    value: str
    label: str
    has_tiers: bool = False


@dataclass(frozen=True)
class ModelInfo:
    value: str
    label: str
    badge: str


@dataclass(frozen=True)
class ModelCategory:
    category: str
    models: Tuple[ModelInfo, ...]


SUBJECTS: Tuple[Choice, ...] = (
    Choice("english", "English"),
    Choice("maths", "Maths", has_tiers=True),
    Choice("science", "Science", has_tiers=True),
    Choice("history", "History"),
    Choice("geography", "Geography"),
    Choice("computerScience", "Computer Science"),
    Choice("businessStudies", "Business Studies"),
)

EXAM_BOARDS: Tuple[Choice, ...] = (
    Choice("aqa", "AQA"),
    Choice("edexcel", "Edexcel"),
    Choice("ocr", "OCR"),
    Choice("wjec", "WJEC"),
)

USER_TYPES: Tuple[Choice, ...] = (
    Choice("student", "Student"),
    Choice("teacher", "Teacher"),
)

AI_MODELS: Tuple[ModelCategory, ...] = (
    ModelCategory(
        "Premium Models",
        (
            ModelInfo("o3", "O3", "Premium"),
            ModelInfo("o4-mini", "O4 Mini", "Fast"),
            ModelInfo("xai/grok-3", "Grok-3", "X AI"),
            ModelInfo("gemini-2.5-flash-preview-05-20", "Gemini 2.5 Flash Preview", "Google"),
        ),
    ),
    ModelCategory(
        "Free Models",
        (
            ModelInfo("deepseek/deepseek-r1-0528:free", "DeepSeek R1", "Reasoning"),
            ModelInfo("deepseek/deepseek-chat-v3-0324:free", "DeepSeek V3", "Balanced"),
            ModelInfo("xai/grok-3-mini", "Grok-3 Mini", "Fast"),
            ModelInfo("google/gemini-2.0-flash-exp:free", "Gemini 2.0 Flash", "OCR"),
        ),
    ),
)

FALLBACK_MODELS: Dict[str, str] = {
    "gemini-2.5-flash-preview-05-20": "deepseek/deepseek-chat-v3-0324:free",
    "deepseek/deepseek-chat-v3-0324:free": "microsoft/mai-ds-r1:free",
    "deepseek/deepseek-r1-0528:free": "gemini-2.5-flash-preview-05-20",
    "o3": "o4-mini",
    "o4-mini": "deepseek/deepseek-chat-v3-0324:free",
    "xai/grok-3": "deepseek/deepseek-chat-v3-0324:free",
    "google/gemini-2.0-flash-exp:free": "deepseek/deepseek-chat-v3-0324:free",
}

# Minimum spacing between requests, in milliseconds.
MODEL_RATE_LIMITS: Dict[str, int] = {
    "gemini-2.5-flash-preview-05-20": 60000,
    "deepseek/deepseek-chat-v3-0324:free": 10000,
    "microsoft/mai-ds-r1:free": 60000,
    "openrouter/masr1": 30000,
    "o3": 60000,
    "o4-mini": 30000,
    "o4": 60000,
    "xai/grok-3": 60000,
    "google/gemini-2.0-flash-exp:free": 60000,
}

TASK_SPECIFIC_MODELS: Dict[str, object] = {
    "image_processing": {
        "default": "gemini-2.5-flash-preview-05-20",
        "ocr": "google/gemini-2.0-flash-exp:free",
    },
    "subject_assessment": "gemini-2.5-flash-preview-05-20",
}

DEFAULT_THINKING_BUDGETS: Dict[str, int] = {
    "gemini-2.5-flash-preview-05-20": 1024,
    "microsoft/mai-ds-r1:free": 0,
    "o3": 4000,
    "o4-mini": 4000,
    "xai/grok-3": 2048,
    "google/gemini-2.0-flash-exp:free": 1024,
}


def all_models() -> List[ModelInfo]:
    return [model for category in AI_MODELS for model in category.models]


def is_known_model(value: str) -> bool:
    return any(model.value == value for model in all_models())


def subject_label(value: str) -> Optional[str]:
    for subject in SUBJECTS:
        if subject.value == value:
            return subject.label
    return None


def fallback_for(model: str) -> Optional[str]:
    return FALLBACK_MODELS.get(model)


def fallback_chain(model: str) -> List[str]:
    """Follow the fallback mapping from ``model`` until it ends or repeats.

    The starting model is not part of the result.
    """
    chain: List[str] = []
    seen = {model}
    current = FALLBACK_MODELS.get(model)
    while current and current not in seen:
        chain.append(current)
        seen.add(current)
        current = FALLBACK_MODELS.get(current)
    return chain


def rate_limit_ms(model: str) -> int:
    return MODEL_RATE_LIMITS.get(model, DEFAULT_RATE_LIMIT_MS)


__all__ = [
    "AI_MODELS",
    "Choice",
    "DEFAULT_RATE_LIMIT_MS",
    "DEFAULT_THINKING_BUDGETS",
    "EXAM_BOARDS",
    "FALLBACK_MODELS",
    "HISTORY_LIMIT",
    "MODEL_RATE_LIMITS",
    "ModelCategory",
    "ModelInfo",
    "SUBJECTS",
    "TASK_SPECIFIC_MODELS",
    "USER_TYPES",
    "all_models",
    "fallback_chain",
    "fallback_for",
    "is_known_model",
    "rate_limit_ms",
    "subject_label",
]
