"""Bilingual message catalog for complex management.

Every error code maps to an Arabic and English message. Codes follow the
``COMPLEX_XXX`` format used by the complex management API.
"""

from typing import TypedDict


class BilingualMessage(TypedDict):
    """Message text in both supported languages."""

    ar: str
    en: str


ERROR_MESSAGES: dict[str, BilingualMessage] = {
    "COMPLEX_004": {
        "ar": "يجب نقل العيادات قبل إلغاء التنشيط",
        "en": "Must transfer clinics before deactivation",
    },
    "COMPLEX_005": {
        "ar": "المجمع المستهدف غير صالح للنقل",
        "en": "Invalid target complex for transfer",
    },
    "COMPLEX_006": {
        "ar": "المجمع غير موجود",
        "en": "Complex not found",
    },
    "COMPLEX_011": {
        "ar": "العيادة لا تنتمي إلى المجمع المصدر",
        "en": "Clinic does not belong to the source complex",
    },
    "VALIDATION_001": {
        "ar": "معرف غير صالح",
        "en": "Invalid identifier",
    },
    "VALIDATION_002": {
        "ar": "يجب تحديد عيادة واحدة على الأقل للنقل",
        "en": "At least one clinic must be selected for transfer",
    },
    "INTERNAL_001": {
        "ar": "حدث خطأ غير متوقع",
        "en": "An unexpected error occurred",
    },
}


def get_error_message(code: str) -> BilingualMessage:
    """Get the bilingual message for an error code, falling back to the generic one."""
    return ERROR_MESSAGES.get(code, ERROR_MESSAGES["INTERNAL_001"])
