"""
IntakeLib - Résumé text intake

Regex-based extraction of résumé fields from pasted text.
"""

from CVP_Libs.IntakeLib.field_extraction import (
    extract_address,
    extract_education,
    extract_email,
    extract_experiences,
    extract_fields,
    extract_name,
    extract_phone,
    extract_skills,
    extract_summary,
)

__all__ = [
    "extract_address",
    "extract_education",
    "extract_email",
    "extract_experiences",
    "extract_fields",
    "extract_name",
    "extract_phone",
    "extract_skills",
    "extract_summary",
]
