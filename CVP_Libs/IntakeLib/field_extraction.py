"""
Résumé field extraction from free text.

Pulls the personal-info fields, experience, education and skills out of
pasted résumé text or a chat message with regular expressions. Extraction is
best-effort: a field that cannot be found comes back empty, and
``extract_fields`` never raises on any string input.

Section headings are recognised in English and Indonesian
(SUMMARY / RINGKASAN, SKILLS / SKILL TEKNIS, EXPERIENCE / PENGALAMAN,
EDUCATION / PENDIDIKAN).

Functions:
    extract_fields: Extract every field into a dictionary
    extract_name, extract_email, extract_phone, extract_address,
    extract_summary, extract_experiences, extract_education,
    extract_skills: Single-field extractors
"""

import logging
import re
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

MAX_NAME_LENGTH = 30
MAX_ADDRESS_LENGTH = 100
MAX_SUMMARY_LENGTH = 800
MAX_DESCRIPTION_LENGTH = 500
MAX_SKILL_LENGTH = 40
MAX_SKILLS = 15
MIN_PHONE_DIGITS = 10

EMAIL_RE = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")
PHONE_RE = re.compile(r"\+?\d[\d -]{8,}\d")

SECTION_HEADINGS = {
    "summary": r"(?:PROFESSIONAL\s+)?SUMMARY|PROFILE|RINGKASAN(?:\s+PROFESIONAL)?",
    "skills": r"(?:TECHNICAL\s+)?SKILLS?(?:\s+TEKNIS)?|KEAHLIAN",
    "experience": r"(?:WORK\s+|PROFESSIONAL\s+)?EXPERIENCE|PENGALAMAN(?:\s+KERJA)?",
    "education": r"EDUCATION|PENDIDIKAN",
    "projects": r"PROJECTS?|PROYEK",
}

# Words that mark a heading line rather than a person's name
NAME_STOPWORDS = ("PROFESSIONAL", "SUMMARY", "SKILL", "EXPERIENCE", "EDUCATION",
                  "PENGALAMAN", "PENDIDIKAN", "TEKNIS", "CURRICULUM", "RESUME")

NAME_PATTERNS = [
    # All-caps name at the start of a line, e.g. "JANE DOE | Bandung"
    re.compile(r"^([A-Z]{2,}(?:[ \t]+[A-Z]{2,})+)(?=[\s|,]|$)", re.MULTILINE),
    re.compile(r"\b(?i:my\s+name\s+is|nama\s+saya(?:\s+adalah)?|i\s+am|saya)\s+"
               r"([A-Z][a-z]+(?:[ \t]+[A-Z][a-z]+)*)"),
    re.compile(r"\b(?i:name|nama)\s*:\s*([A-Z][a-zA-Z]+(?:[ \t]+[A-Z][a-zA-Z]+)*)"),
]

# "City, Region" with a region of at most three capitalised words
_PLACE = r"([A-Z][\w.]*(?:[ \t]+[\w.]+)*?,[ \t]*[A-Z][a-z]+(?:[ \t]+[A-Z][a-z]+){0,2})"

ADDRESS_PATTERNS = [
    re.compile(r"\b(?i:address|alamat)\s*:?[ \t]*" + _PLACE),
    re.compile(r"\b(?i:i\s+live\s+in|live\s+in|based\s+in|from|dari|tinggal\s+di)[ \t]+" + _PLACE),
    # "JANE DOE | Bandung, West Java"
    re.compile(r"\|[ \t]*" + _PLACE),
]

EXPERIENCE_LINE_RE = re.compile(
    r"^[ \t]*(?![A-Za-z]{3,9}[ \t]+\d{4})([A-Z][\w.&' ]{1,60}?)[ \t]+[–—][ \t]+"
    r"([^\n|]+?)[ \t]*(?:\|[ \t]*([^\n]+))?$",
    re.MULTILINE,
)
DURATION_RE = re.compile(
    r"((?:[A-Za-z]{3,9}\s+)?\d{4}\s*[–—-]\s*(?:(?:[A-Za-z]{3,9}\s+)?\d{4}|present|now|sekarang))",
    re.IGNORECASE,
)
EDUCATION_LINE_RE = re.compile(
    r"^[ \t]*((?:[A-Z][\w.]* +)*(?:University|Universitas|Institute|Institut|College|"
    r"Politeknik|Polytechnic|School|Sekolah)(?: +(?:of|and|the|[A-Z][\w.]*))*)"
    r"[ \t]*[–—-][ \t]*([^\n]+)$",
    re.MULTILINE,
)
YEAR_RANGE_RE = re.compile(r"\d{4}\s*[–—-]\s*\d{4}|\b\d{4}\b")
GPA_RE = re.compile(r"\b(?:GPA|IPK)\s*:?\s*[\d.,]+(?:\s*/\s*[\d.,]+)?", re.IGNORECASE)
SKILL_SPLIT_RE = re.compile(r"[,;•·|]|\s[-*]\s|^\s*[-*]\s")


def _section(text: str, name: str) -> str:
    """Body of a section: from its heading to the next known heading line."""
    others = "|".join(SECTION_HEADINGS[n] for n in SECTION_HEADINGS if n != name)
    pattern = re.compile(
        rf"(?:^|\n)[ \t]*(?:{SECTION_HEADINGS[name]})\b[ \t]*:?\s*(.*?)"
        rf"(?=\n[ \t]*(?:{others})\b|\Z)",
        re.IGNORECASE | re.DOTALL,
    )
    match = pattern.search(text)
    return match.group(1).strip() if match else ""


def extract_name(text: str) -> str:
    for pattern in NAME_PATTERNS:
        for match in pattern.finditer(text):
            name = re.split(r"[|+\d@]", match.group(1))[0].strip()
            if not name or len(name) > MAX_NAME_LENGTH:
                continue
            if any(word in name.upper() for word in NAME_STOPWORDS):
                continue
            return name
    return ""


def extract_email(text: str) -> str:
    match = EMAIL_RE.search(text)
    return match.group(0) if match else ""


def extract_phone(text: str) -> str:
    for match in PHONE_RE.finditer(text):
        candidate = match.group(0).strip()
        if sum(c.isdigit() for c in candidate) >= MIN_PHONE_DIGITS:
            return candidate
    return ""


def extract_address(text: str) -> str:
    for pattern in ADDRESS_PATTERNS:
        match = pattern.search(text)
        if not match:
            continue
        address = match.group(1).strip(" .")
        if 3 <= len(address) <= MAX_ADDRESS_LENGTH:
            return address
    return ""


def extract_summary(text: str) -> str:
    summary = re.sub(r"\s+", " ", _section(text, "summary"))
    if len(summary) > MAX_SUMMARY_LENGTH:
        summary = summary[:MAX_SUMMARY_LENGTH] + "..."
    return summary


def extract_experiences(text: str) -> List[Dict[str, str]]:
    """
    Experience entries from "Company – Position | Duration" lines.

    Lines following an entry up to the next entry form its description.
    """
    body = _section(text, "experience") or text
    matches = [m for m in EXPERIENCE_LINE_RE.finditer(body)
               if not EDUCATION_LINE_RE.match(m.group(0))]
    experiences = []
    for index, match in enumerate(matches):
        position = match.group(2).strip()
        duration = (match.group(3) or "").strip()
        if not duration:
            found = DURATION_RE.search(position)
            if found:
                duration = found.group(1).strip()
                position = position.replace(found.group(0), "").strip(" ,()")

        end = matches[index + 1].start() if index + 1 < len(matches) else len(body)
        description = re.sub(r"\s+", " ", body[match.end():end]).strip()
        if not duration:
            found = DURATION_RE.match(description)
            if found:
                duration = found.group(1).strip()
                description = description[found.end():].strip()

        experiences.append({
            "id": str(len(experiences) + 1),
            "company": match.group(1).strip(),
            "position": position,
            "duration": duration,
            "description": description[:MAX_DESCRIPTION_LENGTH],
        })
    return experiences


def extract_education(text: str) -> List[Dict[str, str]]:
    """Education entries from "Institution – Degree, Field | GPA | Years" lines."""
    body = _section(text, "education") or text
    educations = []
    for match in EDUCATION_LINE_RE.finditer(body):
        rest = match.group(2)
        year_match = YEAR_RANGE_RE.search(rest)
        gpa_match = GPA_RE.search(rest)
        degree_part = rest.split("|")[0]
        if year_match:
            degree_part = degree_part.replace(year_match.group(0), "")
        if gpa_match:
            degree_part = degree_part.replace(gpa_match.group(0), "")
        degree, _, field_of_study = degree_part.partition(",")

        educations.append({
            "id": str(len(educations) + 1),
            "institution": match.group(1).strip(),
            "degree": degree.strip(" ,"),
            "field": field_of_study.strip(" ,"),
            "year": year_match.group(0).strip() if year_match else "",
            "gpa": gpa_match.group(0).strip() if gpa_match else "",
        })
    return educations


def extract_skills(text: str) -> List[str]:
    """Skills listed in the skills section, case-insensitively unique, at most 15."""
    body = _section(text, "skills")
    if not body:
        return []

    skills: List[str] = []
    seen = set()
    for line in body.splitlines():
        # "Languages: Python, SQL" lists the items after the label
        if ":" in line:
            line = line.split(":", 1)[1]
        for item in SKILL_SPLIT_RE.split(line):
            skill = item.strip(" .-*\t")
            if not skill or len(skill) > MAX_SKILL_LENGTH:
                continue
            key = skill.lower()
            if key in seen:
                continue
            seen.add(key)
            skills.append(skill)
            if len(skills) >= MAX_SKILLS:
                return skills
    return skills


def extract_fields(text: Optional[str]) -> Dict[str, Any]:
    """
    Extract every résumé field from free text.

    Args:
        text: Pasted résumé or chat message (None is treated as empty)

    Returns:
        Dict with keys name, email, phone, address, summary (strings) and
        experiences, education, skills (lists). Missing fields are empty.
    """
    text = text if isinstance(text, str) else ""
    fields = {
        "name": extract_name(text),
        "email": extract_email(text),
        "phone": extract_phone(text),
        "address": extract_address(text),
        "summary": extract_summary(text),
        "experiences": extract_experiences(text),
        "education": extract_education(text),
        "skills": extract_skills(text),
    }
    found = [k for k, v in fields.items() if v]
    logger.debug(f"Extracted fields: {', '.join(found) or 'none'}")
    return fields
