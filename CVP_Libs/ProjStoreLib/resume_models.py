"""
Résumé record data model.

A ResumeRecord is the collaborator-side data the finished photo is handed
to: personal info, work experience, education and skills. Records are stored
as JSON, so every class converts to and from plain dictionaries.

Classes:
    PersonalInfo: Name, contact details, summary and photo reference
    Experience: A single work experience entry
    Education: A single education entry
    ResumeRecord: A complete résumé owned by one user
"""

import uuid
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional


def _now_iso() -> str:
    return datetime.now().isoformat(timespec="seconds")


def _new_id() -> str:
    return uuid.uuid4().hex


@dataclass
class PersonalInfo:
    """Personal details shown at the top of a résumé.

    Attributes:
        photo: Path of the exported CV photo, or None
    """
    name: str = ""
    email: str = ""
    phone: str = ""
    address: str = ""
    summary: str = ""
    photo: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PersonalInfo":
        filtered = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        return cls(**filtered)


@dataclass
class Experience:
    company: str = ""
    position: str = ""
    duration: str = ""
    description: str = ""
    id: str = field(default_factory=_new_id)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Experience":
        filtered = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        return cls(**filtered)


@dataclass
class Education:
    # id comes first: the "field" attribute shadows dataclasses.field below it
    id: str = field(default_factory=_new_id)
    institution: str = ""
    degree: str = ""
    field: str = ""
    year: str = ""
    gpa: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Education":
        filtered = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        return cls(**filtered)


@dataclass
class ResumeRecord:
    """
    A complete résumé.

    Attributes:
        personal_info: PersonalInfo block
        experiences: Work experience entries, most recent first
        education: Education entries
        skills: Free-form skill names
        template_id: Résumé layout template identifier
        owner_email: Email of the user who owns the record
        id: Unique record id
        created_at: ISO timestamp of creation
        updated_at: ISO timestamp of the last update
    """
    personal_info: PersonalInfo = field(default_factory=PersonalInfo)
    experiences: List[Experience] = field(default_factory=list)
    education: List[Education] = field(default_factory=list)
    skills: List[str] = field(default_factory=list)
    template_id: str = "modern"
    owner_email: str = ""
    id: str = field(default_factory=_new_id)
    created_at: str = field(default_factory=_now_iso)
    updated_at: str = field(default_factory=_now_iso)

    def touch(self) -> None:
        """Refresh updated_at."""
        self.updated_at = _now_iso()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "personal_info": self.personal_info.to_dict(),
            "experiences": [e.to_dict() for e in self.experiences],
            "education": [e.to_dict() for e in self.education],
            "skills": list(self.skills),
            "template_id": self.template_id,
            "owner_email": self.owner_email,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ResumeRecord":
        """
        Create from dictionary, ignoring unknown keys.

        Raises:
            ValueError: If data is not a dictionary
        """
        if not isinstance(data, dict):
            raise ValueError(f"Résumé record must be a JSON object, got {type(data).__name__}")

        kwargs: Dict[str, Any] = {
            k: v for k, v in data.items()
            if k in cls.__dataclass_fields__
            and k not in ("personal_info", "experiences", "education", "skills")
        }
        personal = data.get("personal_info")
        if isinstance(personal, dict):
            kwargs["personal_info"] = PersonalInfo.from_dict(personal)
        kwargs["experiences"] = [
            Experience.from_dict(e) for e in data.get("experiences") or [] if isinstance(e, dict)
        ]
        kwargs["education"] = [
            Education.from_dict(e) for e in data.get("education") or [] if isinstance(e, dict)
        ]
        kwargs["skills"] = [str(s) for s in data.get("skills") or []]
        return cls(**kwargs)
