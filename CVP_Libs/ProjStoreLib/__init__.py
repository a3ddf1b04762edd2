"""
ProjStoreLib - Session, local record store and résumé API

The collaborators around the photo pipeline: a demo session provider, a
JSON-file record store and the stubbed résumé CRUD endpoints.
"""

from CVP_Libs.ProjStoreLib.record_store import LocalRecordStore
from CVP_Libs.ProjStoreLib.resume_api import ResumeApi
from CVP_Libs.ProjStoreLib.resume_models import (
    Education,
    Experience,
    PersonalInfo,
    ResumeRecord,
)
from CVP_Libs.ProjStoreLib.session import MockSessionProvider, SessionUser

__all__ = [
    "LocalRecordStore",
    "ResumeApi",
    "Education",
    "Experience",
    "PersonalInfo",
    "ResumeRecord",
    "MockSessionProvider",
    "SessionUser",
]
