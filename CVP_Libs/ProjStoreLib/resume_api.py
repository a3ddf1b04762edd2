"""
Résumé CRUD API.

Mirrors the studio's HTTP endpoints as plain method calls returning
``(status, body)`` pairs. With ``enabled=False`` (the default) the API is a
stub: listing returns nothing, posted records get a temporary id and deletes
are acknowledged without touching storage. With ``enabled=True`` the calls
are backed by a LocalRecordStore.

Status codes:
    200 - Success
    400 - Missing record id on delete
    401 - No signed-in user
    404 - Record not found (store-backed delete only)
    503 - Backing store failed
"""

import logging
import time
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from CVP_Libs.ProjStoreLib.record_store import LocalRecordStore
from CVP_Libs.ProjStoreLib.resume_models import ResumeRecord
from CVP_Libs.ProjStoreLib.session import MockSessionProvider

logger = logging.getLogger(__name__)

Response = Tuple[int, Dict[str, Any]]

UNAUTHORIZED: Response = (401, {"error": "Unauthorized"})
STORE_UNAVAILABLE: Response = (503, {"error": "Database not available"})


def _record_from_payload(data: Dict[str, Any], owner_email: str) -> ResumeRecord:
    """Build a record from a client payload that may use either key style."""
    personal = data.get("personal_info") or data.get("personalInfo") or {}
    return ResumeRecord.from_dict({
        "personal_info": personal if isinstance(personal, dict) else {},
        "experiences": data.get("experiences") or [],
        "education": data.get("education") or [],
        "skills": data.get("skills") or [],
        "template_id": data.get("template_id") or data.get("template") or "modern",
        "owner_email": owner_email,
    })


class ResumeApi:
    """
    Résumé endpoints scoped to the signed-in user.

    Example:
        >>> session = MockSessionProvider()
        >>> api = ResumeApi(session)
        >>> api.get_resumes()
        (401, {'error': 'Unauthorized'})
    """

    def __init__(self, session: MockSessionProvider,
                 store: Optional[LocalRecordStore] = None,
                 enabled: bool = False):
        if enabled and store is None:
            raise ValueError("An enabled ResumeApi needs a record store")
        self.session = session
        self.store = store
        self.enabled = enabled

    def _owner(self) -> Optional[str]:
        user = self.session.get_current_user()
        return user.email if user else None

    def get_resumes(self) -> Response:
        """List the signed-in user's résumés."""
        owner = self._owner()
        if owner is None:
            return UNAUTHORIZED
        if not self.enabled:
            return 200, {"success": True, "cvs": []}

        try:
            records = self.store.list_records(owner)
        except (OSError, ValueError) as e:
            logger.warning(f"Listing résumés failed: {e}")
            return STORE_UNAVAILABLE
        return 200, {"success": True, "cvs": [r.to_dict() for r in records]}

    def post_resume(self, data: Dict[str, Any]) -> Response:
        """Create a résumé from a client payload."""
        owner = self._owner()
        if owner is None:
            return UNAUTHORIZED

        if not self.enabled:
            now = datetime.now().isoformat(timespec="milliseconds")
            body = dict(data)
            body.update({
                "_id": f"temp_{int(time.time() * 1000)}",
                "userEmail": owner,
                "createdAt": now,
                "updatedAt": now,
                "_isTemporary": True,
            })
            return 200, {"success": True, "data": body}

        try:
            record = self.store.create(_record_from_payload(data, owner))
        except (OSError, ValueError) as e:
            logger.warning(f"Saving résumé failed: {e}")
            return STORE_UNAVAILABLE
        return 200, {"success": True, "data": record.to_dict()}

    def delete_resume(self, record_id: Optional[str]) -> Response:
        """Delete one of the signed-in user's résumés."""
        owner = self._owner()
        if owner is None:
            return UNAUTHORIZED
        if not record_id:
            return 400, {"error": "CV ID required for deletion"}

        if not self.enabled:
            return 200, {
                "success": True,
                "id": record_id,
                "message": "CV deleted successfully",
                "_isTemporary": True,
                "_operation": "deleted",
            }

        try:
            record = self.store.get_record(record_id)
            if record is None or record.owner_email != owner:
                return 404, {"error": "CV not found"}
            self.store.delete(record_id)
        except (OSError, ValueError) as e:
            logger.warning(f"Deleting résumé {record_id} failed: {e}")
            return STORE_UNAVAILABLE
        return 200, {"success": True, "id": record_id, "message": "CV deleted successfully"}
