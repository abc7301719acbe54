# portal/api/routes/resumes.py
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from portal.api.deps import Services, get_current_user, get_services, require_admin
from portal.errors import PortalError
from portal.models.resume import StatusChange
from portal.models.user import User

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/resumes/job/{job_id}")
def get_resumes_by_job(job_id: str, services: Services = Depends(get_services)):
    resumes = services.resumes.list_resumes_for_job(job_id)
    return {
        "status": "success",
        "total_resumes": len(resumes),
        "resumes": [r.model_dump(mode="json") for r in resumes]
    }


@router.get("/resumes/agency/{agency_id}")
def get_resumes_by_agency(agency_id: str, services: Services = Depends(get_services)):
    resumes = services.resumes.list_resumes_for_agency(agency_id)
    return {
        "status": "success",
        "total_resumes": len(resumes),
        "resumes": [r.model_dump(mode="json") for r in resumes]
    }


@router.patch("/resumes/{resume_id}/status")
def update_resume_status(
    resume_id: str,
    payload: StatusChange,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services)
):
    try:
        resume = services.resumes.change_status(resume_id, payload.status, user.role, user.id)
        return {"status": "success", "resume": resume.model_dump(mode="json")}
    except PortalError:
        raise
    except Exception as e:
        logger.error(f"Error updating resume status: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/resumes/consistency")
def check_consistency(
    job_id: Optional[str] = None,
    admin: User = Depends(require_admin),
    services: Services = Depends(get_services)
):
    issues = services.resumes.find_inconsistencies(job_id)
    return {
        "status": "success",
        "total_issues": len(issues),
        "issues": [vars(issue) for issue in issues]
    }


@router.post("/resumes/consistency/reconcile")
def reconcile(
    job_id: Optional[str] = None,
    admin: User = Depends(require_admin),
    services: Services = Depends(get_services)
):
    repaired = services.resumes.reconcile(job_id)
    return {"status": "success", "repaired": repaired}
