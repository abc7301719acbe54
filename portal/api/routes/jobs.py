# portal/api/routes/jobs.py
import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from fastapi.concurrency import run_in_threadpool

from portal.api.deps import Services, get_current_user, get_services, require_admin
from portal.errors import PortalError
from portal.models.job import JobCreate
from portal.models.user import User

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/jobs")
def get_all_jobs(services: Services = Depends(get_services)):
    jobs = services.jobs.list_jobs()
    return {
        "status": "success",
        "total_jobs": len(jobs),
        "jobs": [job.model_dump(mode="json") for job in jobs]
    }


@router.post("/jobs", status_code=201)
def create_job(
    payload: JobCreate,
    admin: User = Depends(require_admin),
    services: Services = Depends(get_services)
):
    try:
        job = services.jobs.create_job(payload.title, payload.description, payload.deadline)
        return {"status": "success", "job": job.model_dump(mode="json")}
    except PortalError:
        raise
    except Exception as e:
        logger.error(f"[Job Creation] Error: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/jobs/{job_id}")
def get_job(job_id: str, services: Services = Depends(get_services)):
    job = services.jobs.get_job(job_id)
    return {"status": "success", "job": job.model_dump(mode="json")}


@router.delete("/jobs/{job_id}")
def delete_job(
    job_id: str,
    admin: User = Depends(require_admin),
    services: Services = Depends(get_services)
):
    services.jobs.delete_job(job_id)
    return {"status": "success", "message": "Job deleted successfully"}


@router.post("/jobs/{job_id}/resumes", status_code=201)
async def upload_resume(
    job_id: str,
    file: UploadFile = File(...),
    agency: Optional[str] = Form(None),
    name: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    phone: Optional[str] = Form(None),
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services)
):
    """
    Submit a PDF resume for a job. Admins name the submitting agency by
    email or name in `agency`; agencies always submit as themselves. When
    `phone` is omitted the phone number is read from the PDF.
    """
    if not user.is_admin:
        agency = user.email
    try:
        content = await file.read()
        # extraction is blocking; keep it off the event loop
        resume = await run_in_threadpool(
            services.resumes.submit_resume,
            job_id,
            agency,
            content,
            filename=file.filename,
            content_type=file.content_type,
            candidate_name=name,
            candidate_email=email,
            candidate_phone=phone,
        )
        return {
            "status": "success",
            "resume": resume.model_dump(mode="json"),
            "message": "Resume uploaded successfully."
        }
    except PortalError:
        raise
    except Exception as e:
        logger.error(f"Resume upload error: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to upload resume: {e}")


@router.get("/jobs/{job_id}/resumes")
def get_job_resumes(job_id: str, services: Services = Depends(get_services)):
    snapshots = services.resumes.list_job_snapshots(job_id)
    return {
        "status": "success",
        "total_resumes": len(snapshots),
        "resumes": [s.model_dump(mode="json") for s in snapshots]
    }
