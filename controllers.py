# controllers.py
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, Query, Request, UploadFile
from sqlalchemy.orm import Session

from db import get_db
from report_service import read_upload
from schemas import SignupRequest, SigninRequest, ConvertGuestRequest, ProfileUpdateRequest

router = APIRouter()
auth_router = APIRouter(prefix="/auth", tags=["auth"])
pothole_router = APIRouter(prefix="/pothole", tags=["pothole"])

TRUTHY = ("1", "true", "yes", "on")


def current_user_id(request: Request) -> str:
    return request.state.user_id


def get_auth_service(request: Request):
    return request.app.state.auth_service


def get_report_service(request: Request):
    return request.app.state.report_service


def get_dashboard_service(request: Request):
    return request.app.state.dashboard_service


def get_detector(request: Request):
    return request.app.state.detector


def get_settings(request: Request):
    return request.app.state.settings


@router.get("/health")
def health():
    return {"status": "ok"}


# ---- auth ----

@auth_router.post("/signup", status_code=201)
def signup(body: SignupRequest, db: Session = Depends(get_db), auth=Depends(get_auth_service)):
    token, user = auth.register(db, body)
    return {
        "success": True,
        "message": "User created successfully",
        "token": token,
        "user": user.public_dict(),
    }


@auth_router.post("/signin")
def signin(body: SigninRequest, db: Session = Depends(get_db), auth=Depends(get_auth_service)):
    token, user = auth.login(db, body)
    return {
        "success": True,
        "message": "User signed in successfully",
        "token": token,
        "user": user.public_dict(),
    }


@auth_router.post("/guest-signin")
def guest_signin(db: Session = Depends(get_db), auth=Depends(get_auth_service)):
    token, user = auth.guest_login(db)
    return {"success": True, "message": "Guest signed in", "token": token, "user": user.public_dict()}


@auth_router.post("/convert-guest")
def convert_guest(
    body: ConvertGuestRequest,
    db: Session = Depends(get_db),
    user_id: str = Depends(current_user_id),
    auth=Depends(get_auth_service),
):
    token, user = auth.convert_guest(db, user_id, body)
    return {
        "success": True,
        "message": "Account converted successfully",
        "token": token,
        "user": user.public_dict(),
    }


@auth_router.get("/profile")
def get_profile(db: Session = Depends(get_db), user_id: str = Depends(current_user_id),
                auth=Depends(get_auth_service)):
    return {"success": True, "user": auth.get_profile(db, user_id)}


@auth_router.put("/profile")
def update_profile(
    body: ProfileUpdateRequest,
    db: Session = Depends(get_db),
    user_id: str = Depends(current_user_id),
    auth=Depends(get_auth_service),
):
    auth.update_profile(db, user_id, body)
    return {"success": True, "message": "Profile updated successfully", "user": auth.get_profile(db, user_id)}


# ---- pothole ----

@pothole_router.post("/upload")
def upload_report(
    background_tasks: BackgroundTasks,
    image: Optional[UploadFile] = File(None),
    latitude: Optional[str] = Form(None),
    longitude: Optional[str] = Form(None),
    address: Optional[str] = Form(None),
    detectionResultPercentage: Optional[str] = Form(None),
    share: Optional[str] = Form(None),
    db: Session = Depends(get_db),
    user_id: str = Depends(current_user_id),
    reports=Depends(get_report_service),
    settings=Depends(get_settings),
):
    upload = read_upload(image, settings.max_upload_bytes)
    report = reports.submit_report(
        db, user_id, upload, latitude, longitude, detectionResultPercentage, address=address
    )
    data = report.to_dict()
    if share and share.strip().lower() in TRUTHY:
        background_tasks.add_task(reports.share, data)
    return {"success": True, "report": data}


@pothole_router.post("/detect")
def detect(
    image: Optional[UploadFile] = File(None),
    detector=Depends(get_detector),
    settings=Depends(get_settings),
):
    upload = read_upload(image, settings.max_upload_bytes)
    return {"success": True, **detector.detect(upload.data)}


@pothole_router.get("/dashboard")
def dashboard(db: Session = Depends(get_db), user_id: str = Depends(current_user_id),
              dashboards=Depends(get_dashboard_service)):
    return {"success": True, "data": dashboards.get_dashboard(db, user_id)}


@pothole_router.get("/recent-reports")
def recent_reports(
    limit: int = Query(5),
    db: Session = Depends(get_db),
    user_id: str = Depends(current_user_id),
    reports=Depends(get_report_service),
):
    items = reports.recent_reports(db, user_id, limit=limit)
    return {"success": True, "data": [r.to_dict() for r in items]}


@pothole_router.get("/report/{report_id}")
def get_report(report_id: str, db: Session = Depends(get_db), user_id: str = Depends(current_user_id),
               reports=Depends(get_report_service)):
    return {"success": True, "data": reports.get_report(db, user_id, report_id).to_dict()}


@pothole_router.post("/report/{report_id}/share", status_code=202)
def share_report(
    report_id: str,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    user_id: str = Depends(current_user_id),
    reports=Depends(get_report_service),
):
    report = reports.get_report(db, user_id, report_id)
    background_tasks.add_task(reports.share, report.to_dict())
    return {"success": True, "message": "Share scheduled"}
