from fastapi import FastAPI, Request, File, UploadFile, Header, Form, Depends
from fastapi.templating import Jinja2Templates
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse
from functools import lru_cache
from pathlib import Path
import logging
import random

from resume_analyzer.config import get_settings
from resume_analyzer.errors import AnalyzerError, AuthError, NotFoundError, ValidationError
from resume_analyzer.models import LoginRequest, SignupRequest
from resume_analyzer.session import SessionContext
from resume_analyzer.services.account_service import AccountService
from resume_analyzer.services.analysis_service import AnalysisService
from resume_analyzer.services.auth_service import AuthService
from resume_analyzer.services.dashboard_service import DashboardService
from resume_analyzer.services.extraction_service import build_extractor
from resume_analyzer.services.record_service import RecordService
from resume_analyzer.services.scoring_service import ScoringService, score_band, score_grade, score_verdict
from resume_analyzer.services.storage_service import StorageService

# Initialize
settings = get_settings()
logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(title="Resume Analyzer")
templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))
templates.env.filters["score_band"] = score_band
templates.env.filters["score_grade"] = score_grade
templates.env.filters["score_verdict"] = score_verdict

# Services

@lru_cache()
def get_record_service():
    return RecordService()

@lru_cache()
def get_storage_service():
    return StorageService()

@lru_cache()
def get_auth_service():
    return AuthService()

@lru_cache()
def get_scoring_service():
    rng = random.Random(settings.scoring_seed) if settings.scoring_seed is not None else None
    return ScoringService(rng=rng)

@lru_cache()
def get_extractor():
    return build_extractor(settings.text_extractor)

def get_analysis_service(
    storage_service=Depends(get_storage_service),
    record_service=Depends(get_record_service),
    scoring_service=Depends(get_scoring_service),
    extractor=Depends(get_extractor),
):
    return AnalysisService(
        storage_service,
        record_service,
        scoring_service,
        extractor,
        max_file_size=settings.max_upload_bytes,
    )

def get_account_service(
    auth_service=Depends(get_auth_service),
    record_service=Depends(get_record_service),
    storage_service=Depends(get_storage_service),
):
    return AccountService(auth_service, record_service, storage_service)

def get_dashboard_service(record_service=Depends(get_record_service)):
    return DashboardService(record_service)

# Session

def _log_session_change(session: SessionContext):
    logger.info("Session %s for %s", session.state.value, session.uid or "anonymous")

def get_session(
    request: Request,
    authorization: str = Header(None),
    auth_service=Depends(get_auth_service),
    account_service=Depends(get_account_service),
) -> SessionContext:
    """
    Resolve the caller's session.

    A Bearer header carries a Firebase ID token, the cookie carries a Firebase
    session cookie minted at login.
    """
    session = SessionContext()
    session.subscribe(_log_session_change)

    if authorization and authorization.startswith("Bearer "):
        token = authorization.split("Bearer ")[1]
        verify = auth_service.verify_token
    else:
        token = request.cookies.get(settings.session_cookie_name)
        verify = auth_service.verify_session_cookie

    if not token:
        session.restore(None)
        return session

    try:
        user = verify(token)
    except AuthError as e:
        logger.info("Rejected session token: %s", e.message)
        session.restore(None)
        return session

    session.restore(user, account_service.load_profile(user['uid']), token)
    return session

def require_user(session: SessionContext = Depends(get_session)) -> SessionContext:
    if not session.is_authenticated:
        raise AuthError("Missing or invalid token")
    return session

def _set_session_cookie(response, session_cookie: str):
    response.set_cookie(
        settings.session_cookie_name,
        session_cookie,
        max_age=settings.session_cookie_days * 24 * 60 * 60,
        httponly=True,
        samesite="lax",
    )

# Errors

@app.exception_handler(AnalyzerError)
async def analyzer_error_handler(request: Request, exc: AnalyzerError):
    if not request.url.path.startswith("/api/"):
        logger.warning("%s on %s: %s", type(exc).__name__, request.url.path, exc.message)
        session = SessionContext()
        session.restore(None)
        return render(request, "error.html", session, status_code=exc.status_code, error=exc.message)
    return JSONResponse({'detail': exc.message}, status_code=exc.status_code)

# Pages

def render(request: Request, template_name: str, session: SessionContext, status_code: int = 200, **context):
    context["session"] = session
    return templates.TemplateResponse(request, template_name, context, status_code=status_code)

def login_redirect():
    return RedirectResponse("/login", status_code=303)

@app.get("/", response_class=HTMLResponse)
async def home(request: Request, session: SessionContext = Depends(get_session)):
    return render(request, "home.html", session)

@app.get("/login", response_class=HTMLResponse)
async def login_page(request: Request, session: SessionContext = Depends(get_session)):
    if session.is_authenticated:
        return RedirectResponse("/dashboard", status_code=303)
    return render(request, "login.html", session)

@app.post("/login")
def login_form(
    request: Request,
    email: str = Form(...),
    password: str = Form(...),
    session: SessionContext = Depends(get_session),
    account_service: AccountService = Depends(get_account_service),
):
    try:
        session_cookie = account_service.start_session(account_service.login(email, password))
    except AuthError as e:
        return render(request, "login.html", session, status_code=401, error=e.message, email=email)

    response = RedirectResponse("/dashboard", status_code=303)
    _set_session_cookie(response, session_cookie)
    return response

@app.get("/register", response_class=HTMLResponse)
async def register_page(request: Request, session: SessionContext = Depends(get_session)):
    if session.is_authenticated:
        return RedirectResponse("/dashboard", status_code=303)
    return render(request, "register.html", session)

@app.post("/register")
def register_form(
    request: Request,
    name: str = Form(...),
    email: str = Form(...),
    password: str = Form(...),
    phone: str = Form(""),
    session: SessionContext = Depends(get_session),
    account_service: AccountService = Depends(get_account_service),
):
    try:
        token, _ = account_service.signup(name, email, password, phone)
        session_cookie = account_service.start_session(token)
    except (ValidationError, AuthError) as e:
        return render(
            request, "register.html", session,
            status_code=e.status_code, error=e.message, name=name, email=email, phone=phone,
        )

    response = RedirectResponse("/dashboard", status_code=303)
    _set_session_cookie(response, session_cookie)
    return response

@app.post("/logout")
async def logout_form(session: SessionContext = Depends(get_session)):
    session.sign_out()
    response = RedirectResponse("/", status_code=303)
    response.delete_cookie(settings.session_cookie_name)
    return response

@app.get("/dashboard", response_class=HTMLResponse)
def dashboard_page(
    request: Request,
    session: SessionContext = Depends(get_session),
    dashboard_service: DashboardService = Depends(get_dashboard_service),
):
    if not session.is_authenticated:
        return login_redirect()
    summary = dashboard_service.get_summary(session.uid)
    return render(request, "dashboard.html", session, summary=summary)

@app.get("/upload", response_class=HTMLResponse)
async def upload_page(request: Request, session: SessionContext = Depends(get_session)):
    if not session.is_authenticated:
        return login_redirect()
    return render(request, "upload.html", session)

@app.post("/upload")
def upload_form(
    request: Request,
    file: UploadFile = File(...),
    session: SessionContext = Depends(get_session),
    analysis_service: AnalysisService = Depends(get_analysis_service),
):
    if not session.is_authenticated:
        return login_redirect()
    try:
        analysis_id = analysis_service.submit(
            session.uid, file.filename, file.content_type, file.file.read()
        )
    except AnalyzerError as e:
        return render(request, "upload.html", session, status_code=e.status_code, error=e.message)
    return RedirectResponse(f"/results/{analysis_id}", status_code=303)

@app.get("/results/{analysis_id}", response_class=HTMLResponse)
def results_page(
    request: Request,
    analysis_id: str,
    session: SessionContext = Depends(get_session),
    analysis_service: AnalysisService = Depends(get_analysis_service),
):
    if not session.is_authenticated:
        return login_redirect()
    try:
        record = analysis_service.get_for_owner(analysis_id, session.uid)
    except NotFoundError:
        return render(request, "not_found.html", session, status_code=404)
    return render(request, "results.html", session, record=record)

@app.get("/profile", response_class=HTMLResponse)
async def profile_page(request: Request, session: SessionContext = Depends(get_session)):
    if not session.is_authenticated:
        return login_redirect()
    return render(request, "profile.html", session)

@app.post("/profile/photo")
def profile_photo_form(
    request: Request,
    file: UploadFile = File(...),
    session: SessionContext = Depends(get_session),
    account_service: AccountService = Depends(get_account_service),
):
    if not session.is_authenticated:
        return login_redirect()
    try:
        account_service.upload_profile_photo(session.uid, file.file.read(), file.content_type)
    except AnalyzerError as e:
        return render(request, "profile.html", session, status_code=e.status_code, error=e.message)
    return RedirectResponse("/profile", status_code=303)

# JSON API

@app.post("/api/auth/signup", status_code=201)
def signup(body: SignupRequest, account_service: AccountService = Depends(get_account_service)):
    token, profile = account_service.signup(body.name, body.email, body.password, body.phone)
    response = JSONResponse(
        {'token': token, 'profile': profile.model_dump(mode="json")}, status_code=201
    )
    _set_session_cookie(response, account_service.start_session(token))
    return response

@app.post("/api/auth/login")
def login(body: LoginRequest, account_service: AccountService = Depends(get_account_service)):
    token = account_service.login(body.email, body.password)
    response = JSONResponse({'token': token})
    _set_session_cookie(response, account_service.start_session(token))
    return response

@app.post("/api/auth/logout")
async def logout(session: SessionContext = Depends(get_session)):
    session.sign_out()
    response = JSONResponse({'success': True})
    response.delete_cookie(settings.session_cookie_name)
    return response

@app.get("/api/me")
async def me(session: SessionContext = Depends(require_user)):
    profile = session.profile.model_dump(mode="json") if session.profile else None
    return {'uid': session.uid, 'email': session.user.get('email'), 'profile': profile}

@app.post("/api/profile/photo")
def upload_profile_photo(
    file: UploadFile = File(...),
    session: SessionContext = Depends(require_user),
    account_service: AccountService = Depends(get_account_service),
):
    photo_url = account_service.upload_profile_photo(session.uid, file.file.read(), file.content_type)
    return {'photo_url': photo_url}

@app.post("/api/analyses", status_code=201)
def create_analysis(
    file: UploadFile = File(...),
    session: SessionContext = Depends(require_user),
    analysis_service: AnalysisService = Depends(get_analysis_service),
):
    analysis_id = analysis_service.submit(
        session.uid, file.filename, file.content_type, file.file.read()
    )
    return {'analysis_id': analysis_id}

@app.get("/api/analyses/{analysis_id}")
def get_analysis(
    analysis_id: str,
    session: SessionContext = Depends(require_user),
    analysis_service: AnalysisService = Depends(get_analysis_service),
):
    record = analysis_service.get_for_owner(analysis_id, session.uid)
    return record.model_dump(mode="json")

@app.get("/api/dashboard")
def dashboard(
    session: SessionContext = Depends(require_user),
    dashboard_service: DashboardService = Depends(get_dashboard_service),
):
    return dashboard_service.get_summary(session.uid).model_dump(mode="json")

@app.get("/health")
async def health_check():
    return {"status": "healthy"}
