from pydantic import BaseModel, Field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

class AnalysisStatus(str, Enum):
    ANALYZING = "analyzing"
    COMPLETED = "completed"
    FAILED = "failed"

class SectionFeedback(BaseModel):
    score: int = Field(ge=0, le=100)
    feedback: str

class ScoreBreakdown(BaseModel):
    keyword_score: float
    format_score: float
    content_score: float
    length_score: float

class AnalysisResult(BaseModel):
    score: int = Field(ge=0, le=100)
    keywords_found: List[str]
    strengths: List[str]
    improvements: List[str]
    section_feedback: Dict[str, SectionFeedback]
    breakdown: ScoreBreakdown

class AnalysisRecord(BaseModel):
    id: str
    owner_id: str
    file_name: str
    file_reference: str
    # presigned on read, never stored
    file_url: Optional[str] = None
    score: int = Field(ge=0, le=100)
    keywords_found: List[str] = []
    strengths: List[str] = []
    improvements: List[str] = []
    section_feedback: Dict[str, SectionFeedback] = {}
    uploaded_at: Optional[datetime] = None
    status: AnalysisStatus = AnalysisStatus.COMPLETED

class UserProfile(BaseModel):
    uid: str
    name: str
    email: str
    phone: str = ""
    photo_key: Optional[str] = None
    # presigned on read, never stored
    photo_url: Optional[str] = None
    created_at: datetime

class DashboardSummary(BaseModel):
    total_analyses: int
    average_score: int
    recent: List[AnalysisRecord]

class SignupRequest(BaseModel):
    name: str
    email: str
    password: str
    phone: str = ""

class LoginRequest(BaseModel):
    email: str
    password: str
