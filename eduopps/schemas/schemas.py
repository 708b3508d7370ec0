"""
Pydantic Schemas - Request/Response Validation

All API request and response schemas in one file for simplicity.
"""

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator
from typing import Optional, List, Dict
from datetime import datetime, timezone
from enum import Enum


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Stored timestamps are naive UTC; convert aware inputs."""
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


# Optional text fields where the clients send "" to mean "cleared"
OPTIONAL_OPPORTUNITY_TEXT = (
    "details", "requirements", "application_process", "image_url", "compensation",
    "ethnicity_focus", "gender_focus", "contact_person", "contact_email", "external_url",
)


# ============================================================
# ENUMS
# ============================================================

class RoleName(str, Enum):
    student = "student"
    teacher = "teacher"
    moderator = "moderator"
    admin = "admin"
    superadmin = "superadmin"


class SortOption(str, Enum):
    newest = "newest"
    oldest = "oldest"
    deadline = "deadline"
    popularity = "popularity"
    title = "title"
    updated = "updated"


class ActivityPeriod(str, Enum):
    week = "week"
    month = "month"
    all = "all"


# ============================================================
# AUTH & USER SCHEMAS
# ============================================================

class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class SchoolSummary(BaseModel):
    id: int
    name: str
    logo_url: Optional[str] = None
    description: Optional[str] = None


class UserResponse(BaseModel):
    id: int
    email: str
    username: str
    first_name: str
    last_name: str
    role_id: int
    role: Optional[str] = None
    school_id: Optional[int] = None
    is_active: bool
    profile_picture: Optional[str] = None
    created_at: datetime


class CurrentUserResponse(UserResponse):
    school: Optional[SchoolSummary] = None
    permissions: Dict[str, bool]
    navigation: Dict[str, bool] = {}


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse


class _PasswordConfirmation(BaseModel):
    password: str = Field(..., min_length=8)
    confirm_password: str

    @model_validator(mode="after")
    def passwords_match(self):
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self


class TeacherRegisterRequest(_PasswordConfirmation):
    email: EmailStr
    username: str = Field(..., min_length=3, max_length=100)
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    school_id: int


class UserCreate(_PasswordConfirmation):
    email: EmailStr
    username: str = Field(..., min_length=3, max_length=100)
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    role_id: int
    school_id: Optional[int] = None
    profile_picture: Optional[str] = None


class UserUpdate(BaseModel):
    email: Optional[EmailStr] = None
    username: Optional[str] = Field(None, min_length=3, max_length=100)
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role_id: Optional[int] = None
    school_id: Optional[int] = None
    is_active: Optional[bool] = None
    profile_picture: Optional[str] = None


class UserRoleResponse(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    can_create_opportunities: bool
    can_edit_own_opportunities: bool
    can_edit_school_opportunities: bool
    can_edit_all_opportunities: bool
    can_view_opportunities: bool
    can_manage_users: bool
    can_manage_schools: bool
    can_view_reports: bool
    can_manage_settings: bool
    can_manage_preferences: bool
    can_upload_documents: bool
    can_view_attendees: bool
    can_manage_news: bool
    requires_school: bool


# ============================================================
# SCHOOL SCHEMAS
# ============================================================

class SchoolCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=200)
    description: Optional[str] = None
    logo_url: Optional[str] = None


class SchoolUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=200)
    description: Optional[str] = None
    logo_url: Optional[str] = None


class SchoolResponse(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    logo_url: Optional[str] = None
    created_at: datetime


# ============================================================
# OPPORTUNITY SCHEMAS
# ============================================================

class _OpportunityText(BaseModel):
    @field_validator(*OPTIONAL_OPPORTUNITY_TEXT, mode="before", check_fields=False)
    @classmethod
    def blank_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("start_date", "end_date", "application_deadline", check_fields=False)
    @classmethod
    def naive_utc(cls, value):
        return to_naive_utc(value)


class OpportunityCreate(_OpportunityText):
    title: str = Field(..., min_length=1, max_length=200)
    organization: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    details: Optional[str] = None
    requirements: Optional[str] = None
    application_process: Optional[str] = None
    image_url: Optional[str] = None
    start_date: datetime
    end_date: datetime
    application_deadline: datetime
    location: str = Field(..., min_length=1)
    is_virtual: bool = False
    opportunity_type: str = Field(..., min_length=1)
    compensation: Optional[str] = None
    industry: str = Field(..., min_length=1)
    age_group: List[str] = Field(..., min_length=1)
    ethnicity_focus: Optional[str] = None
    gender_focus: Optional[str] = None
    contact_person: Optional[str] = None
    contact_email: Optional[EmailStr] = None
    external_url: Optional[str] = None
    number_of_spaces: Optional[int] = Field(None, ge=1)
    school_id: Optional[int] = None
    is_global: bool = False
    visible_to_schools: List[int] = []

    @model_validator(mode="after")
    def dates_in_order(self):
        if self.end_date < self.start_date:
            raise ValueError("End date must be on or after start date")
        return self


class OpportunityUpdate(_OpportunityText):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    organization: Optional[str] = None
    description: Optional[str] = None
    details: Optional[str] = None
    requirements: Optional[str] = None
    application_process: Optional[str] = None
    image_url: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    application_deadline: Optional[datetime] = None
    location: Optional[str] = None
    is_virtual: Optional[bool] = None
    opportunity_type: Optional[str] = None
    compensation: Optional[str] = None
    industry: Optional[str] = None
    age_group: Optional[List[str]] = None
    ethnicity_focus: Optional[str] = None
    gender_focus: Optional[str] = None
    contact_person: Optional[str] = None
    contact_email: Optional[EmailStr] = None
    external_url: Optional[str] = None
    number_of_spaces: Optional[int] = Field(None, ge=1)
    is_global: Optional[bool] = None
    visible_to_schools: Optional[List[int]] = None


class OpportunityResponse(BaseModel):
    id: int
    title: str
    organization: str
    description: str
    details: Optional[str] = None
    requirements: Optional[str] = None
    application_process: Optional[str] = None
    image_url: Optional[str] = None
    start_date: datetime
    end_date: datetime
    application_deadline: datetime
    location: str
    is_virtual: bool
    opportunity_type: str
    compensation: Optional[str] = None
    industry: str
    age_group: List[str] = []
    ethnicity_focus: Optional[str] = None
    gender_focus: Optional[str] = None
    contact_person: Optional[str] = None
    contact_email: Optional[str] = None
    external_url: Optional[str] = None
    number_of_spaces: Optional[int] = None
    created_by_id: Optional[int] = None
    school_id: Optional[int] = None
    is_global: bool
    visible_to_schools: List[int] = []
    created_at: datetime
    updated_at: datetime


class OpportunityWithRegistrations(OpportunityResponse):
    registered_count: int


class DeadlineBadge(BaseModel):
    text: str
    color: str
    is_urgent: bool


class BrowsedOpportunity(OpportunityResponse):
    interest_count: int = 0
    is_registered: bool = False
    deadline: DeadlineBadge


class OpportunityPage(BaseModel):
    items: List[BrowsedOpportunity]
    total: int
    page: int
    page_size: int
    total_pages: int
    preferences_applied: bool


class OpportunityStats(BaseModel):
    total: int
    active: int
    expired: int
    registered: int
    closing_soon: int


# ============================================================
# STUDENT INTEREST SCHEMAS
# ============================================================

class InterestCreate(BaseModel):
    opportunity_id: int
    notes: Optional[str] = None


class InterestResponse(BaseModel):
    id: int
    student_id: int
    opportunity_id: int
    registration_date: datetime
    status: str
    notes: Optional[str] = None


class AttendeeResponse(BaseModel):
    id: int
    email: str
    username: str
    first_name: str
    last_name: str
    school_id: Optional[int] = None
    school: Optional[SchoolSummary] = None
    registration_date: datetime
    status: str


# ============================================================
# DOCUMENT SCHEMAS
# ============================================================

class DocumentResponse(BaseModel):
    id: int
    opportunity_id: int
    name: str
    file_path: str
    file_type: str
    file_size: int
    object_name: Optional[str] = None
    uploaded_by_id: Optional[int] = None
    created_at: datetime


class DocumentUploadResponse(DocumentResponse):
    message: str
    storage_mode: str


class DownloadLinkResponse(BaseModel):
    download_url: str
    file_name: str
    mime_type: str
    expires_in: int


# ============================================================
# FORM REQUEST SCHEMAS
# ============================================================

class FormRequestCreate(BaseModel):
    opportunity_id: int


class FormRequestResponse(BaseModel):
    id: int
    student_id: int
    opportunity_id: int
    request_date: datetime
    fulfilled: bool
    email_sent: bool
    email_sent_date: Optional[datetime] = None


class FormRequestCreatedResponse(FormRequestResponse):
    documents_found: int
    message: str


# ============================================================
# NEWS SCHEMAS
# ============================================================

class NewsPostCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1)
    school_id: Optional[int] = None
    is_global: bool = False
    image_url: Optional[str] = None


class NewsPostUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    content: Optional[str] = Field(None, min_length=1)
    is_global: Optional[bool] = None
    image_url: Optional[str] = None


class NewsPostResponse(BaseModel):
    id: int
    title: str
    content: str
    author_id: Optional[int] = None
    school_id: Optional[int] = None
    is_global: bool
    image_url: Optional[str] = None
    likes: int
    created_at: datetime
    updated_at: datetime


# ============================================================
# PREFERENCE SCHEMAS
# ============================================================

class PreferencesUpdate(BaseModel):
    industries: Optional[List[str]] = None
    age_groups: Optional[List[str]] = None
    opportunity_types: Optional[List[str]] = None
    locations: Optional[List[str]] = None


class PreferencesResponse(BaseModel):
    id: Optional[int] = None
    user_id: int
    industries: List[str] = []
    age_groups: List[str] = []
    opportunity_types: List[str] = []
    locations: List[str] = []
    has_preferences: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ============================================================
# SETTINGS & FILTER OPTION SCHEMAS
# ============================================================

class SettingUpsert(BaseModel):
    key: str = Field(..., min_length=1, max_length=100)
    value: str
    description: Optional[str] = None


class SettingResponse(BaseModel):
    id: int
    key: str
    value: str
    description: Optional[str] = None
    updated_by_id: Optional[int] = None
    updated_at: datetime


class FilterOptionCreate(BaseModel):
    category: str = Field(..., min_length=1, max_length=50)
    value: str = Field(..., min_length=1)
    label: str = Field(..., min_length=1)


class FilterOptionUpdate(BaseModel):
    category: Optional[str] = Field(None, min_length=1, max_length=50)
    value: Optional[str] = None
    label: Optional[str] = None
    is_active: Optional[bool] = None


class FilterOptionResponse(BaseModel):
    id: int
    category: str
    value: str
    label: str
    is_active: bool
    created_by_id: Optional[int] = None
    created_at: datetime


# ============================================================
# REPORT SCHEMAS
# ============================================================

class IndustryCount(BaseModel):
    industry: str
    count: int


class AgeGroupCount(BaseModel):
    age_group: str
    count: int


class OpportunityReport(BaseModel):
    total_opportunities: int
    by_industry: List[IndustryCount]
    by_age_group: List[AgeGroupCount]
    active_opportunities: int
    expired_opportunities: int


class TeacherActivity(BaseModel):
    teacher_id: int
    teacher_first_name: str
    teacher_last_name: str
    count: int


class TeacherActivityReport(BaseModel):
    period: str
    active_teachers: int
    teacher_activity: List[TeacherActivity]


# ============================================================
# GENERIC SCHEMAS
# ============================================================

class MessageResponse(BaseModel):
    message: str
    success: bool = True
