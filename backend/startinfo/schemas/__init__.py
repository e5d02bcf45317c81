from .response import StandardResponse
from .lesson_progress import (
    LessonProgressRead,
    LessonProgressUpdate,
    LessonProgressUpdateRequest,
    LessonCompleteRequest,
    LessonAccessResponse,
)
from .course_progress import CourseProgress, LessonStatus
from .certificate import (
    IssueStatus,
    CertificateRead,
    CertificateRequest,
    VerifiedCertificate,
    VerificationResult,
    LessonCompletionResult,
    CertificateCreate,
)
from .course import UserCreate, CourseCreate, LessonCreate
