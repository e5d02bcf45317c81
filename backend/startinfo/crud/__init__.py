from .crud_progress import progress
from .crud_course import course, lesson
from .crud_user import user
from .crud_certificate import certificate
