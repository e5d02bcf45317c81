# This file makes the 'models' directory a Python package.

from .user import User
from .course import Course, Lesson
from .lesson_progress import LessonProgress
from .certificate import Certificate
