"""Database models package."""

from .user import User, ROLES, ROLE_LEVELS, role_level
from .restaurant import Restaurant, slugify_name
from .review import Review, DeletedReview, ManagerResponse, REVIEW_TYPES, CRITERIA_FIELDS
from .error_report import ErrorReport, REPORT_STATUSES
from .notification import Notification

__all__ = [
    'User',
    'ROLES',
    'ROLE_LEVELS',
    'role_level',
    'Restaurant',
    'slugify_name',
    'Review',
    'DeletedReview',
    'ManagerResponse',
    'REVIEW_TYPES',
    'CRITERIA_FIELDS',
    'ErrorReport',
    'REPORT_STATUSES',
    'Notification',
]
