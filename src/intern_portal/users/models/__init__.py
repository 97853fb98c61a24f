from .user import User, UserRole, STAFF_ROLES
from .intern_profile import InternProfile
from .session_record import SessionRecord

__all__ = ['User', 'UserRole', 'STAFF_ROLES', 'InternProfile', 'SessionRecord']
