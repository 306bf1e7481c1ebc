from app.models.user import User
from app.models.tour import Tour
from app.models.booking import Booking
from app.models.dependant import Dependant
from app.models.dependant_profile import UserDependantProfile
from app.models.audit_log import AuditLog
from app.models.review import Review
