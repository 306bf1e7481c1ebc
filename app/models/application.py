"""
Visa application fields shared by the main applicant (stored on Booking)
and by each Dependant.

Form data and documents are embedded JSON values. Always assign a new
dict/list when changing them so SQLAlchemy sees the change.
"""
from app.extensions import db
from app.models.enums import ApplicationStatus, DocumentType

# Recognised form fields, in the order the application form shows them
APPLICATION_FORM_FIELDS = (
    # Personal information
    'country_of_nationality',
    'first_name',
    'father_name',
    'last_name',
    'gender',
    'marital_status',
    'date_of_birth',
    'country_of_birth',
    'city_of_birth',
    'profession',
    # Passport details
    'passport_type',
    'passport_number',
    'passport_issue_place',
    'passport_issue_date',
    'passport_expiry_date',
    # Travel information
    'expected_arrival_date',
    'expected_departure_date',
    # Current residence address
    'residence_country',
    'residence_city',
    'residence_zip_code',
    'residence_address',
)

APPLICATION_DATE_FIELDS = (
    'date_of_birth',
    'passport_issue_date',
    'passport_expiry_date',
    'expected_arrival_date',
    'expected_departure_date',
)

SLOT_ATTRIBUTES = {
    DocumentType.PERSONAL_PASSPORT_PICTURE: 'personal_passport_picture',
    DocumentType.INTERNATIONAL_PASSPORT: 'international_passport',
}


class ApplicationMixin:
    application_form_data = db.Column(db.JSON, default=dict)
    application_form_submitted = db.Column(db.Boolean, default=False, nullable=False)
    application_form_submitted_at = db.Column(db.DateTime)
    application_status = db.Column(
        db.Enum(ApplicationStatus),
        default=ApplicationStatus.PENDING,
        nullable=False
    )
    application_reviewed_at = db.Column(db.DateTime)
    application_reviewed_by = db.Column(db.String(36))

    # Documents
    personal_passport_picture = db.Column(db.JSON)
    international_passport = db.Column(db.JSON)
    supporting_documents = db.Column(db.JSON, default=list)
    # Every upload is mirrored here for clients that predate typed slots
    documents = db.Column(db.JSON, default=list)

    @property
    def application_number(self):
        return (self.application_form_data or {}).get('application_number')

    @property
    def is_application_locked(self):
        return self.application_status is not None and self.application_status.is_terminal

    def application_to_dict(self):
        form_data = dict(self.application_form_data or {})
        return {
            'application_form_data': form_data,
            'application_number': form_data.get('application_number'),
            'application_form_submitted': bool(self.application_form_submitted),
            'application_form_submitted_at': self.application_form_submitted_at.isoformat() if self.application_form_submitted_at else None,
            'application_status': self.application_status.value if self.application_status else ApplicationStatus.PENDING.value,
            'application_reviewed_at': self.application_reviewed_at.isoformat() if self.application_reviewed_at else None,
            'application_reviewed_by': self.application_reviewed_by,
        }

    def documents_to_dict(self):
        return {
            'personal_passport_picture': self.personal_passport_picture,
            'international_passport': self.international_passport,
            'supporting_documents': list(self.supporting_documents or []),
        }
