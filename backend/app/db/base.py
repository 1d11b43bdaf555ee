from backend.app.db.base_class import Base

# Import models to register metadata for Base.metadata.create_all in tests
from backend.app.models.user import User  # noqa: F401
from backend.app.models.lead_source import LeadSource  # noqa: F401
from backend.app.models.lead import Lead  # noqa: F401
from backend.app.models.conversion_details import ConversionDetails  # noqa: F401
from backend.app.models.lead_status_history import LeadStatusHistory  # noqa: F401
from backend.app.models.course import Course  # noqa: F401
