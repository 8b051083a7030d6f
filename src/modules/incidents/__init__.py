from src.modules.incidents.models import Incident, IncidentStatus, IncidentType
from src.modules.incidents.service import IncidentService

__all__ = ["Incident", "IncidentStatus", "IncidentType", "IncidentService"]
