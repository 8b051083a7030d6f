from src.modules.forms.models import FormSubmission, FormTemplate
from src.modules.forms.service import FormService

__all__ = ["FormSubmission", "FormTemplate", "FormService"]
