"""
Admin workflow package
- AdminWorkflowController: manifest / product / vehicle forms, bulk status
"""

from jaybesin.workflow.admin_controller import (
    AdminWorkflowController, FormMode, FormType, SubmitResult,
)

__all__ = ["AdminWorkflowController", "FormMode", "FormType", "SubmitResult"]
