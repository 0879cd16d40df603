"""Step shape validation, per-step checks and submit-time completeness."""

from typing import Any, List, Mapping

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from onboarding.core.exceptions import ValidationError
from onboarding.models.document import FormDocument
from onboarding.services.forms.descriptor import DocumentTypeDescriptor
from onboarding.services.forms.requirements import RequirementContext, collect_violations
from onboarding.utils.logging import get_logger

LOGGER = get_logger(__name__)


class StepValidator:
    """Validates payloads and documents of one document type.

    Shape validation guards every save and is deliberately permissive so
    drafts can be saved half-filled. Requirements are only enforced as a
    whole on submit; per step they are reported without raising.
    """

    def __init__(self, descriptor: DocumentTypeDescriptor):
        self.descriptor = descriptor

    def validate_shape(self, step: int, payload: Mapping[str, Any]) -> BaseModel:
        """Parse a step payload with its schema.

        Raises:
            ValidationError: Carrying the schema error list unchanged
        """
        definition = self.descriptor.step(step)
        try:
            return definition.schema.model_validate(payload or {})
        except PydanticValidationError as e:
            errors = e.errors(include_url=False, include_context=False, include_input=False)
            LOGGER.info(
                "Step payload failed shape validation",
                extra={
                    "document_type": self.descriptor.document_type.value,
                    "step": step,
                    "error_count": len(errors),
                },
            )
            raise ValidationError(f"Step {step} validation failed", errors=errors, original_error=e) from e

    def context_for(self, document: FormDocument) -> RequirementContext:
        return RequirementContext(
            snapshot=self.descriptor.snapshot(document),
            rules=self.descriptor.rules,
            completed_steps=frozenset(document.completed_steps),
        )

    def check_step(self, document: FormDocument, step: int) -> List[str]:
        """Outstanding requirement messages of one step; never raises for violations."""
        definition = self.descriptor.step(step)
        return collect_violations(definition.requirements, self.context_for(document))

    def completeness_violations(self, document: FormDocument) -> List[str]:
        return collect_violations(self.descriptor.requirements, self.context_for(document))

    def validate_completeness(self, document: FormDocument) -> None:
        """Walk every visible step of the document and fail with all violations at once.

        Raises:
            ValidationError: Listing every violation found
        """
        violations = self.completeness_violations(document)
        if violations:
            LOGGER.info(
                "Document failed completeness validation",
                extra={"document_id": str(document.id), "violation_count": len(violations)},
            )
            raise ValidationError(f"{self.descriptor.label} validation failed", errors=violations)
