"""Per-document-type configuration consumed by the generic form services."""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Type

from pydantic import BaseModel

from onboarding.core.exceptions import ValidationError
from onboarding.models.document import DocumentType, FormDocument, HolderType
from onboarding.services.forms.requirements import Requirement
from onboarding.services.forms.visibility import VisibilityRuleSet

SIGNATURE_PARTS = (
    ("signature", "signature_data"),
    ("printed_name", "printed_name"),
    ("date", "signature_date"),
)


@dataclass(frozen=True)
class StepDefinition:
    """One wizard step of a document type.

    Attributes:
        number: 1-based step number
        title: Display title
        schema: Permissive pydantic model validating the step payload
        holder_type: Set when the step's scalars live on an account holder
        collections: Payload keys holding full-replace child collections
        field_prefix: Prefix applied to scalar keys when they are stored
        requirements: Completeness rules owned by the step
    """

    number: int
    title: str
    schema: Type[BaseModel]
    holder_type: Optional[HolderType] = None
    collections: Tuple[str, ...] = ()
    field_prefix: str = ""
    requirements: Tuple[Requirement, ...] = ()


@dataclass(frozen=True)
class DocumentTypeDescriptor:
    """Everything that makes one document type different from another.

    Attributes:
        document_type: The type described
        label: Human-readable name used in messages
        steps: Step definitions, numbered 1..N
        rules: Field and step visibility rules
        signature_collection: Collection of typed signature rows, if any
        derive: Adds derived values to a snapshot in place
        conditional_fields: Snapshot keys exposed as PDF conditional fields
        form_id: Template identifier sent to the PDF webhook
        pdf_row_keys: Collection name to the row column that keys its PDF fields
    """

    document_type: DocumentType
    label: str
    steps: Tuple[StepDefinition, ...]
    rules: VisibilityRuleSet
    signature_collection: Optional[str] = None
    derive: Optional[Callable[[Dict[str, Any]], None]] = None
    conditional_fields: Tuple[str, ...] = field(default_factory=tuple)
    form_id: str = ""
    pdf_row_keys: Mapping[str, str] = field(default_factory=dict)

    @property
    def total_steps(self) -> int:
        return len(self.steps)

    def step(self, number: int) -> StepDefinition:
        """Step definition by number.

        Raises:
            ValidationError: If the number is outside 1..total_steps
        """
        if not 1 <= number <= self.total_steps:
            raise ValidationError(
                f"Invalid step number {number} for {self.label.lower()}; "
                f"expected 1 to {self.total_steps}"
            )
        return self.steps[number - 1]

    @property
    def requirements(self) -> List[Requirement]:
        return [requirement for step in self.steps for requirement in step.requirements]

    def snapshot(self, document: FormDocument) -> Dict[str, Any]:
        """Flatten a document into the key space the rules are written against.

        Document fields and collections keep their names, holder fields and
        collections are prefixed with the holder type, and typed signature
        rows become ``{signature_type}_signature`` / ``_printed_name`` / ``_date``.
        """
        values: Dict[str, Any] = dict(document.fields)
        values.update(document.children)

        for holder_key, holder in document.account_holders.items():
            for name, value in holder.fields.items():
                values[f"{holder_key}_{name}"] = value
            for name, rows in holder.children.items():
                values[f"{holder_key}_{name}"] = rows

        return self.snapshot_from_values(values)

    def snapshot_from_values(self, values: Mapping[str, Any]) -> Dict[str, Any]:
        """Finish a flat value map the same way stored documents are finished.

        Works on a copy: typed signature rows are flattened and the derive
        hook is applied.
        """
        snapshot: Dict[str, Any] = dict(values)
        if self.signature_collection:
            for row in snapshot.get(self.signature_collection) or []:
                signature_type = row.get("signature_type") if isinstance(row, Mapping) else None
                if not signature_type:
                    continue
                for suffix, key in SIGNATURE_PARTS:
                    snapshot[f"{signature_type}_{suffix}"] = row.get(key)

        if self.derive is not None:
            self.derive(snapshot)
        return snapshot
