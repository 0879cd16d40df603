from onboarding.models.document import (
    AccountHolder,
    DocumentStatus,
    DocumentType,
    FormDocument,
    HolderType,
    OwnerRef,
    StepState,
)

__all__ = [
    "AccountHolder",
    "DocumentStatus",
    "DocumentType",
    "FormDocument",
    "HolderType",
    "OwnerRef",
    "StepState",
]
