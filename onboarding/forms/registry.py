"""Lookup of document type descriptors."""

from typing import Dict, Union

from onboarding.core.exceptions import NotFoundError
from onboarding.forms import accreditation, additional_holder, alt_order, investor_profile, statement
from onboarding.models.document import DocumentType
from onboarding.services.forms.descriptor import DocumentTypeDescriptor

DESCRIPTORS: Dict[DocumentType, DocumentTypeDescriptor] = {
    descriptor.document_type: descriptor
    for descriptor in (
        investor_profile.DESCRIPTOR,
        additional_holder.DESCRIPTOR,
        alt_order.DESCRIPTOR,
        accreditation.DESCRIPTOR,
        statement.DESCRIPTOR,
    )
}


def get_descriptor(document_type: Union[DocumentType, str]) -> DocumentTypeDescriptor:
    """Descriptor for a document type or its string value.

    Raises:
        NotFoundError: For unknown document types
    """
    try:
        return DESCRIPTORS[DocumentType(document_type)]
    except ValueError as e:
        raise NotFoundError("Document type", document_type) from e
