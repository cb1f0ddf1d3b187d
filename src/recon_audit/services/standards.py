"""Standards library: digest uploaded inspection manuals into rule text."""

import logging
import time
import uuid
from typing import Callable, List

from recon_audit.errors import DocumentDigestionError
from recon_audit.schemas import StandardDocument, StandardType
from recon_audit.services.llm_client import LLMClient, get_fast_model

logger = logging.getLogger(__name__)

DIGEST_PROMPT = "Extract technical pass/fail criteria from this inspection standard document."

# Anything shorter is treated as a failed extraction.
MIN_RULES_LENGTH = 10


async def digest_standard_document(
    llm: LLMClient, blob: str, standard_type: StandardType, file_name: str = "standard.pdf"
) -> str:
    """Return the pass/fail criteria the AI extracts from a PDF.

    Raises:
        DocumentDigestionError: The AI call failed or returned too little text.
    """
    standard_type = StandardType(standard_type)
    try:
        response = await llm.generate(
            None, DIGEST_PROMPT, files=[(file_name, blob)], model=get_fast_model()
        )
    except Exception as exc:
        logger.error(f"Digestion of {standard_type.value} document failed: {exc}")
        raise DocumentDigestionError(f"Failed to digest document: {exc}") from exc

    rules = (response.text or "").strip()
    if len(rules) < MIN_RULES_LENGTH:
        raise DocumentDigestionError(
            f"Digestion of {standard_type.value} document produced no usable rules"
        )
    return rules


class StandardsService:
    """Upload and list standards documents (one per type)."""

    def __init__(
        self,
        llm: LLMClient,
        gateway,
        clock: Callable[[], int] = lambda: int(time.time() * 1000),
    ):
        self.llm = llm
        self.gateway = gateway
        self._clock = clock

    async def list(self) -> List[StandardDocument]:
        return await self.gateway.get_standards()

    async def upload(
        self, standard_type: StandardType, file_name: str, blob: str
    ) -> StandardDocument:
        """Digest ``blob`` and replace any existing document of the same type."""
        rules = await digest_standard_document(self.llm, blob, standard_type, file_name)
        doc = StandardDocument(
            id=str(uuid.uuid4()),
            type=StandardType(standard_type),
            file_name=file_name,
            upload_date=self._clock(),
            extracted_rules=rules,
        )
        await self.gateway.save_standard(doc)
        logger.info(f"Standard {doc.type.value} updated from {file_name} ({len(rules)} chars)")
        return doc
