"""
OpenAI client factory and async chat wrapper.

The factory uses Azure OpenAI when credentials are available and falls back
to the standard OpenAI API otherwise.

Environment variables:
    # Azure OpenAI (preferred when available)
    AZURE_OPENAI_API_KEY      - Azure OpenAI API key
    AZURE_OPENAI_BASE_URL     - Azure OpenAI endpoint (e.g., https://xxx.openai.azure.com/openai/v1/)
    AZURE_OPENAI_ENDPOINT     - Alternative to BASE_URL (e.g., https://xxx.openai.azure.com/)
    AZURE_OPENAI_API_VERSION  - API version (default: 2024-02-15-preview)
    AZURE_OPENAI_DEPLOYMENT   - Default deployment name (default: gpt-4o)

    # Standard OpenAI (fallback)
    OPENAI_API_KEY            - OpenAI API key
    OPENAI_MODEL              - Default model (default: gpt-4o)
    OPENAI_FAST_MODEL         - Model for short follow-up tasks (default: gpt-4o-mini)
"""

import asyncio
import logging
import os
from typing import Any, List, Optional, Sequence, Tuple

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

DEFAULT_API_VERSION = "2024-02-15-preview"
DEFAULT_DEPLOYMENT = "gpt-4o"
DEFAULT_FAST_MODEL = "gpt-4o-mini"
DEFAULT_IMAGE_MIME = "image/jpeg"


def _get_azure_endpoint() -> Optional[str]:
    """Get and normalize the Azure OpenAI endpoint."""
    endpoint = os.getenv("AZURE_OPENAI_ENDPOINT") or os.getenv("AZURE_OPENAI_BASE_URL")
    if not endpoint:
        return None

    endpoint = endpoint.rstrip("/")
    if endpoint.endswith("/openai/v1"):
        endpoint = endpoint[: -len("/openai/v1")]
    elif endpoint.endswith("/openai"):
        endpoint = endpoint[: -len("/openai")]

    return endpoint


def is_azure_openai_configured() -> bool:
    """Check if Azure OpenAI credentials are configured."""
    return bool(os.getenv("AZURE_OPENAI_API_KEY") and _get_azure_endpoint())


def get_openai_client(api_key: Optional[str] = None):
    """
    Create an OpenAI client, using Azure OpenAI if configured.

    Raises:
        ValueError: If no valid credentials are found.
    """
    azure_api_key = os.getenv("AZURE_OPENAI_API_KEY")
    azure_endpoint = _get_azure_endpoint()

    if azure_api_key and azure_endpoint:
        from openai import AzureOpenAI

        logger.debug(f"Creating AzureOpenAI client with endpoint: {azure_endpoint[:30]}...")
        return AzureOpenAI(
            api_key=azure_api_key,
            api_version=os.getenv("AZURE_OPENAI_API_VERSION", DEFAULT_API_VERSION),
            azure_endpoint=azure_endpoint,
        )

    standard_api_key = api_key or os.getenv("OPENAI_API_KEY")
    if standard_api_key:
        from openai import OpenAI

        logger.debug("Creating standard OpenAI client")
        return OpenAI(api_key=standard_api_key)

    raise ValueError(
        "No OpenAI credentials found. Set either:\n"
        "  - AZURE_OPENAI_API_KEY + AZURE_OPENAI_BASE_URL (for Azure OpenAI)\n"
        "  - OPENAI_API_KEY (for standard OpenAI)"
    )


def get_default_model() -> str:
    """Deployment name on Azure, model name on OpenAI."""
    if is_azure_openai_configured():
        return os.getenv("AZURE_OPENAI_DEPLOYMENT", DEFAULT_DEPLOYMENT)
    return os.getenv("OPENAI_MODEL", DEFAULT_DEPLOYMENT)


def get_fast_model() -> str:
    """Cheaper model for clarifications, VIN reads and document digestion."""
    if is_azure_openai_configured():
        return os.getenv("AZURE_OPENAI_FAST_DEPLOYMENT") or get_default_model()
    return os.getenv("OPENAI_FAST_MODEL", DEFAULT_FAST_MODEL)


# =============================================================================
# RESPONSE MODELS
# =============================================================================


class Citation(BaseModel):
    """A web source the model grounded its answer on."""

    title: str = Field(default="", description="Page title, may be empty")
    uri: str = Field(..., description="Source URL")


class LLMResponse(BaseModel):
    text: str
    citations: List[Citation] = Field(default_factory=list)


def to_data_uri(blob: str, mime_type: str = DEFAULT_IMAGE_MIME) -> str:
    """Accept a data URI or bare base64 payload and return a data URI."""
    if blob.startswith("data:"):
        return blob
    return f"data:{mime_type};base64,{blob}"


def _extract_citations(message: Any) -> List[Citation]:
    citations = []
    for annotation in getattr(message, "annotations", None) or []:
        if getattr(annotation, "type", None) != "url_citation":
            continue
        ref = getattr(annotation, "url_citation", None)
        url = getattr(ref, "url", None)
        if url:
            citations.append(Citation(title=getattr(ref, "title", "") or "", uri=url))
    return citations


class LLMClient:
    """Async facade over the synchronous OpenAI chat completions API.

    Args:
        client: An OpenAI/AzureOpenAI client. Created lazily from the
            environment when omitted.
        model: Default model for ``generate`` calls.
    """

    def __init__(self, client: Any = None, model: Optional[str] = None):
        self._client = client
        self.model = model or get_default_model()

    @property
    def client(self):
        if self._client is None:
            self._client = get_openai_client()
        return self._client

    def build_messages(
        self,
        system: Optional[str],
        prompt: str,
        images: Sequence[str] = (),
        files: Sequence[Tuple[str, str]] = (),
    ) -> List[dict]:
        """Chat messages with attachments placed before the prompt text."""
        content: List[dict] = []
        for image in images:
            content.append({"type": "image_url", "image_url": {"url": to_data_uri(image)}})
        for file_name, blob in files:
            content.append({
                "type": "file",
                "file": {
                    "filename": file_name,
                    "file_data": to_data_uri(blob, "application/pdf"),
                },
            })
        content.append({"type": "text", "text": prompt})

        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": content})
        return messages

    async def generate(
        self,
        system: Optional[str],
        prompt: str,
        images: Sequence[str] = (),
        model: Optional[str] = None,
        files: Sequence[Tuple[str, str]] = (),
    ) -> LLMResponse:
        """Run one chat completion. SDK errors propagate to the caller."""
        messages = self.build_messages(system, prompt, images, files)
        model_name = model or self.model
        logger.debug(
            f"Calling {model_name} with {len(images)} image(s), {len(files)} file(s)"
        )

        response = await asyncio.to_thread(
            self.client.chat.completions.create,
            model=model_name,
            messages=messages,
        )
        message = response.choices[0].message
        return LLMResponse(
            text=message.content or "",
            citations=_extract_citations(message),
        )
