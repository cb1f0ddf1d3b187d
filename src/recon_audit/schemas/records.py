"""Reference records managed from the admin panel."""

from pydantic import BaseModel, Field

from .enums import StandardType


class StandardDocument(BaseModel):
    """Digested standards document. At most one is active per ``type``."""

    id: str
    type: StandardType
    file_name: str = Field(..., description="Original uploaded filename")
    upload_date: int = Field(..., description="Upload time, epoch milliseconds")
    extracted_rules: str = Field(..., description="Rule text extracted by the AI")


class Appraiser(BaseModel):
    id: str
    name: str


class Technician(BaseModel):
    id: str
    name: str
    tech_number: str = Field(default="", description="Shop technician number")
