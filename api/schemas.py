"""
Request bodies for the JSON endpoints.  Field aliases follow the
camelCase names the browser client sends.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class SectionIn(_CamelModel):
    title: str
    content: str = ""


class ReportUpdate(_CamelModel):
    sections: Optional[List[SectionIn]] = None
    title: Optional[str] = None
    custom_instructions: Optional[str] = Field(None, alias="customInstructions")


class ApplicationContext(_CamelModel):
    application_name: str = Field("", alias="applicationName")
    organization_name: str = Field("", alias="organizationName")
    application_id: str = Field("", alias="applicationId")


class EnhanceRequest(_CamelModel):
    section_title: str = Field(..., alias="sectionTitle")
    original_content: str = Field(..., alias="originalContent")
    user_request: str = Field(..., alias="userRequest")
    application_data: Optional[ApplicationContext] = Field(None, alias="applicationData")
    section_index: Optional[int] = Field(None, alias="sectionIndex")
