"""Client and target page DTOs"""

from pydantic import BaseModel, Field
from typing import List, Optional, Union
from datetime import datetime
from uuid import UUID


class TargetPageCreateDTO(BaseModel):
    url: str = Field(..., min_length=1)
    keywords: Optional[Union[str, List[str]]] = None
    description: Optional[str] = None


class TargetPageUpdateDTO(BaseModel):
    url: Optional[str] = None
    keywords: Optional[Union[str, List[str]]] = None
    description: Optional[str] = None
    status: Optional[str] = None


class TargetPageDTO(BaseModel):
    id: UUID
    client_id: UUID
    url: str
    keywords: Optional[str] = None
    keyword_list: List[str] = []
    description: Optional[str] = None
    status: str
    created_at: datetime

    class Config:
        from_attributes = True


class ClientCreateDTO(BaseModel):
    name: str = Field(..., min_length=1)
    website: Optional[str] = None
    description: Optional[str] = None
    account_id: Optional[UUID] = None


class ClientUpdateDTO(BaseModel):
    name: Optional[str] = None
    website: Optional[str] = None
    description: Optional[str] = None
    account_id: Optional[UUID] = None


class ClientDTO(BaseModel):
    id: UUID
    account_id: Optional[UUID] = None
    name: str
    website: Optional[str] = None
    description: Optional[str] = None
    created_at: datetime
    target_pages: List[TargetPageDTO] = []

    class Config:
        from_attributes = True


class KeywordGroupDTO(BaseModel):
    name: str
    keywords: List[str]
    relevance: str
    priority: int


class AhrefsUrlDTO(BaseModel):
    name: str
    url: str
    relevance: str
    keyword_count: int


class KeywordGroupsResponse(BaseModel):
    total_keywords: int
    groups: List[KeywordGroupDTO]
    ahrefs_urls: Optional[List[AhrefsUrlDTO]] = None
