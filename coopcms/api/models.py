from datetime import datetime
from typing import Annotated, Any, Dict, List, Literal, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, model_validator

from coopcms.config import Config

HEX_COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"

PAGE_TEMPLATES: Dict[str, str] = {
    "default": "Default",
    "landing": "Landing Page",
    "contact": "Contact",
    "article_list": "Article List",
    "full-width": "Full Width",
    "sidebar-left": "Left Sidebar",
    "sidebar-right": "Right Sidebar",
    "minimal": "Minimal",
}


def _check_language(value: str) -> str:
    if value not in Config.SUPPORTED_LANGUAGES:
        raise ValueError(f"Language must be one of: {', '.join(Config.SUPPORTED_LANGUAGES)}")
    return value


def _check_template(value: str) -> str:
    if value not in PAGE_TEMPLATES:
        raise ValueError(f"Template must be one of: {', '.join(PAGE_TEMPLATES)}")
    return value


Language = Annotated[str, AfterValidator(_check_language)]
Template = Annotated[str, AfterValidator(_check_template)]
HexColor = Annotated[str, Field(pattern=HEX_COLOR_PATTERN)]


class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    slug: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = None
    color: Optional[HexColor] = None
    icon: Optional[str] = Field(default=None, max_length=100)
    parent_id: Optional[int] = None
    organization_id: Optional[int] = None
    sort_order: Optional[int] = None
    is_active: bool = True
    category_type: str = Field(default="article", max_length=50)
    language: Language = Config.DEFAULT_LANGUAGE


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    slug: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = None
    color: Optional[HexColor] = None
    icon: Optional[str] = Field(default=None, max_length=100)
    parent_id: Optional[int] = None
    sort_order: Optional[int] = None
    is_active: Optional[bool] = None
    category_type: Optional[str] = Field(default=None, max_length=50)
    language: Optional[Language] = None


class PageCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    slug: Optional[str] = Field(default=None, max_length=255)
    route: Optional[str] = Field(default=None, max_length=255)
    organization_id: int
    parent_id: Optional[int] = None
    language: Language = Config.DEFAULT_LANGUAGE
    template: Template = "default"
    meta_data: Optional[Dict[str, Any]] = None
    sort_order: Optional[int] = None
    is_draft: bool = True
    requires_auth: bool = False
    allowed_roles: Optional[List[str]] = None
    search_keywords: Optional[str] = None


class PageUpdate(BaseModel):
    title: Optional[str] = Field(default=None, max_length=255)
    slug: Optional[str] = Field(default=None, max_length=255)
    route: Optional[str] = Field(default=None, max_length=255)
    parent_id: Optional[int] = None
    language: Optional[Language] = None
    template: Optional[Template] = None
    meta_data: Optional[Dict[str, Any]] = None
    sort_order: Optional[int] = None
    is_draft: Optional[bool] = None
    requires_auth: Optional[bool] = None
    allowed_roles: Optional[List[str]] = None
    search_keywords: Optional[str] = None


class VisibilityRule(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: Literal["auth_required", "role_required", "date_range"]
    roles: Optional[List[str]] = None
    start: Optional[datetime] = None
    end: Optional[datetime] = None

    @model_validator(mode="after")
    def check_date_range(self):
        if self.type != "date_range":
            return self
        if self.start is None or self.end is None:
            raise ValueError("A date_range rule needs both start and end")
        if self.end <= self.start:
            raise ValueError("The end date must be after the start date")
        return self


class ComponentCreate(BaseModel):
    page_id: int
    componentable_type: str
    componentable_id: int
    parent_id: Optional[int] = None
    position: Optional[int] = None
    language: Optional[Language] = None
    is_draft: bool = True
    version: str = Field(default="1.0", max_length=20)
    settings: Optional[Dict[str, Any]] = None
    cache_enabled: bool = True
    visibility_rules: Optional[List[VisibilityRule]] = None
    ab_test_group: Optional[str] = Field(default=None, max_length=10)


class ComponentUpdate(BaseModel):
    componentable_type: Optional[str] = None
    componentable_id: Optional[int] = None
    parent_id: Optional[int] = None
    position: Optional[int] = None
    language: Optional[Language] = None
    is_draft: Optional[bool] = None
    version: Optional[str] = Field(default=None, max_length=20)
    settings: Optional[Dict[str, Any]] = None
    cache_enabled: Optional[bool] = None
    visibility_rules: Optional[List[VisibilityRule]] = None
    ab_test_group: Optional[str] = Field(default=None, max_length=10)


class ReorderRequest(BaseModel):
    position: int


def provided_fields(payload: BaseModel) -> Dict[str, Any]:
    """Fields the client actually sent, explicit nulls included."""
    return payload.model_dump(exclude_unset=True, mode="json")
