"""Request DTOs for API endpoints.

Wire names are camelCase (``stepTitle``, ``projectContext``); Python
attributes are snake_case and mapped through aliases.
"""

from typing import Any

from pydantic import BaseModel, Field, StrictFloat, StrictInt, StrictStr, field_validator
from pydantic import ValidationError as PydanticValidationError

from diy_hub.entities import RequestKind
from diy_hub.errors import ValidationError

_CONFIG = {"populate_by_name": True, "extra": "ignore"}

# Upper bounds on free-text fields, in characters
LABEL_MAX = 100
TITLE_MAX = 200
TEXT_MAX = 2000


class ProjectContext(BaseModel):
    """Project a material belongs to."""

    project_title: StrictStr | None = Field(None, alias="projectTitle", max_length=TITLE_MAX)
    project_category: StrictStr | None = Field(None, alias="projectCategory", max_length=LABEL_MAX)

    model_config = _CONFIG


class MaterialRequest(BaseModel):
    """Request DTO for material enhancement."""

    name: StrictStr = Field(
        ..., description="Generic material name, e.g. 'Paint'", min_length=1, max_length=TITLE_MAX
    )
    quantity: StrictInt | StrictFloat = Field(..., description="Requested quantity")
    category: StrictStr | None = Field(None, description="Material category", max_length=LABEL_MAX)
    unit: StrictStr | None = Field(None, description="Quantity unit", max_length=LABEL_MAX)
    specification: StrictStr | None = Field(
        None, description="Current specification, if any", max_length=TEXT_MAX
    )
    project_context: ProjectContext | None = Field(None, alias="projectContext")

    model_config = _CONFIG

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Material name must not be blank")
        return value

    @field_validator("quantity")
    @classmethod
    def _quantity_positive(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("Material quantity must be a positive number")
        return value


class GenerationContext(BaseModel):
    """Household context for project generation."""

    home_type: StrictStr | None = Field(None, alias="homeType", max_length=LABEL_MAX)
    experience_level: StrictStr | None = Field(None, alias="experienceLevel", max_length=LABEL_MAX)
    budget: StrictStr | None = Field(None, max_length=LABEL_MAX)

    model_config = _CONFIG


class ProjectRequest(BaseModel):
    """Request DTO for project generation."""

    description: StrictStr = Field(
        ...,
        description="Problem or project description",
        min_length=10,
        max_length=TEXT_MAX,
    )
    context: GenerationContext | None = None

    model_config = _CONFIG


class StepRequest(BaseModel):
    """Request DTO for step explanation."""

    step_title: StrictStr = Field(..., alias="stepTitle", min_length=3, max_length=TITLE_MAX)
    project_title: StrictStr | None = Field(None, alias="projectTitle", max_length=TITLE_MAX)
    project_category: StrictStr | None = Field(None, alias="projectCategory", max_length=LABEL_MAX)

    model_config = _CONFIG


REQUEST_MODELS: dict[RequestKind, type[BaseModel]] = {
    RequestKind.MATERIAL: MaterialRequest,
    RequestKind.PROJECT: ProjectRequest,
    RequestKind.STEP: StepRequest,
}

_SUBJECTS = {
    RequestKind.MATERIAL: "Material",
    RequestKind.PROJECT: "Project",
    RequestKind.STEP: "Step",
}


def _describe(error: PydanticValidationError) -> str:
    first = error.errors()[0]
    location = ".".join(str(part) for part in first["loc"]) or "body"
    return f"{location}: {first['msg']}"


def parse_payload(kind: RequestKind, body: Any) -> BaseModel:
    """Validate a raw request body into the DTO for its kind.

    Args:
        kind: Request kind
        body: Decoded JSON body

    Returns:
        The validated request DTO

    Raises:
        ValidationError: Naming the first missing or invalid field
    """
    if body is None:
        raise ValidationError(f"{_SUBJECTS[kind]} data is required")
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")

    try:
        return REQUEST_MODELS[kind].model_validate(body)
    except PydanticValidationError as e:
        raise ValidationError(_describe(e)) from e
