"""Tests for inbound payload validation."""

import pytest

from diy_hub.dto import MaterialRequest, ProjectRequest, StepRequest, parse_payload
from diy_hub.entities import RequestKind
from diy_hub.errors import ValidationError


class TestMaterialPayload:

    def test_minimal_payload(self):
        request = parse_payload(RequestKind.MATERIAL, {"name": "Paint", "quantity": 2})
        assert isinstance(request, MaterialRequest)
        assert request.quantity == 2
        assert request.category is None

    def test_project_context_alias(self):
        request = parse_payload(
            RequestKind.MATERIAL,
            {"name": "Paint", "quantity": 1.5, "projectContext": {"projectTitle": "Bedroom refresh"}},
        )
        assert request.project_context.project_title == "Bedroom refresh"

    def test_unknown_fields_are_ignored(self):
        request = parse_payload(RequestKind.MATERIAL, {"name": "Paint", "quantity": 1, "color": "blue"})
        assert not hasattr(request, "color")

    @pytest.mark.parametrize(
        "body,fragment",
        [
            ({"quantity": 2}, "name"),
            ({"name": "", "quantity": 2}, "name"),
            ({"name": "   ", "quantity": 2}, "blank"),
            ({"name": "Paint"}, "quantity"),
            ({"name": "Paint", "quantity": 0}, "positive"),
            ({"name": "Paint", "quantity": -3}, "positive"),
            ({"name": "Paint", "quantity": "2"}, "quantity"),
            ({"name": "Paint", "quantity": True}, "quantity"),
            ({"name": 7, "quantity": 2}, "name"),
            ({"name": "Paint", "quantity": 2, "specification": "x" * 2001}, "specification"),
            ({"name": "Paint", "quantity": 2, "projectContext": {"projectTitle": "t" * 201}}, "projectTitle"),
        ],
    )
    def test_invalid_payloads(self, body, fragment):
        with pytest.raises(ValidationError, match=fragment):
            parse_payload(RequestKind.MATERIAL, body)


class TestProjectPayload:

    def test_description_and_context(self):
        request = parse_payload(
            RequestKind.PROJECT,
            {"description": "Install floating shelves", "context": {"homeType": "apartment", "budget": "low"}},
        )
        assert isinstance(request, ProjectRequest)
        assert request.context.home_type == "apartment"

    def test_short_description_is_rejected(self):
        with pytest.raises(ValidationError, match="description"):
            parse_payload(RequestKind.PROJECT, {"description": "shelf"})

    def test_long_description_is_rejected(self):
        with pytest.raises(ValidationError, match="description"):
            parse_payload(RequestKind.PROJECT, {"description": "shelf " * 400})


class TestStepPayload:

    def test_aliases(self):
        request = parse_payload(RequestKind.STEP, {"stepTitle": "Sand the edges", "projectCategory": "Woodworking"})
        assert isinstance(request, StepRequest)
        assert request.step_title == "Sand the edges"
        assert request.project_category == "Woodworking"

    def test_step_title_is_required(self):
        with pytest.raises(ValidationError, match="stepTitle"):
            parse_payload(RequestKind.STEP, {"projectTitle": "Shelves"})


@pytest.mark.parametrize(
    "kind,message",
    [
        (RequestKind.MATERIAL, "Material data is required"),
        (RequestKind.PROJECT, "Project data is required"),
        (RequestKind.STEP, "Step data is required"),
    ],
)
def test_missing_body(kind, message):
    with pytest.raises(ValidationError, match=message):
        parse_payload(kind, None)


@pytest.mark.parametrize("body", [[], "Paint", 3])
def test_non_object_body(body):
    with pytest.raises(ValidationError, match="JSON object"):
        parse_payload(RequestKind.MATERIAL, body)
