"""Tests for request and result models."""

import pytest
from pydantic import ValidationError

from prio_router.engine.schemas import (
    ClassificationRequest,
    ClassificationResult,
    Quadrant,
    RequestOptions,
    RoutingResponse,
    RoutingStats,
)


class TestQuadrant:
    """Tests for Quadrant."""

    @pytest.mark.parametrize(
        "urgent,important,expected",
        [
            (True, True, Quadrant.DO_FIRST),
            (False, True, Quadrant.SCHEDULE),
            (True, False, Quadrant.DELEGATE),
            (False, False, Quadrant.ELIMINATE),
        ],
    )
    def test_from_flags(self, urgent, important, expected):
        """Test exactly one quadrant per flag pair."""
        quadrant = Quadrant.from_flags(urgent, important)

        assert quadrant == expected
        assert quadrant.is_urgent is urgent
        assert quadrant.is_important is important

    def test_from_label(self):
        """Test model and user labels."""
        assert Quadrant.from_label("DO") == Quadrant.DO_FIRST
        assert Quadrant.from_label("do first") == Quadrant.DO_FIRST
        assert Quadrant.from_label("Schedule") == Quadrant.SCHEDULE
        assert Quadrant.from_label("later") is None


class TestRequests:
    """Tests for ClassificationRequest."""

    def test_ids_are_unique(self):
        """Test each request gets its own id."""
        assert ClassificationRequest(text="a").id != ClassificationRequest(text="a").id

    def test_requests_are_immutable(self):
        """Test frozen requests."""
        request = ClassificationRequest(text="Call mom")

        with pytest.raises(ValidationError):
            request.text = "Call dad"

    def test_option_validation(self):
        """Test option ranges."""
        with pytest.raises(ValidationError):
            RequestOptions(max_tokens=0)
        with pytest.raises(ValidationError):
            RequestOptions(temperature=3.0)
        with pytest.raises(ValidationError):
            RequestOptions(timeout_seconds=0)


class TestResponses:
    """Tests for RoutingResponse serialization."""

    def test_json_roundtrip_keeps_result_variant(self):
        """Test the discriminated result survives JSON."""
        response = RoutingResponse(
            request_id="r1",
            result=ClassificationResult(
                quadrant=Quadrant.SCHEDULE,
                confidence=0.7,
                explanation="x",
                is_urgent=False,
                is_important=True,
            ),
        )

        restored = RoutingResponse.model_validate_json(response.model_dump_json())

        assert isinstance(restored.result, ClassificationResult)
        assert restored == response

    def test_stats_accuracy(self):
        """Test accuracy from counters."""
        assert RoutingStats().accuracy() == 0.0
        assert RoutingStats(total_requests=10, override_count=2).accuracy() == pytest.approx(0.8)
