"""Tests for inference backends and reply parsing."""

import json
from datetime import date

import httpx
import pytest
from langchain_core.language_models.fake_chat_models import FakeListChatModel

from prio_router.config import Settings
from prio_router.engine.errors import BackendFailureError, UnsupportedRequestTypeError
from prio_router.engine.factory import build_backend, build_router
from prio_router.engine.prompts import PRIORITY_STEPWISE_SYSTEM_PROMPT, PromptTemplate
from prio_router.engine.providers import (
    AnthropicBackend,
    ChatModelBackend,
    GoogleBackend,
    LlamaServerBackend,
    OpenAIBackend,
)
from prio_router.engine.providers.parsing import (
    extract_json,
    parse_classification,
    parse_goal,
    parse_result,
    parse_task,
)
from prio_router.engine.schemas import (
    ClassificationRequest,
    ParsedTask,
    Quadrant,
    RequestType,
    TextResult,
)


@pytest.fixture
def mock_settings():
    """Create settings with every cloud key configured."""
    return Settings(
        _env_file=None,
        anthropic_api_key="test-key",
        openai_api_key="test-key",
        google_api_key="test-key",
    )


class TestReplyParsing:
    """Tests for language model reply parsing."""

    def test_extract_json_from_surrounding_text(self):
        """Test JSON embedded in prose."""
        data = extract_json('Sure! {"quadrant": "DO", "confidence": 0.9} Hope that helps.')

        assert data == {"quadrant": "DO", "confidence": 0.9}

    def test_extract_json_malformed(self):
        """Test malformed objects are ignored."""
        assert extract_json("{quadrant: DO}") is None
        assert extract_json("no json here") is None

    def test_classification_from_json(self):
        """Test the happy path."""
        result = parse_classification(
            '{"quadrant": "DO", "confidence": 0.85, "reasoning": "Client outage"}'
        )

        assert result.quadrant == Quadrant.DO_FIRST
        assert result.confidence == pytest.approx(0.85)
        assert result.explanation == "Client outage"
        assert result.is_urgent is True
        assert result.is_important is True

    def test_classification_defaults(self):
        """Test missing and unknown fields."""
        result = parse_classification('{"quadrant": "WHENEVER"}')

        assert result.quadrant == Quadrant.SCHEDULE
        assert result.confidence == pytest.approx(0.6)
        assert result.explanation == "AI classification"

    def test_classification_confidence_clamped(self):
        """Test out-of-range confidence."""
        result = parse_classification('{"quadrant": "ELIMINATE", "confidence": 1.5}')

        assert result.quadrant == Quadrant.ELIMINATE
        assert result.confidence == 1.0
        assert result.is_urgent is False
        assert result.is_important is False

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("QUADRANT: DELEGATE because it is routine", Quadrant.DELEGATE),
            ('the answer is "eliminate"', Quadrant.ELIMINATE),
            ("I cannot decide", Quadrant.SCHEDULE),
        ],
    )
    def test_classification_from_text_markers(self, text, expected):
        """Test replies without JSON."""
        result = parse_classification(text)

        assert result.quadrant == expected
        assert result.confidence == pytest.approx(0.5)
        assert result.explanation == "Parsed from raw output"

    def test_parse_task(self):
        """Test task extraction reply."""
        task = parse_task(
            '{"title": "Call the dentist", "due_date": "2024-01-16", '
            '"due_time": "15:00", "priority": "null"}',
            "fallback",
        )

        assert task.title == "Call the dentist"
        assert task.due_date == date(2024, 1, 16)
        assert task.due_time == "15:00"
        assert task.priority is None

    def test_parse_task_bad_fields(self):
        """Test invalid dates and times are dropped."""
        task = parse_task('{"due_date": "soon", "due_time": "3pm"}', "Original text")

        assert task.title == "Original text"
        assert task.due_date is None
        assert task.due_time is None

    def test_parse_task_without_json(self):
        """Test prose replies are failures."""
        with pytest.raises(BackendFailureError):
            parse_task("I think you should call the dentist", "x")

    def test_parse_goal(self):
        """Test structured goal reply."""
        goal = parse_goal(
            '{"refined_goal": "Run a 10k by June", "measurable": "10km", '
            '"milestones": ["5k in March", "8k in May"]}',
            "Get fit",
        )

        assert goal.refined_goal == "Run a 10k by June"
        assert goal.measurable == "10km"
        assert goal.milestones == ["5k in March", "8k in May"]

    def test_text_types_pass_through(self):
        """Test generative types keep the raw text."""
        result = parse_result(RequestType.GENERATE_BRIEFING, "  Good morning!  ", "")

        assert result == TextResult(text="Good morning!")


class TestRuleBasedBackend:
    """Tests for RuleBasedBackend."""

    @pytest.mark.asyncio
    async def test_classify(self, rule_based):
        """Test classification responses carry rule-based provenance."""
        request = ClassificationRequest(text="Browse social media during lunch break")

        response = await rule_based.complete(request)

        assert response.request_id == request.id
        assert response.result.quadrant == Quadrant.ELIMINATE
        assert response.metadata.provider_id == "rule-based"
        assert response.metadata.model_id == "rule-based-v1"
        assert response.metadata.was_rule_based is True
        assert response.metadata.confidence_score == pytest.approx(0.85)

    def test_parse_task_cleans_title(self, rule_based):
        """Test date, time and command prefix removal."""
        task = rule_based.parse_task("Remind me to call the dentist tomorrow at 3pm")

        assert isinstance(task, ParsedTask)
        assert task.title == "Call the dentist"
        assert task.due_date == date(2024, 1, 16)
        assert task.due_time == "15:00"
        assert task.suggested_quadrant is not None

    def test_parse_task_todo_prefix(self, rule_based):
        """Test the todo: prefix."""
        task = rule_based.parse_task("todo: submit   expense report by Friday")

        assert task.title == "Submit expense report"
        assert task.due_date == date(2024, 1, 19)

    def test_unsupported_type_raises(self, rule_based):
        """Test generative requests are rejected."""
        request = ClassificationRequest(text="Hi", request_type=RequestType.GENERAL_CHAT)

        with pytest.raises(UnsupportedRequestTypeError):
            rule_based.respond(request)

    def test_no_cost(self, rule_based):
        """Test cost estimate is unknown."""
        assert rule_based.estimate_cost(ClassificationRequest(text="x")) is None


class TestChatModelBackends:
    """Tests for LangChain-backed cloud backends."""

    @pytest.mark.asyncio
    async def test_anthropic_classification(self, mock_settings):
        """Test a chat reply becomes a classification."""
        llm = FakeListChatModel(
            responses=['{"quadrant": "SCHEDULE", "confidence": 0.8, "reasoning": "Long-term goal"}']
        )
        backend = AnthropicBackend(mock_settings, llm=llm)

        response = await backend.complete(ClassificationRequest(text="Learn Spanish"))

        assert response.success is True
        assert response.result.quadrant == Quadrant.SCHEDULE
        assert response.metadata.backend_id == "anthropic"
        assert response.metadata.model_id == mock_settings.anthropic_model
        assert response.metadata.confidence_score == pytest.approx(0.8)
        assert response.raw_text.startswith("{")

    @pytest.mark.asyncio
    async def test_unparseable_task_reply_is_failure(self, mock_settings):
        """Test task replies without JSON produce a failure result."""
        backend = OpenAIBackend(mock_settings, llm=FakeListChatModel(responses=["No idea."]))
        request = ClassificationRequest(text="Call mom", request_type=RequestType.PARSE_TASK)

        response = await backend.complete(request)

        assert response.success is False
        assert response.result is None
        assert "no JSON" in response.error

    @pytest.mark.asyncio
    async def test_general_chat(self, mock_settings):
        """Test text types return the reply verbatim."""
        backend = GoogleBackend(mock_settings, llm=FakeListChatModel(responses=["Drink water."]))
        request = ClassificationRequest(text="Tip?", request_type=RequestType.GENERAL_CHAT)

        response = await backend.complete(request)

        assert response.result == TextResult(text="Drink water.")

    @pytest.mark.asyncio
    async def test_generic_backend_needs_a_model(self):
        """Test the generic adapter names itself when no chat model is available."""
        backend = ChatModelBackend(model="custom-model")

        with pytest.raises(BackendFailureError, match="no chat model") as exc_info:
            await backend.complete(ClassificationRequest(text="Call mom"))

        assert exc_info.value.backend_id == backend.backend_id

    @pytest.mark.asyncio
    async def test_generic_backend_with_injected_model(self):
        """Test any LangChain chat model can be injected."""
        backend = ChatModelBackend(
            model="custom-model",
            llm=FakeListChatModel(responses=['{"quadrant": "DELEGATE", "confidence": 0.7}']),
        )

        response = await backend.complete(ClassificationRequest(text="Book a room"))

        assert response.result.quadrant == Quadrant.DELEGATE
        assert response.metadata.model_id == "custom-model"

    def test_missing_key_raises(self):
        """Test backends require credentials."""
        settings = Settings(_env_file=None, anthropic_api_key=None)

        with pytest.raises(ValueError):
            AnthropicBackend(settings)

    def test_cost_calculation(self, mock_settings):
        """Test pricing tables."""
        backend = OpenAIBackend(mock_settings)

        cost = backend.calculate_cost(1_000_000, 1_000_000, "gpt-4o-mini")

        assert cost == pytest.approx(0.75)
        assert backend.get_pricing("unknown-model") == OpenAIBackend.DEFAULT_PRICING

    def test_estimate_cost(self, mock_settings):
        """Test estimates grow with max tokens."""
        backend = AnthropicBackend(mock_settings)
        small = ClassificationRequest(text="Call mom")
        large = ClassificationRequest(text="Call mom", options={"max_tokens": 4096})

        assert 0 < backend.estimate_cost(small) < backend.estimate_cost(large)


class TestLlamaServerBackend:
    """Tests for the local inference server backend."""

    def make_backend(self, handler, stepwise_prompts=False):
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return LlamaServerBackend(
            base_url="http://llama.local",
            model_id="phi-3-mini",
            template=PromptTemplate.PHI3,
            stepwise_prompts=stepwise_prompts,
            http_client=client,
        )

    @pytest.mark.asyncio
    async def test_initialize_probes_health(self):
        """Test a healthy server makes the backend available."""
        backend = self.make_backend(lambda request: httpx.Response(200, json={"status": "ok"}))

        assert backend.is_available is False
        assert await backend.initialize() is True
        assert backend.is_available is True

    @pytest.mark.asyncio
    async def test_unhealthy_server(self):
        """Test a loading server stays unavailable."""
        backend = self.make_backend(lambda request: httpx.Response(503))

        assert await backend.initialize() is False
        assert backend.is_available is False

    @pytest.mark.asyncio
    async def test_completion(self):
        """Test prompt formatting and reply parsing."""
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(
                200,
                json={
                    "content": '{"quadrant": "DELEGATE", "confidence": 0.7, "reasoning": "Routine"}',
                    "tokens_predicted": 18,
                },
            )

        backend = self.make_backend(handler)
        response = await backend.complete(ClassificationRequest(text="Book a meeting room"))

        payload = json.loads(requests[0].content)
        assert requests[0].url.path == "/completion"
        assert payload["prompt"].startswith("<|user|>\n")
        assert payload["prompt"].endswith("<|assistant|>\n")
        assert payload["stop"] == ["<|end|>", "<|user|>"]
        assert payload["n_predict"] == 256

        assert response.result.quadrant == Quadrant.DELEGATE
        assert response.metadata.backend_id == "local"
        assert response.metadata.tokens_used == 18
        assert response.metadata.cost_usd == 0.0

    @pytest.mark.asyncio
    async def test_stepwise_prompts(self):
        """Test small models get the short classification prompt."""
        prompts: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            prompts.append(json.loads(request.content)["prompt"])
            return httpx.Response(200, json={"content": '{"quadrant": "DO"}'})

        backend = self.make_backend(handler, stepwise_prompts=True)
        response = await backend.complete(ClassificationRequest(text="Fix the outage"))

        assert PRIORITY_STEPWISE_SYSTEM_PROMPT in prompts[0]
        assert 'Task: "Fix the outage"\nClassify:' in prompts[0]
        assert response.result.quadrant == Quadrant.DO_FIRST

    @pytest.mark.asyncio
    async def test_server_error_raises(self):
        """Test HTTP errors propagate to the router."""
        backend = self.make_backend(lambda request: httpx.Response(500))

        with pytest.raises(httpx.HTTPStatusError):
            await backend.complete(ClassificationRequest(text="Call mom"))


class TestFactory:
    """Tests for router assembly."""

    def test_unconfigured_backends_are_skipped(self):
        """Test missing credentials and server URL."""
        settings = Settings(
            _env_file=None,
            anthropic_api_key=None,
            openai_api_key=None,
            google_api_key=None,
            local_server_url=None,
        )

        router = build_router(settings)

        assert router.backends == []

    def test_backends_follow_configured_order(self, mock_settings):
        """Test backend_order."""
        settings = mock_settings.model_copy(
            update={
                "backend_order": ["google", "local", "anthropic"],
                "local_server_url": "http://localhost:8080",
                "routing_mode": "llm_preferred",
            }
        )

        router = build_router(settings)

        assert [b.backend_id for b in router.backends] == ["google", "local", "anthropic"]
        assert router.routing_mode.value == "llm_preferred"

    def test_local_backend_settings(self, mock_settings):
        """Test local server options reach the backend."""
        settings = mock_settings.model_copy(
            update={
                "local_server_url": "http://localhost:8080/",
                "local_prompt_template": "chatml",
                "local_stepwise_prompts": True,
            }
        )

        backend = build_backend("local", settings)

        assert backend.base_url == "http://localhost:8080"
        assert backend.template == PromptTemplate.CHATML
        assert backend.stepwise_prompts is True

    def test_unknown_backend(self, mock_settings):
        """Test typos in backend_order are errors."""
        with pytest.raises(ValueError):
            build_backend("mainframe", mock_settings)
