"""Prompt construction for inference backends."""

from enum import Enum

from prio_router.engine.schemas import ClassificationRequest, RequestType


class PromptTemplate(str, Enum):
    """Chat template formats of local model families."""

    PHI3 = "phi3"
    CHATML = "chatml"
    MISTRAL = "mistral"
    LLAMA2 = "llama2"
    LLAMA3 = "llama3"
    GEMMA = "gemma"
    RAW = "raw"


PRIORITY_SYSTEM_PROMPT = """You are a productivity assistant that classifies tasks using the Eisenhower Matrix.

The Eisenhower Matrix has 4 quadrants:
- DO (Urgent + Important): Tasks with imminent deadlines that directly impact key goals. Do these first.
- SCHEDULE (Important, Not Urgent): Tasks that matter for long-term goals but have no immediate deadline. Schedule time for these.
- DELEGATE (Urgent, Not Important): Time-sensitive but routine tasks that don't require your expertise. Consider delegating.
- ELIMINATE (Not Urgent, Not Important): Low-value activities that waste time. Minimize or eliminate.

URGENCY signals: deadlines, "today", "ASAP", "urgent", time pressure, "by [date]", "due", "deadline"
IMPORTANCE signals: impacts goals, career, health, key relationships, client/customer, strategic value, learning

Respond with ONLY a JSON object in this exact format:
{"quadrant": "DO|SCHEDULE|DELEGATE|ELIMINATE", "confidence": 0.0-1.0, "reasoning": "brief explanation"}"""

PRIORITY_STEPWISE_SYSTEM_PROMPT = """Classify tasks using the Eisenhower Matrix. Think step by step:
1. Is it URGENT? (deadline soon, time-sensitive)
2. Is it IMPORTANT? (impacts goals, career, health, relationships)
Then classify: DO (both), SCHEDULE (important only), DELEGATE (urgent only), ELIMINATE (neither).
Output JSON only: {"quadrant": "X", "confidence": 0.X, "reasoning": "..."}"""

TASK_PARSING_SYSTEM_PROMPT = """Extract task details from natural language input.
Output JSON only: {"title": "...", "due_date": "YYYY-MM-DD or null", "due_time": "HH:MM or null", "priority": "high/medium/low or null"}"""

GOAL_SYSTEM_PROMPT = """Turn the user's goal into a SMART goal.
Output JSON only: {"refined_goal": "...", "specific": "...", "measurable": "...", "achievable": "...", "relevant": "...", "time_bound": "...", "milestones": ["..."]}"""

ASSISTANT_SYSTEM_PROMPT = """You are a concise productivity assistant. Be brief and actionable."""


def format_prompt(template: PromptTemplate, system_prompt: str | None, user_prompt: str) -> str:
    """
    Wrap a prompt in a model family's chat template.

    Args:
        template: Template format of the target model
        system_prompt: Optional system prompt
        user_prompt: User input

    Returns:
        Prompt string ready for raw completion
    """
    if template == PromptTemplate.RAW:
        return user_prompt

    combined = f"{system_prompt}\n\n{user_prompt}" if system_prompt else user_prompt

    if template == PromptTemplate.PHI3:
        # No system role; the system prompt leads the first user turn.
        return f"<|user|>\n{combined}<|end|>\n<|assistant|>\n"

    if template == PromptTemplate.MISTRAL:
        return f"<s>[INST] {combined} [/INST]"

    if template == PromptTemplate.CHATML:
        parts = []
        if system_prompt:
            parts.append(f"<|im_start|>system\n{system_prompt}<|im_end|>\n")
        parts.append(f"<|im_start|>user\n{user_prompt}<|im_end|>\n")
        parts.append("<|im_start|>assistant\n")
        return "".join(parts)

    if template == PromptTemplate.LLAMA2:
        if system_prompt:
            return f"<s>[INST] <<SYS>>\n{system_prompt}\n<</SYS>>\n\n{user_prompt} [/INST]"
        return f"<s>[INST] {user_prompt} [/INST]"

    if template == PromptTemplate.LLAMA3:
        parts = ["<|begin_of_text|>"]
        if system_prompt:
            parts.append(f"<|start_header_id|>system<|end_header_id|>\n\n{system_prompt}<|eot_id|>")
        parts.append(f"<|start_header_id|>user<|end_header_id|>\n\n{user_prompt}<|eot_id|>")
        parts.append("<|start_header_id|>assistant<|end_header_id|>\n\n")
        return "".join(parts)

    if template == PromptTemplate.GEMMA:
        return f"<start_of_turn>user\n{combined}<end_of_turn>\n<start_of_turn>model\n"

    raise ValueError(f"Unknown prompt template: {template}")


STOP_SEQUENCES = {
    PromptTemplate.PHI3: ["<|end|>", "<|user|>"],
    PromptTemplate.MISTRAL: ["</s>", "[INST]"],
    PromptTemplate.CHATML: ["<|im_end|>", "<|im_start|>"],
    PromptTemplate.LLAMA2: ["</s>", "[INST]"],
    PromptTemplate.LLAMA3: ["<|eot_id|>", "<|start_header_id|>"],
    PromptTemplate.GEMMA: ["<end_of_turn>", "<start_of_turn>"],
    PromptTemplate.RAW: [],
}


def stop_sequences(template: PromptTemplate) -> list[str]:
    """Return the sequences that end generation for a template."""
    return list(STOP_SEQUENCES[template])


def build_messages(request: ClassificationRequest, stepwise: bool = False) -> tuple[str, str]:
    """
    Build the system and user prompts for a request.

    Args:
        request: Routing request
        stepwise: Use the shorter step-by-step classification prompt

    Returns:
        Tuple of (system_prompt, user_prompt)
    """
    text = request.text

    if request.request_type == RequestType.CLASSIFY_PRIORITY:
        if stepwise:
            return PRIORITY_STEPWISE_SYSTEM_PROMPT, f'Task: "{text}"\nClassify:'
        return PRIORITY_SYSTEM_PROMPT, f'Classify this task into the Eisenhower Matrix:\n"{text}"'

    if request.request_type == RequestType.PARSE_TASK:
        return TASK_PARSING_SYSTEM_PROMPT, f'Parse: "{text}"'

    if request.request_type == RequestType.SUGGEST_STRUCTURED_GOAL:
        return GOAL_SYSTEM_PROMPT, f'Goal: "{text}"'

    return ASSISTANT_SYSTEM_PROMPT, text
