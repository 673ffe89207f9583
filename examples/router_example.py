"""Example usage of the priority router.

This script demonstrates how to:
1. Classify tasks with the rule-based classifier
2. Route requests with confidence-gated escalation
3. Parse natural-language tasks
4. Record overrides and read accuracy
"""

import asyncio

from prio_router.config import get_settings
from prio_router.engine import (
    ClassificationRequest,
    Quadrant,
    RequestType,
    RuleBasedClassifier,
    build_router,
)
from prio_router.observability import configure_logging, setup_telemetry


def example_classification():
    """Example 1: Rule-based classification."""
    print("=" * 80)
    print("EXAMPLE 1: Rule-based classification")
    print("=" * 80)

    classifier = RuleBasedClassifier()

    tasks = [
        "Server is down, customers can't access the app",
        "Browse social media during lunch break",
        "Order office supplies that are running low",
        "Call mom",
    ]

    for task in tasks:
        result = classifier.classify(task)
        print(f"\nTask: {task}")
        print(f"  Quadrant: {result.quadrant.value} ({result.confidence:.2f})")
        print(f"  Escalate: {result.should_escalate}")
        print(f"  Explanation: {result.explanation}")


async def example_routing(tracer_provider=None):
    """Example 2: Routing with configured backends."""
    print("\n" + "=" * 80)
    print("EXAMPLE 2: Routing")
    print("=" * 80)

    router = build_router(get_settings(), tracer_provider=tracer_provider)
    await router.initialize()

    try:
        for text in ["Prepare the quarterly budget presentation", "Call mom"]:
            response = await router.route(ClassificationRequest(text=text))
            meta = response.metadata
            print(f"\nTask: {text}")
            print(f"  Quadrant: {response.result.quadrant.value}")
            print(f"  Backend: {meta.backend_id} (escalated={meta.was_escalated})")
            print(f"  Latency: {meta.latency_ms:.2f}ms")

        response = await router.route(
            ClassificationRequest(
                text="Remind me to submit the report by Friday at 3pm",
                request_type=RequestType.PARSE_TASK,
            )
        )
        print(f"\nParsed task: {response.result.model_dump()}")

        router.record_override(response.request_id, Quadrant.SCHEDULE, Quadrant.DO_FIRST, False)
        stats = router.get_stats()
        print(f"\nStats: {stats.model_dump()}")
        print(f"Accuracy: {router.accuracy():.0%}")
    finally:
        await router.release()


async def main():
    settings = get_settings()
    configure_logging(settings)
    provider = setup_telemetry(settings)
    example_classification()
    try:
        await example_routing(provider)
    finally:
        provider.shutdown()


if __name__ == "__main__":
    asyncio.run(main())
