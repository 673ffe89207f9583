"""Signal pattern library for rule-based priority classification."""

import re


class PatternGroup:
    """A named, ordered group of case-insensitive signal patterns.

    A group's score is the number of distinct patterns that match the text
    at least once. Repeated occurrences of the same pattern count once.
    """

    def __init__(self, name: str, patterns: list[str]):
        self.name = name
        self.patterns = tuple(patterns)
        self._compiled = tuple(re.compile(pattern, re.IGNORECASE) for pattern in patterns)

    def matches(self, text: str) -> list[str]:
        """Return the first matched phrase of every matching pattern, in pattern order."""
        found = []
        for pattern in self._compiled:
            match = pattern.search(text)
            if match:
                found.append(match.group(0))
        return found

    def score(self, text: str) -> int:
        """Count the distinct patterns that match the text."""
        return sum(1 for pattern in self._compiled if pattern.search(text))

    def any_match(self, text: str) -> bool:
        return any(pattern.search(text) for pattern in self._compiled)

    def __len__(self) -> int:
        return len(self._compiled)

    def __repr__(self) -> str:
        return f"PatternGroup({self.name!r}, {len(self)} patterns)"


class PatternLibrary:
    """Static pattern groups used by the rule-based classifier."""

    URGENCY = PatternGroup(
        "urgency",
        [
            r"\b(urgent|urgently|asap|immediately|emergency|critical|crisis)\b",
            # Today/tonight windows
            r"\b(today|tonight|this morning|this afternoon|this evening)\b",
            r"\b(before|by|until)\s+(today|tonight|end of day|eod|close of business|cob)\b",
            r"\bend of (day|today)\b",
            # Overdue
            r"\b(overdue|late|behind|past due|missed)\b",
            # Short time to deadline
            r"\b(in|within)\s+(\d+|one|two|three)\s*(hour|minute|min|hr)s?\b",
            r"\bdue\s+(today|now|immediately|asap)\b",
            r"\b(deadline|due)\s+(today|tomorrow)\b",
            # Production outages
            r"\b(server|system|app|site|service)s?\s+(is\s+|are\s+)?(down|crash|crashed|outage|issue|error|failure)\b",
            r"\b(down|crash|crashed|outage)\b.*\b(server|system|app|site|service)s?\b",
            r"\b(production|prod)\s*(issue|problem|bug|error|incident)\b",
            # Someone is waiting
            r"\b(client|customer)s?\s*(waiting|call|urgent|emergency)\b",
            r"\bwaiting\s+(on|for)\s+(you|me|us|this)\b",
            # Imminent meetings
            r"\bmeeting\s+(in|starts?\s+in)\s+\d+\s*(min|minute|hour)s?\b",
            r"\b(call|meeting)\s+(today|now|shortly)\b",
        ],
    )

    IMPORTANCE = PatternGroup(
        "importance",
        [
            r"\b(important|crucial|vital|essential|key|strategic|significant)\b",
            # Career
            r"\b(career|promotion|performance|evaluation|raise)\b",
            r"\b(job|interview|offer|resign|hire)\b",
            # Health
            r"\b(health|doctor|medical|appointment|prescription|symptoms?|sick)\b",
            r"\b(exercise|workout|gym|run|fitness)\b",
            # Family
            r"\b(family|spouse|partner|child|children|parents?|kids?|wedding|anniversary)\b",
            # Financial and legal
            r"\b(tax|taxes|financial|budget|investment|mortgage|loan|debt)\b",
            r"\b(contract|agreement|sign|legal|lawyer|attorney)\b",
            # Learning
            r"\b(learn|study|course|certification|degree|skill|training)\b",
            r"\b(read|book|research|understand)\b",
            # Goals
            r"\b(goal|objective|target|milestone|okrs?|quarter)\b",
            r"\b(strategy|plan|planning|roadmap)\b",
            # Business impact
            r"\b(clients?|customers?|investors?|board|stakeholders?|executives?)\b",
            r"\b(project|deliverable|release|launch|presentation)\b",
            r"\b(report|analysis|review|proposal)\b",
            r"\b(decision|approve|sign-off)\b",
            # Outcome verbs
            r"\b(submit|complete|finish|deliver|ship)\b",
            r"\b(prepare|create|build|develop)\b",
        ],
    )

    DELEGATION = PatternGroup(
        "delegation",
        [
            r"\b(delegate|assign|ask\s+.+\s+to|have\s+.+\s+do)\b",
            # Recurring cadence
            r"\b(routine|regular|recurring|standard|weekly|monthly|daily)\b",
            # Administrative and logistics
            r"\border\s+(office\s+)?supplies\b",
            r"\boffice\s+supplies\b",
            r"\b(schedule|book|reserve)\s+(a\s+)?(meeting|room|flight|hotel)\b",
            # Status reporting
            r"\bstatus\s+(report|update|check)\b",
            r"\bweekly\s+.*report\b",
            r"\b(compile|gather|collect)\s+.*report\b",
            # Surveys and data entry
            r"\b(survey|poll|feedback|form|questionnaire)\b",
            r"\b(update|enter|log|record)\s+.*(data|spreadsheet|system|database)\b",
            r"\b(anyone\s+can|someone\s+else|team\s+can)\b",
            r"\b(file|organize|sort|archive)\s+.*(documents|files|papers)\b",
        ],
    )

    LOW_PRIORITY = PatternGroup(
        "low_priority",
        [
            # Hedging
            r"\b(maybe|someday|eventually|when i have time|if i have time)\b",
            r"\b(nice to have|would be good|could|might)\b",
            r"\b(optional|not required|not urgent|low priority)\b",
            # Entertainment
            r"\b(browse|scroll|watch|binge|stream)\b",
            r"\b(social media|youtube|netflix|reddit|twitter|instagram|tiktok|facebook)\b",
            r"\b(game|games|gaming|play|entertainment)\b",
            # Non-essential reorganisation
            r"\b(reorganize|rearrange|tidy)\s+(bookshelf|desk|closet|room)\b",
            r"\b(clean|organize)\s+(files|photos|music|apps)\b",
            # Repetition
            r"\b(third time|again|another|repeat)\b",
            r"^just\s+(check|look|see|browse)\b",
        ],
    )

    NEAR_DEADLINE = PatternGroup(
        "near_deadline",
        [
            r"\b(today|tonight|this morning|this afternoon)\b",
            r"\btomorrow\b",
            r"\bby\s+(monday|tuesday|wednesday|thursday|friday|saturday|sunday)\b",
            r"\bin\s+(1|one|2|two|3|three)\s+days?\b",
            r"\bdue\s+(today|tomorrow|soon)\b",
            r"\bthis\s+week\b",
            r"\beod\b",
            r"\bend\s+of\s+(week|day)\b",
        ],
    )

    FAR_DEADLINE = PatternGroup(
        "far_deadline",
        [
            r"\bnext\s+(week|month)\b",
            r"\bin\s+(\d+|several)\s+weeks?\b",
            r"\bby\s+(next|end of)\s+(month|quarter|year)\b",
            r"\b(q[1-4]|quarter)\b",
            r"\beventually\b",
            r"\bno\s+(deadline|due date|rush)\b",
        ],
    )

    @classmethod
    def groups(cls) -> dict[str, PatternGroup]:
        """Return every pattern group keyed by name."""
        return {
            group.name: group
            for group in (
                cls.URGENCY,
                cls.IMPORTANCE,
                cls.DELEGATION,
                cls.LOW_PRIORITY,
                cls.NEAR_DEADLINE,
                cls.FAR_DEADLINE,
            )
        }
