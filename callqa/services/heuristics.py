from .quality_schema import QualityResult

POSITIVE_KEYWORDS = (
    'thank', 'great', 'excellent', 'perfect', 'happy', 'satisfied',
    'appreciate', 'wonderful', 'helpful', 'resolved',
)
NEGATIVE_KEYWORDS = (
    'frustrat', 'angry', 'disappointed', 'terrible', 'awful',
    'unacceptable', 'upset', 'complaint', 'problem', 'issue',
)
SENTIMENT_THRESHOLD = 2
LONG_CALL_WORDS = 100


def _keyword_hits(lowered, keywords):
    return sum(lowered.count(k) for k in keywords)


def analyze_heuristically(text: str) -> QualityResult:
    """Score a transcript from lexical and structural signals only.

    Used when the language model is unavailable. Deterministic and free of I/O.
    """
    text = text or ''
    lowered = text.lower()
    words = len(text.split())

    positive = _keyword_hits(lowered, POSITIVE_KEYWORDS)
    negative = _keyword_hits(lowered, NEGATIVE_KEYWORDS)
    if positive > negative and positive > SENTIMENT_THRESHOLD:
        sentiment = 'positive'
    elif negative > positive and negative > SENTIMENT_THRESHOLD:
        sentiment = 'negative'
    else:
        sentiment = 'neutral'

    structured = 'customer:' in lowered and 'agent:' in lowered
    score = 3 if structured else 2
    if words > LONG_CALL_WORDS:
        score += 1
    if sentiment == 'positive':
        score += 1
    elif sentiment == 'negative':
        score -= 1
    score = max(1, min(5, score))
    reduced = max(1, score - 1)

    feedback = (
        f"Automated heuristic review of {words} words: overall sentiment appears {sentiment}; "
        f"{'customer and agent turns were detected' if structured else 'no clear customer/agent structure was detected'}. "
        "AI analysis was unavailable, so this score is approximate."
    )
    areas = ['customer-satisfaction', 'issue-resolution'] if sentiment == 'negative' else []

    return QualityResult(
        overall_satisfaction_score=score,
        communication_score=score,
        problem_resolution_score=reduced,
        professionalism_score=score,
        empathy_score=reduced,
        follow_up_score=score,
        sentiment=sentiment,
        feedback=feedback,
        improvement_areas=areas,
    )
