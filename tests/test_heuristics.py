from callqa.services.heuristics import analyze_heuristically


def test_positive_structured_long_call_scores_high():
    text = ("Customer: thank you, that was great and really helpful. " * 10
            + "Agent: happy to help, glad it is resolved. " * 10)
    result = analyze_heuristically(text)
    assert result.sentiment == 'positive'
    assert result.overall_satisfaction_score == 5
    assert result.problem_resolution_score == 4
    assert result.empathy_score == 4
    assert result.improvement_areas == []


def test_negative_unstructured_call_clamps_to_one():
    text = "This is terrible. I am angry and upset, this problem is unacceptable."
    result = analyze_heuristically(text)
    assert result.sentiment == 'negative'
    assert result.overall_satisfaction_score == 1
    assert result.problem_resolution_score == 1
    assert result.empathy_score == 1
    assert result.improvement_areas == ['customer-satisfaction', 'issue-resolution']
    assert result.requires_review


def test_neutral_when_below_threshold():
    result = analyze_heuristically("Customer: hello, thanks\nAgent: hi")
    assert result.sentiment == 'neutral'
    assert result.overall_satisfaction_score == 3
    assert 'customer and agent turns were detected' in result.feedback


def test_scores_always_in_range():
    for text in ["", "x", "Customer: a Agent: b " * 200, "awful " * 50]:
        result = analyze_heuristically(text)
        for field in ('overall_satisfaction_score', 'communication_score', 'problem_resolution_score',
                      'professionalism_score', 'empathy_score', 'follow_up_score'):
            assert 1 <= getattr(result, field) <= 5
