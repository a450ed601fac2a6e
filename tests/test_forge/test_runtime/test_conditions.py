import pytest

from forge.graph.nodes import Condition, ConditionOperator
from forge.runtime.conditions import evaluate_condition, evaluate_conditions, resolve_flag


def cond(flag, operator, value=None):
    return Condition(flag=flag, operator=operator, value=value)


@pytest.mark.parametrize("value, expected", [
    (True, True),
    (1, True),
    ("yes", True),
    (False, False),
    (0, False),
    ("", False),
    (None, False),
])
def test_is_set_and_is_not_set_are_negations(value, expected):
    variables = {} if value is None else {"f": value}

    assert evaluate_condition(cond("f", ConditionOperator.IS_SET), variables) is expected
    assert evaluate_condition(cond("f", ConditionOperator.IS_NOT_SET), variables) is (not expected)


def test_memory_flag_counts_as_set():
    assert evaluate_condition(cond("met", "is_set"), {}, {"met"})
    assert resolve_flag("met", {}, {"met"}) is True
    assert resolve_flag("met", {"met": False}, {"met"}) is False


def test_equality_is_strict():
    assert evaluate_condition(cond("f", "equals", 1), {"f": 1})
    assert evaluate_condition(cond("f", "equals", 1), {"f": 1.0})
    assert not evaluate_condition(cond("f", "equals", 1), {"f": True})
    assert not evaluate_condition(cond("f", "equals", "1"), {"f": 1})
    assert evaluate_condition(cond("f", "not_equals", "1"), {"f": 1})
    assert evaluate_condition(cond("q", "equals", "started"), {"q": "started"})


@pytest.mark.parametrize("operator, threshold, expected", [
    ("greater_than", 5, True),
    ("greater_than", 10, False),
    ("greater_equal", 10, True),
    ("less_than", 11, True),
    ("less_equal", 9, False),
])
def test_numeric_comparisons(operator, threshold, expected):
    assert evaluate_condition(cond("gold", operator, threshold), {"gold": 10}) is expected


def test_absent_flag_is_zero_for_numeric_operators():
    assert evaluate_condition(cond("gold", "less_than", 5), {})
    assert evaluate_condition(cond("gold", "greater_equal", 0), {})
    assert not evaluate_condition(cond("gold", "greater_than", 0), {})


def test_numeric_strings_are_parsed():
    assert evaluate_condition(cond("gold", "greater_than", "5"), {"gold": "12 coins"})


def test_unparsable_threshold_is_false():
    assert not evaluate_condition(cond("gold", "greater_than", "lots"), {"gold": 10})
    assert not evaluate_condition(cond("gold", "less_equal", None), {"gold": 10})


def test_conjunction():
    conditions = [cond("a", "is_set"), cond("b", "greater_than", 1)]

    assert evaluate_conditions(conditions, {"a": True, "b": 2})
    assert not evaluate_conditions(conditions, {"a": True, "b": 1})


@pytest.mark.parametrize("conditions", [None, []])
def test_empty_conditions_pass(conditions):
    assert evaluate_conditions(conditions, {})


def test_evaluation_does_not_mutate_inputs():
    variables = {"a": 1}
    memory = {"m"}

    evaluate_conditions([cond("a", "greater_than", 0), cond("m", "is_set")], variables, memory)

    assert variables == {"a": 1}
    assert memory == {"m"}
