"""
Tests for the rule expression language and rule sets.
"""

import pytest
from tileworld.core import (
    RuleExpression, RuleParseError, AutomatonRule, AutomatonRuleSet,
    parse_rule_expression, create_life_rules, create_default_rules,
)
from tileworld.core.rules import And, Or, Compare


class TestRuleExpression:
    """Tests for RuleExpression evaluation."""

    def test_single_comparison(self):
        """Test >= against present and absent symbols."""
        rule = RuleExpression("count['#'] >= 2")
        assert rule.evaluate({'#': 2}) is True
        assert rule.evaluate({'#': 1}) is False
        assert rule.evaluate({}) is False  # absent counts as 0

    def test_constants(self):
        """Test empty text, 'true' and 'false'."""
        assert RuleExpression("").evaluate({'x': 3})
        assert RuleExpression("true").evaluate({})
        assert RuleExpression("  true  ").evaluate({})
        assert not RuleExpression("false").evaluate({'x': 3})

    def test_all_operators(self):
        """Test every comparison operator."""
        counts = {'a': 3}
        assert RuleExpression("count['a'] == 3").evaluate(counts)
        assert RuleExpression("count['a'] != 2").evaluate(counts)
        assert RuleExpression("count['a'] > 2").evaluate(counts)
        assert RuleExpression("count['a'] < 4").evaluate(counts)
        assert RuleExpression("count['a'] <= 3").evaluate(counts)
        assert not RuleExpression("count['a'] < 3").evaluate(counts)
        assert not RuleExpression("count['a'] != 3").evaluate(counts)

    def test_absent_symbol_is_zero(self):
        """Test that comparisons against 0 hold for absent symbols."""
        assert RuleExpression("count['~'] == 0").evaluate({'#': 8})
        assert RuleExpression("count['~'] < 1").evaluate({})

    def test_and(self):
        """Test that AND needs both sides."""
        rule = RuleExpression("count['~'] == 1 && count['#'] >= 3")
        assert rule.evaluate({'~': 1, '#': 3})
        assert not rule.evaluate({'~': 1, '#': 2})
        assert not rule.evaluate({'~': 0, '#': 5})

    def test_or(self):
        """Test that OR needs either side."""
        rule = RuleExpression("count['T'] >= 1 || count['~'] >= 1")
        assert rule.evaluate({'T': 1})
        assert rule.evaluate({'~': 2})
        assert not rule.evaluate({'.': 8})

    def test_whitespace(self):
        """Test surrounding and right-hand side whitespace is ignored."""
        assert RuleExpression("   count['#']  >=  2  ").evaluate({'#': 2})
        assert RuleExpression("count['#'] > = 2").evaluate({'#': 2})
        assert RuleExpression("count['#']>=2&&count['.']<1").evaluate({'#': 2})

    def test_callable(self):
        """Test __call__ alias."""
        rule = RuleExpression("count['x'] == 1")
        assert rule({'x': 1})


class TestMalformedRules:
    """Tests for parse failures."""

    @pytest.mark.parametrize("text", [
        "count[#] >= 2",          # missing quotes
        "count['#'] 2",           # missing operator
        "count['#'] >= x",        # non-numeric right-hand side
        "count['#'] >= 2.5",      # not an integer
        "count['##'] >= 1",       # multi-character symbol
        "count['#'] >= 2 &&",     # empty operand
        "|| count['#'] >= 2",
        "amount['#'] >= 2",
    ])
    def test_malformed_evaluates_false(self, text):
        """Test that malformed rules are invalid and never fire."""
        rule = RuleExpression(text)
        assert not rule.is_valid
        assert isinstance(rule.error, RuleParseError)
        assert rule.node is None
        assert rule.evaluate({'#': 5}) is False

    def test_parse_raises(self):
        """Test that the parser itself raises RuleParseError."""
        with pytest.raises(RuleParseError) as info:
            parse_rule_expression("count['#'] >= ")
        assert info.value.text == "count['#'] >= "
        assert isinstance(info.value, ValueError)

    def test_valid_rule_has_no_error(self):
        """Test that a valid rule exposes its tree."""
        rule = RuleExpression("count['#'] >= 2")
        assert rule.is_valid
        assert rule.error is None
        assert rule.node == Compare('#', '>=', 2)


class TestParserStructure:
    """Tests for how mixed and chained operators are split."""

    def test_and_split_first(self):
        """Test that '&&' is the split point when both operators appear."""
        node = parse_rule_expression("count['a'] >= 1 || count['b'] >= 1 && count['c'] >= 1")
        assert isinstance(node, And)
        assert isinstance(node.left, Or)

        rule = RuleExpression("count['a'] >= 1 || count['b'] >= 1 && count['c'] >= 1")
        assert not rule.evaluate({'a': 1})
        assert rule.evaluate({'a': 1, 'c': 1})
        assert rule.evaluate({'b': 1, 'c': 1})

    def test_chained_and(self):
        """Test three comparisons joined by '&&'."""
        rule = RuleExpression("count['a'] >= 1 && count['b'] >= 1 && count['c'] >= 1")
        assert rule.is_valid
        assert rule.evaluate({'a': 1, 'b': 1, 'c': 1})
        assert not rule.evaluate({'a': 1, 'b': 1})

    @pytest.mark.parametrize("text", [
        "true && count['#'] >= 1",
        "count['#'] >= 1 && true",
        "false || count['#'] >= 1",
    ])
    def test_literals_not_allowed_as_operands(self, text):
        """Test that true/false only stand alone, never joined to a comparison."""
        rule = RuleExpression(text)
        assert not rule.is_valid
        assert rule.evaluate({'#': 1}) is False
        with pytest.raises(RuleParseError):
            parse_rule_expression(text)


class TestAutomatonRuleSet:
    """Tests for AutomatonRuleSet."""

    def test_from_mapping(self):
        """Test building from dicts and tuples."""
        rules = AutomatonRuleSet.from_mapping({
            '#': {"survival": "count['#'] >= 2", "birth": "count['#'] == 3"},
            'T': (None, "count['T'] >= 3", None),
        })
        assert len(rules) == 2
        assert list(rules) == ['#', 'T']
        assert rules.get_rule('#').death is None
        assert rules.get_rule('T').birth.evaluate({'T': 3})
        assert rules.get_rule('x') is None

    def test_immutable(self):
        """Test that the mapping view rejects mutation."""
        rules = create_life_rules()
        with pytest.raises(TypeError):
            rules.all_rules()['x'] = AutomatonRule()

    def test_with_rule_returns_new_instance(self):
        """Test that with_rule leaves the original untouched."""
        rules = create_life_rules('#')
        extended = rules.with_rule('T', AutomatonRule.from_text(birth="count['T'] >= 2"))
        assert 'T' in extended
        assert 'T' not in rules
        assert len(rules) == 1

    def test_invalid_symbol(self):
        """Test that multi-character symbols are rejected."""
        with pytest.raises(ValueError):
            AutomatonRuleSet({'ab': AutomatonRule()})
        with pytest.raises(ValueError):
            AutomatonRuleSet.from_mapping({'#': {"grow": "true"}})

    def test_parse_errors(self):
        """Test that malformed expressions are reported."""
        rules = AutomatonRuleSet.from_mapping({
            '#': {"survival": "count[#] >= 2", "birth": "count['#'] == 3"},
        })
        errors = rules.parse_errors()
        assert len(errors) == 1
        symbol, kind, error = errors[0]
        assert (symbol, kind) == ('#', 'survival')
        assert isinstance(error, RuleParseError)
        assert "invalid" in rules.summary()

    def test_empty(self):
        """Test that an empty set has no rules."""
        assert not AutomatonRuleSet().has_rules
        assert create_default_rules().has_rules
