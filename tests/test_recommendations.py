from types import SimpleNamespace

from report_engine.recommendations import Recommendation, Rule, assemble


def test_rules_fire_in_declaration_order():
    rules = [
        Rule("First", "always"),
        Rule("Second", "never", when=lambda i: False),
        Rule("Third", lambda i, money: f"value is {i.value}", when=lambda i: i.value > 1),
    ]
    result = assemble(rules, SimpleNamespace(value=3))
    assert result == [Recommendation("First", "always"), Recommendation("Third", "value is 3")]


def test_duplicate_titles_are_kept():
    rules = [Rule("Same", "a"), Rule("Same", "a")]
    assert len(assemble(rules, SimpleNamespace())) == 2


def test_no_rules_no_recommendations():
    assert assemble([], SimpleNamespace()) == []


def test_recommendation_str():
    assert str(Recommendation("Restock", "Order now.")) == "Restock: Order now."


def test_money_is_ungrouped_in_delimited_text():
    rule = Rule("Pay", lambda i, money: f"Owed {money(i.amount)}.")
    rec = rule.render(SimpleNamespace(amount=50000))

    assert str(rec) == "Pay: Owed Rs. 50,000."
    assert rec.as_delimited() == "Pay: Owed Rs. 50000."


def test_plain_text_has_no_separate_delimited_form():
    rec = Rule("Restock", "Order now.").render(SimpleNamespace())
    assert rec.delimited_text is None
    assert rec.as_delimited() == "Restock: Order now."
