"""Unit tests for the text-dependent selector chains."""

from __future__ import annotations

from ticket_rpa.portal import selectors as sel


class TestNonAsciiText:
    def test_has_text_keeps_characters_literal(self) -> None:
        chain = sel.ticket_cards("Order – Café")
        assert chain[0] == '.o_kanban_record:has-text("Order – Café")'
        assert all("\\u" not in selector for selector in chain)

    def test_customer_and_assignee_chains(self) -> None:
        assert '.dropdown-item:has-text("Müller GmbH")' in sel.customer_options("Müller GmbH")
        assert '.dropdown-item:has-text("José Peña")' in sel.assignee_options("José Peña")
        assert '.dropdown-item:has-text("Peña")' in sel.assignee_options("José Peña")

    def test_project_chains(self) -> None:
        assert sel.project_card("Soporte Técnico")[0] == '.o_kanban_record:has-text("Soporte Técnico")'
        assert sel.project_xpath("Soporte Técnico") == (
            '//*[contains(text(), "Soporte Técnico") or contains(text(), "Técnico")]'
        )


class TestXPathQuoting:
    def test_ticket_card_xpath_uses_plain_literal(self) -> None:
        xpath = sel.ticket_cards("Order – Café")[4]
        assert xpath.endswith('[.//text()[contains(., "Order – Café")]]')

    def test_double_quotes_switch_to_single(self) -> None:
        assert sel._xq('Say "hi"') == "'Say \"hi\"'"

    def test_both_quote_kinds_use_concat(self) -> None:
        assert sel._xq("It's \"new\"") == "concat(\"It's \", '\"', \"new\", '\"', \"\")"

    def test_project_xpath_with_apostrophe(self) -> None:
        assert sel.project_xpath("O'Neil Support") == (
            "//*[contains(text(), \"O'Neil Support\") or contains(text(), \"Support\")]"
        )
