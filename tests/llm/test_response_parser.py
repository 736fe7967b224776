import unittest

from gitp.llm.response_parser import apply_ticket, parse_response
from gitp.models import GenerationResult
from gitp.policy.policy_model import Policy


class TestParseResponse(unittest.TestCase):
    def test_plain_reply(self) -> None:
        raw = "COMMIT_MESSAGE: Add login\nCOMMIT_DESCRIPTION: Adds the login form."
        result = parse_response(raw)
        self.assertEqual(result.commit_message, "Add login")
        self.assertEqual(result.commit_description, "Adds the login form.")

    def test_surrounding_chatter_and_indentation(self) -> None:
        raw = (
            "Sure! Here is your commit:\n\n"
            "   COMMIT_MESSAGE:   Fix crash on empty input  \n"
            "COMMIT_DESCRIPTION: Guards the parser against empty strings.\n"
            "Let me know if you need anything else."
        )
        result = parse_response(raw)
        self.assertEqual(result.commit_message, "Fix crash on empty input")
        self.assertEqual(result.commit_description, "Guards the parser against empty strings.")

    def test_first_label_occurrence_wins(self) -> None:
        raw = (
            "COMMIT_MESSAGE: First\n"
            "COMMIT_DESCRIPTION: First description\n"
            "COMMIT_MESSAGE: Second\n"
            "COMMIT_DESCRIPTION: Second description"
        )
        result = parse_response(raw)
        self.assertEqual(result.commit_message, "First")
        self.assertEqual(result.commit_description, "First description")

    def test_missing_lines_yield_empty_result(self) -> None:
        for raw in [
            "",
            "Just some text",
            "COMMIT_MESSAGE: Only a message",
            "COMMIT_DESCRIPTION: Only a description",
            "COMMIT_MESSAGE:\nCOMMIT_DESCRIPTION: Blank message",
        ]:
            with self.subTest(raw=raw):
                result = parse_response(raw)
                self.assertTrue(result.is_empty)
                self.assertEqual(result, GenerationResult.empty())


class TestTicketPlacement(unittest.TestCase):
    def test_conventional_ticket_after_type_and_scope(self) -> None:
        raw = "COMMIT_MESSAGE: feat(auth): add login\nCOMMIT_DESCRIPTION: Adds login."
        result = parse_response(raw, Policy(use_conventional_commits=True, ticket="X-1"))
        self.assertEqual(result.commit_message, "feat(auth): X-1 add login")

    def test_free_form_ticket_prefix(self) -> None:
        raw = "COMMIT_MESSAGE: Add login\nCOMMIT_DESCRIPTION: Adds login."
        result = parse_response(raw, Policy(use_conventional_commits=False, ticket="X-1"))
        self.assertEqual(result.commit_message, "X-1: Add login")
        self.assertEqual(result.commit_description, "Adds login.")

    def test_no_ticket_leaves_message_alone(self) -> None:
        raw = "COMMIT_MESSAGE: fix: handle nulls\nCOMMIT_DESCRIPTION: Null safety."
        result = parse_response(raw, Policy(use_conventional_commits=True))
        self.assertEqual(result.commit_message, "fix: handle nulls")


def test_apply_ticket_variants():
    conventional = Policy(use_conventional_commits=True, ticket="AB-9")
    assert apply_ticket("fix: handle nulls", conventional) == "fix: AB-9 handle nulls"
    assert apply_ticket("feat(api)!: drop v1", conventional) == "feat(api)!: AB-9 drop v1"
    # no type token: fall back to the prefix form
    assert apply_ticket("Handle nulls", conventional) == "AB-9: Handle nulls"
    # already present
    assert apply_ticket("fix: AB-9 handle nulls", conventional) == "fix: AB-9 handle nulls"
    assert apply_ticket("AB-9: Handle nulls", Policy(ticket="AB-9")) == "AB-9: Handle nulls"
    assert apply_ticket("", conventional) == ""


def test_longer_ticket_is_not_mistaken_for_the_resolved_one():
    conventional = Policy(use_conventional_commits=True, ticket="X-1")
    assert apply_ticket("fix: X-12 handle nulls", conventional) == "fix: X-1 X-12 handle nulls"
    assert apply_ticket("X-12 handle nulls", Policy(ticket="X-1")) == "X-1: X-12 handle nulls"
    assert apply_ticket("X-1 handle nulls", Policy(ticket="X-1")) == "X-1 handle nulls"
