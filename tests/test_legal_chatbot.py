import pytest

from incubridge.services import legal_chatbot
from incubridge.services.legal_chatbot import COST_ANSWER, FALLBACK_ANSWER, HELP_ANSWER, answer


@pytest.mark.parametrize(
    "message, topic",
    [
        ("How do I incorporate as an LLC?", "incorporation"),
        ("Should I file a patent or a trademark first?", "ip"),
        ("Can you review my NDA?", "contracts"),
        ("Which regulations and licenses apply to us?", "compliance"),
        ("What vesting schedule should new employees get?", "employment"),
        ("Is a SAFE better than a convertible note for investors?", "funding"),
        ("What goes into a founders agreement?", "founder"),
        ("Do we need to register for GST?", "tax"),
        ("Are we GDPR compliant with our cookies banner?", "privacy"),
    ],
)
def test_topic_detection(message, topic):
    found, text = answer(message)
    assert found == topic
    assert text == next(t.answer for t in legal_chatbot.TOPICS if t.key == topic)


def test_keywords_match_whole_words_only():
    # "ip" inside "shipping" or "tip" must not trigger the IP topic
    assert legal_chatbot.score_topics("Any tips on shipping?") == {}


def test_best_score_wins_over_topic_order():
    # two funding hits beat one contracts hit
    assert answer("An agreement with investors about dilution")[0] == "funding"


def test_ties_go_to_the_earlier_topic():
    scores = legal_chatbot.score_topics("patent contract")
    assert scores == {"ip": 1, "contracts": 1}
    assert answer("patent contract")[0] == "ip"


def test_greeting_gets_help_menu():
    assert answer("Hi there") == (None, HELP_ANSWER)


def test_cost_question_without_topic():
    assert answer("What does a lawyer cost?") == (None, COST_ANSWER)


def test_unknown_question_falls_back():
    assert answer("What is the weather tomorrow?") == (None, FALLBACK_ANSWER)


def test_topic_beats_help_keywords():
    assert answer("Help me understand my tax obligations")[0] == "tax"
