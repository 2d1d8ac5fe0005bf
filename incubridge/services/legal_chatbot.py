"""
Rule-based legal FAQ for founders.

A message is scored against each topic by counting keyword hits on word
boundaries; the best-scoring topic answers, ties go to the topic listed
first. Messages with no topic hit fall through to the help / cost answers
and finally to a menu of topics.

Usage:
    from incubridge.services.legal_chatbot import answer
    topic, text = answer("How do I register a trademark?")   # -> ("ip", "...")
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Topic:
    key: str
    keywords: tuple[str, ...]
    answer: str


TOPICS: tuple[Topic, ...] = (
    Topic(
        key="incorporation",
        keywords=("incorporation", "incorporate", "incorporating", "llc", "c-corp",
                  "s-corp", "entity", "register company", "ein"),
        answer=(
            "For business incorporation:\n"
            "1. Choose an entity type (LLC, C-Corp, S-Corp, Pvt Ltd)\n"
            "2. File articles of incorporation with your state or registrar\n"
            "3. Get a tax identification number (EIN in the US)\n"
            "4. Draft bylaws and an operating agreement\n"
            "5. Register with the state revenue department\n\n"
            "Consult a lawyer for jurisdiction-specific requirements."
        ),
    ),
    Topic(
        key="ip",
        keywords=("ip", "intellectual property", "patent", "patents", "trademark",
                  "trademarks", "copyright", "copyrights", "trade secret", "brand"),
        answer=(
            "Protect your intellectual property:\n"
            "1. Trademarks - brand names and logos\n"
            "2. Patents - inventions and technical processes\n"
            "3. Copyrights - software, content and creative works\n"
            "4. Trade secrets - proprietary know-how, protected by NDAs\n\n"
            "Register with the relevant authority (USPTO, IPO India, EUIPO). "
            "Early filing establishes your priority date."
        ),
    ),
    Topic(
        key="contracts",
        keywords=("contract", "contracts", "agreement", "agreements", "nda",
                  "terms of service", "tos", "sla"),
        answer=(
            "Essential startup contracts:\n"
            "1. Terms of Service\n"
            "2. Privacy Policy\n"
            "3. Non-Disclosure Agreements (NDA)\n"
            "4. Founders' Agreement\n"
            "5. Employment Agreements\n"
            "6. Service Level Agreements (SLA)\n\n"
            "Have every contract reviewed by legal counsel before signing."
        ),
    ),
    Topic(
        key="compliance",
        keywords=("compliance", "compliant", "regulation", "regulations", "regulatory",
                  "license", "licenses", "permit", "permits", "audit"),
        answer=(
            "Staying compliant:\n"
            "1. Learn the regulations specific to your industry\n"
            "2. Keep proper business records\n"
            "3. Follow data protection law (GDPR, CCPA, DPDP)\n"
            "4. File taxes on time\n"
            "5. Respect employment law\n"
            "6. Obtain the licenses and permits you need\n\n"
            "Document everything and run periodic internal audits."
        ),
    ),
    Topic(
        key="employment",
        keywords=("employment", "employee", "employees", "hire", "hiring", "esop",
                  "vesting", "non-compete", "labor", "labour"),
        answer=(
            "Employment best practices:\n"
            "1. Written employment contracts\n"
            "2. Confidentiality and IP assignment clauses\n"
            "3. Equity vesting schedules (4 years with a 1-year cliff is typical)\n"
            "4. Workers' compensation insurance\n"
            "5. Equal opportunity policies\n"
            "6. Leave and benefits policies\n\n"
            "Local labour law always takes precedence."
        ),
    ),
    Topic(
        key="funding",
        keywords=("funding", "fundraising", "investor", "investors", "safe",
                  "convertible", "term sheet", "dilution", "cap table", "securities"),
        answer=(
            "Legal side of fundraising:\n"
            "1. SAFE agreements or convertible notes for early rounds\n"
            "2. Model dilution before you sign\n"
            "3. Comply with securities regulations\n"
            "4. Keep a clean cap table\n"
            "5. Prepare investment agreements and shareholder agreements\n"
            "6. Assemble a due diligence data room\n\n"
            "Have all documents reviewed before you pitch."
        ),
    ),
    Topic(
        key="founder",
        keywords=("founder", "founders", "co-founder", "cofounder", "co-founders",
                  "equity split", "buyout", "founders agreement", "founder agreement",
                  "founders' agreement"),
        answer=(
            "A founders' agreement should cover:\n"
            "- Equity split and vesting schedules\n"
            "- Roles and responsibilities\n"
            "- Decision-making authority and voting rights\n"
            "- Dispute resolution\n"
            "- Exit clauses and buyout terms\n"
            "- IP ownership assignment\n"
            "- Confidentiality and non-compete clauses\n\n"
            "Put it in writing before you start building."
        ),
    ),
    Topic(
        key="tax",
        keywords=("tax", "taxes", "gst", "vat", "income tax", "accounting", "deduction",
                  "deductions"),
        answer=(
            "Tax considerations for startups:\n"
            "1. Register for GST / VAT where applicable\n"
            "2. File income tax returns every year\n"
            "3. Keep proper accounting records\n"
            "4. Know which business expenses are deductible\n"
            "5. Understand the tax treatment of equity grants\n"
            "6. Plan for advance / quarterly tax payments\n\n"
            "A chartered accountant can help optimise your structure."
        ),
    ),
    Topic(
        key="privacy",
        keywords=("privacy", "gdpr", "ccpa", "dpdp", "personal data", "data protection",
                  "consent", "cookies"),
        answer=(
            "Privacy and data protection:\n"
            "1. GDPR for EU users\n"
            "2. CCPA for California users\n"
            "3. DPDP Act for Indian users\n"
            "4. Publish a privacy policy\n"
            "5. Implement data security measures\n"
            "6. Collect explicit consent for personal data\n\n"
            "Document how personal data flows through your product."
        ),
    ),
)

HELP_KEYWORDS = ("help", "advice", "hello", "hi", "hey")
COST_KEYWORDS = ("cost", "costs", "price", "pricing", "fee", "fees")

HELP_ANSWER = (
    "I can help with:\n"
    "- Incorporation\n- IP / patents / trademarks\n- Contracts\n- Compliance\n"
    "- Employment\n- Funding\n- Founder agreements\n- Tax\n- Privacy\n\n"
    "What's your legal concern?"
)

COST_ANSWER = (
    "Costs vary by jurisdiction:\n"
    "- Incorporation: $100-500 (US), INR 5,000-15,000 (India)\n"
    "- Trademark filing: $250-350 per class (US), INR 4,500-9,000 (India)\n"
    "- Legal consultation: $150-400 per hour\n\n"
    "Check whether your incubator offers free legal support."
)

FALLBACK_ANSWER = (
    "I couldn't match that to a topic. Please ask about:\n"
    "- Incorporation\n- Intellectual property\n- Contracts and agreements\n"
    "- Compliance and regulations\n- Employment law\n- Funding and investor documents\n"
    "- Founder agreements\n- Tax planning\n- Privacy and data protection\n\n"
    "Or describe your specific legal issue."
)


def _pattern(keyword: str) -> re.Pattern:
    return re.compile(r"(?<![\w-])" + re.escape(keyword) + r"(?![\w-])", re.IGNORECASE)


_TOPIC_PATTERNS = [(topic, [_pattern(k) for k in topic.keywords]) for topic in TOPICS]
_HELP_PATTERNS = [_pattern(k) for k in HELP_KEYWORDS]
_COST_PATTERNS = [_pattern(k) for k in COST_KEYWORDS]


def _hits(text: str, patterns) -> int:
    return sum(len(p.findall(text)) for p in patterns)


def score_topics(message: str) -> dict[str, int]:
    """Keyword hit count per topic key (topics without hits omitted)."""
    scores = {}
    for topic, patterns in _TOPIC_PATTERNS:
        hits = _hits(message, patterns)
        if hits:
            scores[topic.key] = hits
    return scores


def answer(message: str) -> tuple[Optional[str], str]:
    """Return ``(topic_key, answer_text)``; topic is None for help/cost/fallback."""
    scores = score_topics(message)
    if scores:
        best = max(scores.values())
        for topic in TOPICS:
            if scores.get(topic.key) == best:
                return topic.key, topic.answer

    if _hits(message, _HELP_PATTERNS):
        return None, HELP_ANSWER
    if _hits(message, _COST_PATTERNS):
        return None, COST_ANSWER
    return None, FALLBACK_ANSWER
