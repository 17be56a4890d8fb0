"""Keyword-matched health assistant replies."""

from typing import Mapping, Tuple

GREETING = (
    "Hello! I'm the HealthConnect+ assistant. I can help you book an appointment, "
    "request an online consultation, or find your medical reports."
)

HELP_TEXT = (
    "You can ask me about:\n"
    "- booking an appointment\n"
    "- online consultations and their prices\n"
    "- your medical reports\n"
    "- what to do in an emergency"
)

FALLBACK = (
    "I'm not sure I understood that. Type 'help' to see what I can do, "
    "or book a consultation to speak with a doctor."
)

# Checked in order; the first intent with a matching keyword wins.
INTENTS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("emergency", ("emergency", "chest pain", "can't breathe", "cannot breathe", "unconscious", "bleeding")),
    ("greeting", ("hello", "hi", "hey", "good morning", "good evening")),
    ("help", ("help", "what can you do")),
    ("prices", ("price", "cost", "fee", "charge", "how much")),
    ("consultation", ("consult", "online doctor", "video call")),
    ("appointment", ("appointment", "book", "schedule", "visit")),
    ("reports", ("report", "lab", "x-ray", "xray", "prescription", "test result")),
)


def _matches(keyword: str, text: str, words: set) -> bool:
    # Short keywords must be whole words ("hi" is not in "this")
    if " " in keyword or len(keyword) > 4:
        return keyword in text
    return keyword in words


class ChatbotService:
    def __init__(self, prices: Mapping[str, int], currency: str):
        self.prices = prices
        self.currency = currency

    def reply(self, message: str) -> Tuple[str, str]:
        """Return ``(intent, response)`` for a user message."""
        text = message.strip().lower()
        words = set(text.replace("?", " ").replace("!", " ").replace(",", " ").split())

        for intent, keywords in INTENTS:
            if any(_matches(keyword, text, words) for keyword in keywords):
                return intent, self._respond(intent)
        return "unknown", FALLBACK

    def _respond(self, intent: str) -> str:
        if intent == "greeting":
            return GREETING
        if intent == "help":
            return HELP_TEXT
        if intent == "emergency":
            return (
                "If this is a medical emergency, call your local emergency number right away. "
                "You can also book an emergency consultation "
                f"({self._price('emergency')}) for immediate online help."
            )
        if intent == "prices":
            listed = ", ".join(f"{name}: {self._price(name)}" for name in self.prices)
            return f"Our consultation prices are {listed}."
        if intent == "consultation":
            return (
                "We offer instant, scheduled and emergency online consultations. "
                "Use the consultation form to choose a type and describe your health concern."
            )
        if intent == "appointment":
            return (
                "To book an appointment, choose a doctor, a date and a time slot on the "
                "appointment page. You'll get a confirmation by email and SMS."
            )
        return "Log in and open 'My Reports' to view your lab results, X-rays and prescriptions."

    def _price(self, consultation_type: str) -> str:
        price = self.prices.get(consultation_type)
        if price is None:
            return "unavailable"
        return f"{price} {self.currency}"
