"""Small test doubles and builders shared across test modules."""

from shopbot.chatbot.schemas import Intent


class FixedRandom:
    """randrange() stand-in returning a fixed sequence (cycled)."""

    def __init__(self, *values):
        self._values = list(values) or [0]
        self._i = 0

    def randrange(self, stop):
        value = self._values[self._i % len(self._values)]
        self._i += 1
        return value % stop


def make_intent(tag, patterns, responses=()):
    return Intent(tag=tag, patterns=list(patterns), responses=list(responses))
