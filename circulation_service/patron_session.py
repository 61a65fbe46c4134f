"""
Per-client login state, kept in Flask's signed session cookie.

Routes read it once with ``current()`` and hand the result to the
circulation functions, so every operation works on the identity of the
client that sent the request.
"""
from collections import namedtuple

from flask import session

NO_CARD = -1

PatronSession = namedtuple("PatronSession", ["name", "card"])

ANONYMOUS = PatronSession(name="", card=NO_CARD)


def is_logged_in(patron):
    return patron.card != NO_CARD


def current():
    card = session.get("card", NO_CARD)
    if card == NO_CARD:
        return ANONYMOUS
    return PatronSession(name=session.get("name", ""), card=card)


def start(name, card):
    # A new login replaces whatever identity the client had
    session.clear()
    session["name"] = name
    session["card"] = card
    return PatronSession(name=name, card=card)


def clear():
    session.clear()
