import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from .errors import AlreadyCheckedOut, InvalidSerial, NotCheckedOutByYou, NotLoggedIn
from .models import CheckedOut, Inventory, Patron, Title
from .patron_session import is_logged_in

logger = logging.getLogger(__name__)


# ----------------- authentication -----------------

def find_patron(session, name, card_num):
    """
    Exact match on both name and card number; None if either differs.
    """
    if card_num is None:
        return None
    q = select(Patron).where((Patron.name == name) & (Patron.card_num == card_num))
    return session.execute(q).scalar_one_or_none()


def require_login(patron):
    if not is_logged_in(patron):
        raise NotLoggedIn()


# ----------------- catalog -----------------

def all_titles(session):
    """
    Every title, one row per copy.

    Titles without copies appear once with serial None; copies nobody holds
    carry an empty holder name.
    """
    q = (
        select(
            Title.isbn,
            Title.title,
            Title.author,
            Inventory.serial,
            Patron.name.label("holder"),
        )
        .select_from(Title)
        .outerjoin(Inventory, Inventory.isbn == Title.isbn)
        .outerjoin(CheckedOut, CheckedOut.serial == Inventory.serial)
        .outerjoin(Patron, Patron.card_num == CheckedOut.card_num)
        .order_by(Title.isbn, Inventory.serial)
    )
    return [
        {
            "isbn": row.isbn,
            "title": row.title,
            "author": row.author,
            "serial": row.serial,
            "name": row.holder if row.holder is not None else "",
        }
        for row in session.execute(q)
    ]


def books_held_by(session, patron):
    require_login(patron)

    q = (
        select(Title.title, Title.author, CheckedOut.serial)
        .select_from(CheckedOut)
        .join(Inventory, Inventory.serial == CheckedOut.serial)
        .join(Title, Title.isbn == Inventory.isbn)
        .where(CheckedOut.card_num == patron.card)
        .order_by(CheckedOut.serial)
    )
    return [
        {"title": row.title, "author": row.author, "serial": row.serial}
        for row in session.execute(q)
    ]


# ----------------- state transitions -----------------

def find_checkout(session, serial):
    q = select(CheckedOut).where(CheckedOut.serial == serial)
    return session.execute(q).scalar_one_or_none()


def check_out(session, patron, serial):
    require_login(patron)

    if serial is None:
        raise InvalidSerial()

    copy = session.execute(
        select(Inventory).where(Inventory.serial == serial)
    ).scalar_one_or_none()
    if not copy:
        raise InvalidSerial()

    if find_checkout(session, serial):
        raise AlreadyCheckedOut()

    session.add(CheckedOut(serial=serial, card_num=patron.card))
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        if not find_checkout(session, serial):
            raise
        # Another request inserted this serial after our check
        logger.warning("Checkout conflict on serial %s for card %s", serial, patron.card)
        raise AlreadyCheckedOut()

    logger.info("Card %s checked out serial %s", patron.card, serial)


def return_copy(session, patron, serial):
    require_login(patron)

    record = None
    if serial is not None:
        q = select(CheckedOut).where(
            (CheckedOut.serial == serial) & (CheckedOut.card_num == patron.card)
        )
        record = session.execute(q).scalar_one_or_none()
    if not record:
        raise NotCheckedOutByYou()

    session.delete(record)
    session.commit()
    logger.info("Card %s returned serial %s", patron.card, serial)
