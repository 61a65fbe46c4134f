import os
import logging

from flask import Flask, jsonify, request, send_from_directory
from flask_cors import CORS
from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from . import circulation, patron_session
from .config import Config
from .errors import CirculationError
from .models import Base

# ---------------------------------------------------------
# Logging
# ---------------------------------------------------------
logging.basicConfig(level=getattr(logging, Config.LOG_LEVEL.upper(), logging.INFO))
logger = logging.getLogger(__name__)

# ---------------------------------------------------------
# Flask + DB setup
# ---------------------------------------------------------

app = Flask(__name__, static_folder=None)
app.config.from_object(Config)
CORS(app, supports_credentials=True)

engine = create_engine(
    app.config["SQLALCHEMY_DATABASE_URI"],
    echo=app.config["SQLALCHEMY_ECHO"],
    future=True,
)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)

# Create tables if not present
Base.metadata.create_all(engine)

FRONTEND_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "frontend")


# ---------------------------------------------------------
# Helpers
# ---------------------------------------------------------

def request_data():
    """
    Fields from a JSON body or a submitted form.
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = request.form
    return data


# Serials and card numbers are signed 32-bit in the store
INT_MIN, INT_MAX = -(2 ** 31), 2 ** 31 - 1


def int_field(data, key):
    """
    Integer value of a field, or None when it is missing, not a whole
    number, or out of range.
    """
    value = data.get(key)
    if isinstance(value, bool):
        return None
    if isinstance(value, float) and not value.is_integer():
        return None
    try:
        value = int(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if not INT_MIN <= value <= INT_MAX:
        return None
    return value


def refused(exc):
    return jsonify({"success": False, "error": exc.message})


@app.errorhandler(SQLAlchemyError)
def store_failure(exc):
    logger.exception("Store failure on %s", request.path)
    return jsonify({"error": "Internal Server Error"}), 500


# ---------------------------------------------------------
# Pages
# ---------------------------------------------------------

@app.get("/")
def index():
    if not patron_session.is_logged_in(patron_session.current()):
        return send_from_directory(FRONTEND_DIR, "login.html")
    return send_from_directory(FRONTEND_DIR, "index.html")


@app.get("/login")
def login_page():
    patron_session.clear()
    return send_from_directory(FRONTEND_DIR, "login.html")


@app.get("/mybooks")
def my_books_page():
    if not patron_session.is_logged_in(patron_session.current()):
        return send_from_directory(FRONTEND_DIR, "login.html")
    return send_from_directory(FRONTEND_DIR, "mybooks.html")


@app.get("/privacy")
def privacy_page():
    return send_from_directory(FRONTEND_DIR, "privacy.html")


# ---------------------------------------------------------
# Health
# ---------------------------------------------------------

@app.get("/api/health")
def health_check():
    return jsonify({"status": "ok", "service": "circulation_service"}), 200


# ---------------------------------------------------------
# Login / logout
# ---------------------------------------------------------

@app.post("/api/login")
def check_login():
    """
    Request: {"name": "Alice", "cardnum": 100}
    """
    data = request_data()
    name = data.get("name")
    card_num = int_field(data, "cardnum")

    session = SessionLocal()
    try:
        patron = circulation.find_patron(session, name, card_num)
        if not patron:
            logger.warning("Failed login for card %s", data.get("cardnum"))
            return jsonify({"success": False})

        patron_session.start(patron.name, patron.card_num)
        logger.info("Card %s logged in", patron.card_num)
        return jsonify({"success": True})
    finally:
        session.close()


@app.post("/api/logout")
def log_out():
    patron = patron_session.current()
    patron_session.clear()
    if patron_session.is_logged_in(patron):
        logger.info("Card %s logged out", patron.card)
    return jsonify({"success": True})


# ---------------------------------------------------------
# Catalog
# ---------------------------------------------------------

@app.route("/api/titles", methods=["GET", "POST"])
def all_titles():
    session = SessionLocal()
    try:
        return jsonify(circulation.all_titles(session))
    finally:
        session.close()


@app.route("/api/mybooks", methods=["GET", "POST"])
def list_my_books():
    patron = patron_session.current()
    session = SessionLocal()
    try:
        return jsonify(circulation.books_held_by(session, patron))
    except CirculationError as e:
        return refused(e)
    finally:
        session.close()


# ---------------------------------------------------------
# Checkout / return
# ---------------------------------------------------------

@app.post("/api/checkout")
def check_out_book():
    """
    Request: {"serial": 5}
    """
    patron = patron_session.current()
    serial = int_field(request_data(), "serial")

    session = SessionLocal()
    try:
        circulation.check_out(session, patron, serial)
        return jsonify({"success": True})
    except CirculationError as e:
        logger.info("Checkout of %s refused: %s", serial, e.message)
        return refused(e)
    finally:
        session.close()


@app.post("/api/return")
def return_book():
    """
    Request: {"serial": 5}
    """
    patron = patron_session.current()
    serial = int_field(request_data(), "serial")

    session = SessionLocal()
    try:
        circulation.return_copy(session, patron, serial)
        return jsonify({"success": True})
    except CirculationError as e:
        logger.info("Return of %s refused: %s", serial, e.message)
        return refused(e)
    finally:
        session.close()


if __name__ == "__main__":
    port = int(os.getenv("PORT", "5000"))
    app.run(host="0.0.0.0", port=port, debug=True)
