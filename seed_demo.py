# seed_demo.py
import os

import requests

from circulation_service.app import SessionLocal
from circulation_service.models import CheckedOut, Inventory, Patron, Title

SERVICE_BASE_URL = os.getenv("SERVICE_BASE_URL", "http://localhost:5000")

TITLES = [
    {
        "isbn": "978-0132350884",
        "title": "Clean Code",
        "author": "Robert C. Martin",
    },
    {
        "isbn": "978-0201616224",
        "title": "The Pragmatic Programmer",
        "author": "Andrew Hunt, David Thomas",
    },
    {
        "isbn": "978-0131103627",
        "title": "The C Programming Language",
        "author": "Brian W. Kernighan, Dennis M. Ritchie",
    },
    {
        "isbn": "978-0134685991",
        "title": "Effective Java",
        "author": "Joshua Bloch",
    },
    {
        "isbn": "978-1491950357",
        "title": "Designing Data-Intensive Applications",
        "author": "Martin Kleppmann",
    },
    {
        # deliberately left without copies
        "isbn": "978-0262033848",
        "title": "Introduction to Algorithms",
        "author": "Cormen, Leiserson, Rivest, Stein",
    },
]

PATRONS = [
    {"card_num": 1, "name": "Joe"},
    {"card_num": 2, "name": "Jane"},
    {"card_num": 3, "name": "Shaun"},
]


def seed_database():
    print("== Seeding titles, copies and patrons ==")
    session = SessionLocal()
    try:
        serial = 1001
        for i, t in enumerate(TITLES):
            session.merge(Title(**t))
            # vary copies per title: 0-3, the last title gets none
            copies = 0 if i == len(TITLES) - 1 else 1 + (i % 3)
            for _ in range(copies):
                session.merge(Inventory(serial=serial, isbn=t["isbn"]))
                serial += 1
            print(f"  {t['title']} -> {copies} copies")

        for p in PATRONS:
            session.merge(Patron(**p))
            print(f"  patron {p['card_num']}: {p['name']}")

        # Start from an empty circulation desk
        session.query(CheckedOut).delete()
        session.commit()
    finally:
        session.close()


def check_service(url):
    """Hit /api/health and return True/False."""
    health_url = f"{url.rstrip('/')}/api/health"
    try:
        r = requests.get(health_url, timeout=3)
        print(f"[CHECK] {health_url} -> {r.status_code}")
        return r.ok
    except requests.RequestException as e:
        print(f"[ERROR] service not reachable at {health_url}: {e}")
        return False


def walkthrough(base_url):
    print("\n== Walking through a checkout ==")
    base = base_url.rstrip("/")
    # requests.Session keeps the login cookie between calls
    with requests.Session() as http:
        steps = [
            ("login", "/api/login", {"name": PATRONS[0]["name"], "cardnum": PATRONS[0]["card_num"]}),
            ("checkout", "/api/checkout", {"serial": 1001}),
            ("my books", "/api/mybooks", None),
            ("checkout again", "/api/checkout", {"serial": 1001}),
            ("return", "/api/return", {"serial": 1001}),
            ("return again", "/api/return", {"serial": 1001}),
            ("logout", "/api/logout", None),
        ]
        for label, path, payload in steps:
            resp = http.post(f"{base}{path}", json=payload or {}, timeout=5)
            print(f"  {label:15} -> {resp.status_code} {resp.text.strip()}")


def main():
    seed_database()

    print("\nChecking circulation service...")
    if not check_service(SERVICE_BASE_URL):
        print("\nService is not running, skipping the walkthrough.")
        print("Start it with: python -m circulation_service.app")
        return

    walkthrough(SERVICE_BASE_URL)

    print("\nDone.")
    print("Try hitting:")
    print(f"  {SERVICE_BASE_URL}/api/titles")
    print("and log in as Joe / 1 in the browser.")


if __name__ == "__main__":
    main()
