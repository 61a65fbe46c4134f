from sqlalchemy.orm import declarative_base
from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
)

Base = declarative_base()


class Title(Base):
    __tablename__ = "title"

    isbn = Column(String(14), primary_key=True)
    title = Column(String(255), nullable=False)
    author = Column(String(255), nullable=False)


class Inventory(Base):
    """
    One physical copy of a title.
    """
    __tablename__ = "inventory"

    # Serials are assigned by the library, never generated here
    serial = Column(Integer, primary_key=True, autoincrement=False)
    isbn = Column(String(14), ForeignKey("title.isbn"), nullable=False)


class Patron(Base):
    __tablename__ = "patron"

    card_num = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String(255), nullable=False)


class CheckedOut(Base):
    __tablename__ = "checked_out"

    # PK on serial: a copy has at most one active checkout
    serial = Column(Integer, ForeignKey("inventory.serial"), primary_key=True, autoincrement=False)
    card_num = Column(Integer, ForeignKey("patron.card_num"), nullable=False)
