"""
Conversation store - SQLite with SQLAlchemy

Persists chat conversations and their messages exactly as the UI sends
them.  Assistant messages carry the reasoning trace and itinerary JSON.
"""
from datetime import datetime, timezone
import uuid

from sqlalchemy import create_engine, Column, String, DateTime, Text, ForeignKey, JSON
from sqlalchemy.orm import declarative_base, sessionmaker, relationship

import config

Base = declarative_base()

TITLE_MAX_CHARS = 50


def generate_id():
    return str(uuid.uuid4())


def _utcnow():
    return datetime.now(timezone.utc)


def conversation_title(prompt: str) -> str:
    """First 50 characters of the opening prompt, with an ellipsis when cut."""
    prompt = prompt.strip()
    if len(prompt) > TITLE_MAX_CHARS:
        return prompt[:TITLE_MAX_CHARS] + "..."
    return prompt


class Conversation(Base):
    __tablename__ = "conversations"

    id = Column(String, primary_key=True, default=generate_id)
    user_id = Column(String, index=True)
    title = Column(String)
    created_at = Column(DateTime, default=_utcnow)
    updated_at = Column(DateTime, default=_utcnow)

    messages = relationship(
        "Message", back_populates="conversation",
        cascade="all, delete-orphan", order_by="Message.created_at",
    )


class Message(Base):
    __tablename__ = "messages"

    id = Column(String, primary_key=True, default=generate_id)
    conversation_id = Column(String, ForeignKey("conversations.id"), index=True)
    role = Column(String)  # user, assistant
    content = Column(Text)
    thinking = Column(JSON, nullable=True)  # reasoning trace, assistant only
    itinerary = Column(JSON, nullable=True)  # wire-shape itinerary, assistant only
    created_at = Column(DateTime, default=_utcnow)

    conversation = relationship("Conversation", back_populates="messages")


# One engine (and connection pool) per database URL for the life of the process
_engines = {}


def _engine():
    url = config.database_url()
    if url not in _engines:
        connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
        _engines[url] = create_engine(url, connect_args=connect_args)
    return _engines[url]


def init_db():
    """Create the tables if they do not exist yet."""
    engine = _engine()
    Base.metadata.create_all(bind=engine)
    return engine


def get_db():
    Session = sessionmaker(bind=_engine())
    return Session()


def touch(conversation: Conversation):
    conversation.updated_at = _utcnow()
