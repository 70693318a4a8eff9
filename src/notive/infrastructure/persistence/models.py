"""SQLAlchemy ORM models for Notive."""

from datetime import UTC, datetime
from typing import Any

from sqlalchemy import JSON, BigInteger, Boolean, ForeignKey, Index, Integer, String, Text, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


# Hey future me, utc_now() ensures ALL timestamps are UTC! Never use datetime.now() without
# timezone - that's "naive" datetime and causes bugs when servers are in different timezones.
def utc_now() -> datetime:
    """Get current UTC time."""
    return datetime.now(UTC)


# Hey future me - SQLite doesn't preserve timezone info! When we store UTC datetimes, they come
# back as "naive" (no tzinfo). ALWAYS use this when handing DB datetimes to domain objects or
# comparing them with datetime.now(UTC), otherwise you get "can't compare offset-naive and
# offset-aware" TypeErrors.
def ensure_utc_aware(dt: datetime) -> datetime:
    """Ensure datetime is UTC-aware, assuming naive datetimes are UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


# Listen up, the password column holds the bcrypt HASH, never the password. It is only ever
# read by UserRepository.get_password_hash() - every other query selects id/name/email so the
# hash can't leak into an API response by accident.
class UserModel(Base):
    """Registered account."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    password: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(default=utc_now, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        default=utc_now, onupdate=utc_now, nullable=False
    )

    subscription: Mapped["SubscriptionModel | None"] = relationship(
        back_populates="user", cascade="all, delete-orphan", uselist=False
    )
    folders: Mapped[list["FolderModel"]] = relationship(
        back_populates="user", cascade="all, delete-orphan"
    )


# Lookups compare lower(email), so uniqueness has to be enforced on the same expression.
# Two concurrent sign-ups for "Bob@x.com" and "bob@x.com" both pass email_taken(); this
# index makes the loser fail at flush time.
Index("uq_users_email_lower", func.lower(UserModel.email), unique=True)


class SubscriptionModel(Base):
    """A user's plan. One row per user (user_id is unique)."""

    __tablename__ = "subscriptions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    plan: Mapped[str] = mapped_column(String(20), nullable=False)
    created_at: Mapped[datetime] = mapped_column(default=utc_now, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        default=utc_now, onupdate=utc_now, nullable=False
    )

    user: Mapped[UserModel] = relationship(back_populates="subscription")


# Hey future me - folders are soft-deleted (is_deleted=True) so notes that still point at a
# deleted folder don't dangle. parent_id uses SET NULL: deleting a parent for real turns its
# children into top-level folders instead of wiping them.
class FolderModel(Base):
    """User folder, optionally nested via parent_id."""

    __tablename__ = "folders"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    icon: Mapped[str | None] = mapped_column(Text, nullable=True)
    parent_id: Mapped[int | None] = mapped_column(
        ForeignKey("folders.id", ondelete="SET NULL"), nullable=True
    )
    is_deleted: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(default=utc_now, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        default=utc_now, onupdate=utc_now, nullable=False
    )

    user: Mapped[UserModel] = relationship(back_populates="folders")

    __table_args__ = (Index("ix_folders_user_deleted", "user_id", "is_deleted"),)


# Hey future me - one table for notes AND uploads, told apart by ``type``. Notes keep their
# blocks in ``content`` (JSON list), uploads keep the public path of the bytes on disk in
# ``file_path``. folder_id is SET NULL so a hard-deleted folder doesn't take files with it.
class FileModel(Base):
    """Note or uploaded media item."""

    __tablename__ = "files"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    folder_id: Mapped[int | None] = mapped_column(
        ForeignKey("folders.id", ondelete="SET NULL"), nullable=True
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    content: Mapped[list[Any] | None] = mapped_column(JSON, nullable=True)
    file_path: Mapped[str | None] = mapped_column(Text, nullable=True)
    mime_type: Mapped[str | None] = mapped_column(Text, nullable=True)
    size: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    created_at: Mapped[datetime] = mapped_column(default=utc_now, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        default=utc_now, onupdate=utc_now, nullable=False
    )

    __table_args__ = (Index("ix_files_user_folder", "user_id", "folder_id"),)


class ConversationModel(Base):
    """AI chat thread."""

    __tablename__ = "conversations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    folder_id: Mapped[int | None] = mapped_column(
        ForeignKey("folders.id", ondelete="SET NULL"), nullable=True
    )
    title: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(default=utc_now, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        default=utc_now, onupdate=utc_now, nullable=False
    )

    __table_args__ = (Index("ix_conversations_user_updated", "user_id", "updated_at"),)


class MessageModel(Base):
    """One message of a conversation (role is user or assistant)."""

    __tablename__ = "messages"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    conversation_id: Mapped[int] = mapped_column(
        ForeignKey("conversations.id", ondelete="CASCADE"), nullable=False
    )
    role: Mapped[str] = mapped_column(String(20), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(default=utc_now, nullable=False)

    __table_args__ = (Index("ix_messages_conversation", "conversation_id", "created_at"),)
