"""Repository implementations for domain entities."""

from __future__ import annotations

from typing import Any

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from notive.domain.entities import (
    Conversation,
    FileType,
    Folder,
    Message,
    MessageRole,
    NoteFile,
    Subscription,
    UserIdentity,
)
from notive.domain.exceptions import DuplicateEntityException
from notive.domain.ports import (
    IConversationRepository,
    IFileRepository,
    IFolderRepository,
    ISubscriptionRepository,
    IUserRepository,
)
from notive.infrastructure.persistence.models import (
    ConversationModel,
    FileModel,
    FolderModel,
    MessageModel,
    SubscriptionModel,
    UserModel,
    ensure_utc_aware,
    utc_now,
)


def _to_identity(model: UserModel) -> UserIdentity:
    return UserIdentity(id=model.id, name=model.name, email=model.email)


def _to_subscription(model: SubscriptionModel) -> Subscription:
    return Subscription(
        user_id=model.user_id,
        plan=model.plan,
        created_at=ensure_utc_aware(model.created_at),
        updated_at=ensure_utc_aware(model.updated_at),
    )


def _to_folder(model: FolderModel) -> Folder:
    return Folder(
        id=model.id,
        user_id=model.user_id,
        name=model.name,
        icon=model.icon,
        parent_id=model.parent_id,
        is_deleted=model.is_deleted,
        created_at=ensure_utc_aware(model.created_at),
        updated_at=ensure_utc_aware(model.updated_at),
    )


def _to_file(model: FileModel) -> NoteFile:
    return NoteFile(
        id=model.id,
        user_id=model.user_id,
        name=model.name,
        type=FileType(model.type),
        folder_id=model.folder_id,
        content=model.content,
        file_path=model.file_path,
        mime_type=model.mime_type,
        size=model.size,
        created_at=ensure_utc_aware(model.created_at),
        updated_at=ensure_utc_aware(model.updated_at),
    )


def _to_conversation(model: ConversationModel, message_count: int = 0) -> Conversation:
    return Conversation(
        id=model.id,
        user_id=model.user_id,
        title=model.title,
        folder_id=model.folder_id,
        message_count=message_count,
        created_at=ensure_utc_aware(model.created_at),
        updated_at=ensure_utc_aware(model.updated_at),
    )


def _to_message(model: MessageModel) -> Message:
    return Message(
        id=model.id,
        conversation_id=model.conversation_id,
        role=MessageRole(model.role),
        content=model.content,
        created_at=ensure_utc_aware(model.created_at),
    )


class UserRepository(IUserRepository):
    """SQLAlchemy implementation of the user repository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with session."""
        self.session = session

    async def add(self, name: str, email: str, password_hash: str) -> UserIdentity:
        """Insert a user and flush so the generated id is available.

        Raises:
            DuplicateEntityException: The email is already registered (in any casing)
        """
        model = UserModel(name=name, email=email, password=password_hash)
        self.session.add(model)
        await self._flush_unique_email(email)
        return _to_identity(model)

    # Hey future me - email_taken() in the service is only the friendly fast path. Between
    # that check and this flush another request can register the same address, and then
    # the unique index is the only thing that notices. Its IntegrityError must come out as
    # the same 409 EMAIL_EXISTS the fast path gives, not as a 500.
    async def _flush_unique_email(self, email: str) -> None:
        try:
            await self.session.flush()
        except IntegrityError as e:
            raise DuplicateEntityException("User", email) from e

    async def get_by_id(self, user_id: int) -> UserIdentity | None:
        stmt = select(UserModel).where(UserModel.id == user_id)
        result = await self.session.execute(stmt)
        model = result.scalar_one_or_none()
        return _to_identity(model) if model else None

    # Hey future me - emails are compared case-insensitively. "Alice@X.com" and
    # "alice@x.com" are the same mailbox for every provider users actually have, and
    # treating them as two accounts makes login look randomly broken.
    async def get_by_email(self, email: str) -> UserIdentity | None:
        stmt = select(UserModel).where(func.lower(UserModel.email) == email.lower())
        result = await self.session.execute(stmt)
        model = result.scalars().first()
        return _to_identity(model) if model else None

    async def get_password_hash(self, user_id: int) -> str | None:
        stmt = select(UserModel.password).where(UserModel.id == user_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def email_taken(self, email: str, exclude_user_id: int | None = None) -> bool:
        stmt = select(func.count()).select_from(UserModel).where(
            func.lower(UserModel.email) == email.lower()
        )
        if exclude_user_id is not None:
            stmt = stmt.where(UserModel.id != exclude_user_id)
        result = await self.session.execute(stmt)
        return (result.scalar() or 0) > 0

    async def update_profile(self, user_id: int, name: str, email: str) -> UserIdentity | None:
        model = await self.session.get(UserModel, user_id)
        if model is None:
            return None
        model.name = name
        model.email = email
        model.updated_at = utc_now()
        await self._flush_unique_email(email)
        return _to_identity(model)

    async def update_password(self, user_id: int, password_hash: str) -> None:
        model = await self.session.get(UserModel, user_id)
        if model is None:
            return
        model.password = password_hash
        model.updated_at = utc_now()
        await self.session.flush()

    async def delete(self, user_id: int) -> bool:
        """Remove an account (cascades to subscription and folders)."""
        model = await self.session.get(UserModel, user_id)
        if model is None:
            return False
        await self.session.delete(model)
        await self.session.flush()
        return True


class SubscriptionRepository(ISubscriptionRepository):
    """SQLAlchemy implementation of the subscription repository."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def upsert(self, user_id: int, plan: str) -> Subscription:
        stmt = select(SubscriptionModel).where(SubscriptionModel.user_id == user_id)
        result = await self.session.execute(stmt)
        model = result.scalar_one_or_none()

        if model is None:
            model = SubscriptionModel(user_id=user_id, plan=plan)
            self.session.add(model)
        else:
            model.plan = plan
            model.updated_at = utc_now()

        await self.session.flush()
        return _to_subscription(model)

    async def get_by_user(self, user_id: int) -> Subscription | None:
        stmt = select(SubscriptionModel).where(SubscriptionModel.user_id == user_id)
        result = await self.session.execute(stmt)
        model = result.scalar_one_or_none()
        return _to_subscription(model) if model else None


class FolderRepository(IFolderRepository):
    """SQLAlchemy implementation of the folder repository."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def _get_owned(self, user_id: int, folder_id: int) -> FolderModel | None:
        stmt = select(FolderModel).where(
            FolderModel.id == folder_id,
            FolderModel.user_id == user_id,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get(self, user_id: int, folder_id: int) -> Folder | None:
        model = await self._get_owned(user_id, folder_id)
        if model is None or model.is_deleted:
            return None
        return _to_folder(model)

    async def list_for_user(self, user_id: int, parent_id: int | None = None) -> list[Folder]:
        stmt = select(FolderModel).where(
            FolderModel.user_id == user_id,
            FolderModel.is_deleted.is_(False),
        )
        if parent_id is not None:
            stmt = stmt.where(FolderModel.parent_id == parent_id)
        stmt = stmt.order_by(FolderModel.created_at.asc(), FolderModel.id.asc())

        result = await self.session.execute(stmt)
        return [_to_folder(model) for model in result.scalars().all()]

    async def add(
        self, user_id: int, name: str, icon: str | None, parent_id: int | None
    ) -> Folder:
        model = FolderModel(user_id=user_id, name=name, icon=icon, parent_id=parent_id)
        self.session.add(model)
        await self.session.flush()
        return _to_folder(model)

    async def update(
        self,
        user_id: int,
        folder_id: int,
        name: str | None,
        icon: str | None,
        parent_id: int | None,
    ) -> Folder | None:
        model = await self._get_owned(user_id, folder_id)
        if model is None:
            return None

        if name is not None:
            model.name = name
        if icon is not None:
            model.icon = icon
        if parent_id is not None:
            model.parent_id = parent_id
        model.updated_at = utc_now()

        await self.session.flush()
        return _to_folder(model)

    async def soft_delete(self, user_id: int, folder_id: int) -> bool:
        model = await self._get_owned(user_id, folder_id)
        if model is None:
            return False
        model.is_deleted = True
        model.updated_at = utc_now()
        await self.session.flush()
        return True


class FileRepository(IFileRepository):
    """SQLAlchemy implementation of the file repository."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def _get_owned(self, user_id: int, file_id: int) -> FileModel | None:
        stmt = select(FileModel).where(FileModel.id == file_id, FileModel.user_id == user_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_for_user(self, user_id: int, folder_id: int | None = None) -> list[NoteFile]:
        stmt = select(FileModel).where(FileModel.user_id == user_id)
        if folder_id is not None:
            stmt = stmt.where(FileModel.folder_id == folder_id)
        stmt = stmt.order_by(FileModel.created_at.asc(), FileModel.id.asc())

        result = await self.session.execute(stmt)
        return [_to_file(model) for model in result.scalars().all()]

    async def get(self, user_id: int, file_id: int) -> NoteFile | None:
        model = await self._get_owned(user_id, file_id)
        return _to_file(model) if model else None

    async def add(
        self,
        user_id: int,
        name: str,
        type: FileType,
        folder_id: int | None = None,
        content: list[Any] | None = None,
        file_path: str | None = None,
        mime_type: str | None = None,
        size: int | None = None,
    ) -> NoteFile:
        model = FileModel(
            user_id=user_id,
            folder_id=folder_id,
            name=name,
            type=type.value,
            content=content,
            file_path=file_path,
            mime_type=mime_type,
            size=size,
        )
        self.session.add(model)
        await self.session.flush()
        return _to_file(model)

    async def update(
        self,
        user_id: int,
        file_id: int,
        name: str | None,
        content: list[Any] | None,
        folder_id: int | None,
    ) -> NoteFile | None:
        model = await self._get_owned(user_id, file_id)
        if model is None:
            return None

        if name is not None:
            model.name = name
        if content is not None:
            model.content = content
        if folder_id is not None:
            model.folder_id = folder_id
        model.updated_at = utc_now()

        await self.session.flush()
        return _to_file(model)

    async def delete(self, user_id: int, file_id: int) -> NoteFile | None:
        model = await self._get_owned(user_id, file_id)
        if model is None:
            return None
        deleted = _to_file(model)
        await self.session.delete(model)
        await self.session.flush()
        return deleted


# Hey future me - messages are only ever reached through a conversation the service has
# already looked up with the caller's user_id. That's why the message methods take a bare
# conversation_id and don't re-check ownership.
class ConversationRepository(IConversationRepository):
    """SQLAlchemy implementation of the conversation repository."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def _get_owned(self, user_id: int, conversation_id: int) -> ConversationModel | None:
        stmt = select(ConversationModel).where(
            ConversationModel.id == conversation_id,
            ConversationModel.user_id == user_id,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_for_user(
        self, user_id: int, folder_id: int | None = None
    ) -> list[Conversation]:
        message_count = (
            select(func.count(MessageModel.id))
            .where(MessageModel.conversation_id == ConversationModel.id)
            .correlate(ConversationModel)
            .scalar_subquery()
        )
        stmt = select(ConversationModel, message_count).where(
            ConversationModel.user_id == user_id
        )
        if folder_id is not None:
            stmt = stmt.where(ConversationModel.folder_id == folder_id)
        stmt = stmt.order_by(ConversationModel.updated_at.desc(), ConversationModel.id.desc())

        result = await self.session.execute(stmt)
        return [_to_conversation(model, count or 0) for model, count in result.all()]

    async def get(self, user_id: int, conversation_id: int) -> Conversation | None:
        model = await self._get_owned(user_id, conversation_id)
        if model is None:
            return None
        return _to_conversation(model, await self.count_messages(model.id))

    async def add(self, user_id: int, title: str, folder_id: int | None) -> Conversation:
        model = ConversationModel(user_id=user_id, title=title, folder_id=folder_id)
        self.session.add(model)
        await self.session.flush()
        return _to_conversation(model)

    async def update_title(
        self, user_id: int, conversation_id: int, title: str
    ) -> Conversation | None:
        model = await self._get_owned(user_id, conversation_id)
        if model is None:
            return None
        model.title = title
        model.updated_at = utc_now()
        await self.session.flush()
        return _to_conversation(model, await self.count_messages(model.id))

    async def touch(self, conversation_id: int) -> None:
        model = await self.session.get(ConversationModel, conversation_id)
        if model is None:
            return
        model.updated_at = utc_now()
        await self.session.flush()

    async def delete(self, user_id: int, conversation_id: int) -> bool:
        model = await self._get_owned(user_id, conversation_id)
        if model is None:
            return False
        await self.session.execute(
            delete(MessageModel).where(MessageModel.conversation_id == conversation_id)
        )
        await self.session.delete(model)
        await self.session.flush()
        return True

    async def add_message(
        self, conversation_id: int, role: MessageRole, content: str
    ) -> Message:
        model = MessageModel(conversation_id=conversation_id, role=role.value, content=content)
        self.session.add(model)
        await self.session.flush()
        return _to_message(model)

    async def list_messages(self, conversation_id: int) -> list[Message]:
        stmt = (
            select(MessageModel)
            .where(MessageModel.conversation_id == conversation_id)
            .order_by(MessageModel.created_at.asc(), MessageModel.id.asc())
        )
        result = await self.session.execute(stmt)
        return [_to_message(model) for model in result.scalars().all()]

    async def count_messages(self, conversation_id: int, role: MessageRole | None = None) -> int:
        stmt = select(func.count(MessageModel.id)).where(
            MessageModel.conversation_id == conversation_id
        )
        if role is not None:
            stmt = stmt.where(MessageModel.role == role.value)
        result = await self.session.execute(stmt)
        return result.scalar() or 0
