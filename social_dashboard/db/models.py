from __future__ import annotations

from datetime import date, datetime
from typing import Optional
from uuid import uuid4

from sqlalchemy import Date, DateTime, Enum, ForeignKey, Index, String, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from social_dashboard.db.base import Base
from social_dashboard.db.enums import ClientRoleEnum


def _uuid_str() -> str:
    return str(uuid4())


class Client(Base):
    __tablename__ = "clients"

    id: Mapped[str] = mapped_column(String(length=36), primary_key=True, default=_uuid_str)
    name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )


class ClientUser(Base):
    __tablename__ = "client_users"
    __table_args__ = (UniqueConstraint("user_id", "client_id", name="uq_client_users_user_client"),)

    id: Mapped[str] = mapped_column(String(length=36), primary_key=True, default=_uuid_str)
    user_id: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    client_id: Mapped[str] = mapped_column(ForeignKey("clients.id", ondelete="CASCADE"), nullable=False)
    role: Mapped[ClientRoleEnum] = mapped_column(
        Enum(ClientRoleEnum, name="client_role"),
        nullable=False,
        server_default=ClientRoleEnum.member.value,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    client: Mapped[Optional[Client]] = relationship(Client, lazy="joined")


class Campaign(Base):
    __tablename__ = "campaigns"

    id: Mapped[str] = mapped_column(String(length=36), primary_key=True, default=_uuid_str)
    client_id: Mapped[str] = mapped_column(ForeignKey("clients.id", ondelete="CASCADE"), nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    start_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    end_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)


class ContentItem(Base):
    __tablename__ = "content_items"
    __table_args__ = (Index("ix_content_items_client_post_date", "client_id", "post_date"),)

    id: Mapped[str] = mapped_column(String(length=36), primary_key=True, default=_uuid_str)
    client_id: Mapped[str] = mapped_column(ForeignKey("clients.id", ondelete="CASCADE"), nullable=False)
    campaign_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("campaigns.id", ondelete="SET NULL"), nullable=True
    )
    content_name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    # Free text rather than an enum: unknown platforms still render with the fallback color.
    platform: Mapped[str] = mapped_column(Text, nullable=False)
    content_type: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    content_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    post_date: Mapped[date] = mapped_column(Date, nullable=False)

    campaign: Mapped[Optional[Campaign]] = relationship(Campaign, lazy="joined")


class Metric(Base):
    __tablename__ = "metrics"

    id: Mapped[str] = mapped_column(String(length=36), primary_key=True, default=_uuid_str)
    content_id: Mapped[str] = mapped_column(
        ForeignKey("content_items.id", ondelete="CASCADE"), nullable=False, index=True
    )
    metric_name: Mapped[str] = mapped_column(Text, nullable=False)
    metric_value: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    recorded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
