"""SQLAlchemy model for identity provider public keys."""

from datetime import datetime

from sqlalchemy import JSON, DateTime, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from tokenbridge.db.base import BaseEntity


class IdpKeyEntity(BaseEntity):
    """One JWKS entry advertised by the IdP, keyed by ``kid``."""

    __tablename__ = "idp_keys"

    kid: Mapped[str] = mapped_column(String(255), primary_key=True)
    kty: Mapped[str] = mapped_column(String(16), nullable=False, default="RSA")
    use: Mapped[str | None] = mapped_column(String(16), nullable=True)
    alg: Mapped[str | None] = mapped_column(String(16), nullable=True)
    x5t: Mapped[str | None] = mapped_column(String(255), nullable=True)
    n: Mapped[str | None] = mapped_column(Text, nullable=True)
    e: Mapped[str | None] = mapped_column(String(64), nullable=True)
    x5c: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    issuer: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
