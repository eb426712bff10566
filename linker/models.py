"""SQLAlchemy ORM model for the links table.

Data Model Layout
=================
::
    links table
    ├─ slug   (VARCHAR(10), constraint links_pkey)
    ├─ url    (TEXT NOT NULL, constraint links_url_key)
    └─ hidden (BOOLEAN NOT NULL DEFAULT false)

The constraint names are part of the contract with ``linker.store``: an
IntegrityError is classified as a slug collision or a duplicate URL by the
name of the constraint that fired.

How to Use
===========
**Query by slug**::
    result = await session.execute(select(Link).where(Link.slug == slug))
    link = result.scalar_one_or_none()

Key Behaviours
===============
- Rows are inserted once and never updated or deleted.
- url is unique: a destination can be registered at most once.

Classes:
    Link:  One slug → destination mapping.
"""

from sqlalchemy import Boolean, PrimaryKeyConstraint, String, Text, UniqueConstraint, false
from sqlalchemy.orm import Mapped, mapped_column

from linker.database import Base
from linker.slug import LENGTH

__all__ = ["Link", "PK_CONSTRAINT", "URL_CONSTRAINT"]

PK_CONSTRAINT = "links_pkey"
URL_CONSTRAINT = "links_url_key"


class Link(Base):
    __tablename__ = "links"
    __table_args__ = (
        PrimaryKeyConstraint("slug", name=PK_CONSTRAINT),
        UniqueConstraint("url", name=URL_CONSTRAINT),
    )

    slug: Mapped[str] = mapped_column(String(LENGTH))
    url: Mapped[str] = mapped_column(Text, nullable=False)
    hidden: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=false())

    def __repr__(self) -> str:
        return f"<Link(slug='{self.slug}', url='{self.url}', hidden={self.hidden})>"
