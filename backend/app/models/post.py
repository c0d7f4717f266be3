"""Post ORM — the posts table behind the SQL key-value store.

Invariants:
    - id is the string primary key (uuid4 text, assigned by the repository)
    - title, content, author are non-nullable text
    - No secondary indexes: the table is only read by key or by key-ordered scan

Design Decisions:
    - String key over UUID column: the store contract keys by opaque string,
      same shape on SQL and DynamoDB
"""

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class PostRecord(Base):
    """One row per post."""
    __tablename__ = "posts"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    author: Mapped[str] = mapped_column(Text, nullable=False)

    def to_item(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "author": self.author,
        }
