"""SQLAlchemy database models."""
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from catalog_service.core.database import Base
from catalog_service.core.timeutils import utcnow


# A catalog record. isbn is the natural key and never changes once created;
# created_at is set on first persist and updated_at on every update.
class Book(Base):
    __tablename__ = "books"
    id = Column(Integer, primary_key=True, index=True)
    isbn = Column(String, unique=True, index=True, nullable=False)
    title = Column(String, nullable=False)
    author = Column(String, nullable=False)
    publication_year = Column(Integer, nullable=False)
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)


# An identity that can log in.
# Fields:
# 1. salt / password_hash: Argon2 hash of the password with a per-user salt
# 2. enabled: new users are disabled until explicitly enabled
# 3. session_token / token_expiry: set only by a successful login
# 4. permission_id: the user's permission set (exactly one per user)
class User(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, index=True)
    username = Column(String, unique=True, index=True, nullable=False)
    salt = Column(String, nullable=False)
    password_hash = Column(String, nullable=False)
    enabled = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    session_token = Column(String, unique=True, index=True, nullable=True)
    token_expiry = Column(DateTime, nullable=True)
    permission_id = Column(Integer, nullable=True)

    permission_set = relationship(
        "PermissionSet",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
    )


# Bitmask of granted actions, see services.permissions.Permission for the bits.
class PermissionSet(Base):
    __tablename__ = "permission_sets"
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    granted_actions = Column(Integer, nullable=False, default=0)

    user = relationship("User", back_populates="permission_set")
