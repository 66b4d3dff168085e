"""
SQLAlchemy database models for WorkHub.

Defines the tables for tenants (companies), users, clients and portal
contacts, projects, time entries, teams, holidays, quotes, invoices, chats and the
append-only audit trail.
"""
import uuid
from datetime import datetime, timezone
from sqlalchemy import (
    Column, String, Integer, Boolean, Date, DateTime, Time, Text, Numeric,
    ForeignKey, JSON, UniqueConstraint, Index, Enum, Table, Uuid, event
)
from sqlalchemy.orm import declarative_base, relationship
import enum

Base = declarative_base()


def utcnow():
    return datetime.now(timezone.utc)


class UserRole(str, enum.Enum):
    """User roles. SUPERADMIN spans tenants, CLIENT is a portal contact."""
    SUPERADMIN = "superadmin"
    ADMIN = "admin"
    MANAGER = "manager"
    WORKER = "worker"
    CLIENT = "client"


class TimeEntryStatus(str, enum.Enum):
    """Review state of a time entry."""
    DRAFT = "draft"
    SUBMITTED = "submitted"
    APPROVED = "approved"
    REJECTED = "rejected"


class QuoteStatus(str, enum.Enum):
    """Quote lifecycle values."""
    DRAFT = "draft"
    SENT = "sent"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    EXPIRED = "expired"
    CONVERTED = "converted"


class InvoiceStatus(str, enum.Enum):
    """Invoice lifecycle values."""
    DRAFT = "draft"
    SENT = "sent"
    PAID = "paid"
    CANCELLED = "cancelled"


class Tenant(Base):
    """Company; the isolation boundary for all data."""
    __tablename__ = "tenants"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False, unique=True)
    domain = Column(String(255), nullable=True)
    settings = Column(JSON, nullable=False, default=dict)
    active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=utcnow)

    # Relationships
    users = relationship("User", back_populates="tenant", cascade="all, delete-orphan")
    clients = relationship("Client", back_populates="tenant", cascade="all, delete-orphan")
    projects = relationship("Project", back_populates="tenant", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Tenant(id={self.id}, name='{self.name}')>"


team_members = Table(
    "team_members",
    Base.metadata,
    Column("team_id", Uuid, ForeignKey("teams.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)


class User(Base):
    """Staff user. tenant_id is empty only for SUPERADMIN accounts."""
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    tenant_id = Column(Uuid, ForeignKey("tenants.id"), nullable=True)
    email = Column(String(255), nullable=False)
    name = Column(String(200), nullable=False)
    role = Column(Enum(UserRole), nullable=False, default=UserRole.WORKER)
    department = Column(String(100), nullable=True)
    active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=utcnow)

    # Relationships
    tenant = relationship("Tenant", back_populates="users")
    time_entries = relationship("TimeEntry", back_populates="user", foreign_keys="TimeEntry.user_id",
                                cascade="all, delete-orphan")
    teams = relationship("Team", secondary=team_members, back_populates="members")

    # Constraints
    __table_args__ = (
        UniqueConstraint('tenant_id', 'email', name='uq_user_email_per_tenant'),
        Index('idx_user_active', 'active'),
    )

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', tenant_id={self.tenant_id})>"


class Client(Base):
    """Customer of a tenant."""
    __tablename__ = "clients"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    tenant_id = Column(Uuid, ForeignKey("tenants.id"), nullable=False)
    name = Column(String(255), nullable=False)
    contact_email = Column(String(255), nullable=True)
    active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    # Relationships
    tenant = relationship("Tenant", back_populates="clients")
    projects = relationship("Project", back_populates="client")
    contacts = relationship("ClientContact", back_populates="client", cascade="all, delete-orphan")

    # Constraints
    __table_args__ = (
        UniqueConstraint('tenant_id', 'name', name='uq_client_name_per_tenant'),
        Index('idx_client_tenant_active', 'tenant_id', 'active'),
    )

    def __repr__(self):
        return f"<Client(id={self.id}, name='{self.name}', tenant_id={self.tenant_id})>"


class ClientContact(Base):
    """Person at a client who can sign in to the client portal."""
    __tablename__ = "client_contacts"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    client_id = Column(Uuid, ForeignKey("clients.id"), nullable=False)
    name = Column(String(200), nullable=False)
    email = Column(String(255), nullable=False, unique=True)
    access_code_hash = Column(String(255), nullable=False)
    active = Column(Boolean, nullable=False, default=True)
    last_login = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    client = relationship("Client", back_populates="contacts")

    def __repr__(self):
        return f"<ClientContact(id={self.id}, email='{self.email}', client_id={self.client_id})>"


class Project(Base):
    """Project that time is booked against."""
    __tablename__ = "projects"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    tenant_id = Column(Uuid, ForeignKey("tenants.id"), nullable=False)
    client_id = Column(Uuid, ForeignKey("clients.id"), nullable=True)
    code = Column(String(50), nullable=False)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    hourly_rate = Column(Numeric(8, 2), nullable=True)
    active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=utcnow)

    # Relationships
    tenant = relationship("Tenant", back_populates="projects")
    client = relationship("Client", back_populates="projects")
    time_entries = relationship("TimeEntry", back_populates="project", cascade="all, delete-orphan")

    # Constraints
    __table_args__ = (
        UniqueConstraint('tenant_id', 'code', name='uq_project_code_per_tenant'),
        Index('idx_project_tenant_client', 'tenant_id', 'client_id'),
    )

    def __repr__(self):
        return f"<Project(id={self.id}, code='{self.code}', tenant_id={self.tenant_id})>"


class TimeEntry(Base):
    """Hours a user booked on a project for one day."""
    __tablename__ = "time_entries"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    tenant_id = Column(Uuid, ForeignKey("tenants.id"), nullable=False)
    user_id = Column(Uuid, ForeignKey("users.id"), nullable=False)
    project_id = Column(Uuid, ForeignKey("projects.id"), nullable=False)
    date = Column(Date, nullable=False)
    start_time = Column(Time, nullable=True)
    end_time = Column(Time, nullable=True)
    hours = Column(Numeric(5, 2), nullable=False)
    notes = Column(Text, nullable=True)
    status = Column(Enum(TimeEntryStatus), nullable=False, default=TimeEntryStatus.DRAFT)
    submitted_at = Column(DateTime(timezone=True), nullable=True)
    reviewed_by_id = Column(Uuid, ForeignKey("users.id"), nullable=True)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)
    rejection_reason = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=utcnow)

    # Relationships
    user = relationship("User", back_populates="time_entries", foreign_keys=[user_id])
    project = relationship("Project", back_populates="time_entries")

    # Concurrent inserts of the same range collide here.
    __table_args__ = (
        UniqueConstraint('user_id', 'project_id', 'date', 'start_time', 'end_time',
                         name='uq_time_entry_range'),
        Index('idx_time_entry_tenant_user_date', 'tenant_id', 'user_id', 'date'),
        Index('idx_time_entry_project', 'project_id'),
    )

    def __repr__(self):
        return f"<TimeEntry(id={self.id}, user_id={self.user_id}, date={self.date}, hours={self.hours})>"


class Team(Base):
    """Group of users inside a company."""
    __tablename__ = "teams"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    tenant_id = Column(Uuid, ForeignKey("tenants.id"), nullable=False)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    manager_id = Column(Uuid, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=utcnow)

    # Relationships
    manager = relationship("User", foreign_keys=[manager_id])
    members = relationship("User", secondary=team_members, back_populates="teams")

    __table_args__ = (
        UniqueConstraint('tenant_id', 'name', name='uq_team_name_per_tenant'),
    )

    def __repr__(self):
        return f"<Team(id={self.id}, name='{self.name}', tenant_id={self.tenant_id})>"


class Holiday(Base):
    """Non-working day. A null tenant_id marks a global holiday."""
    __tablename__ = "holidays"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    tenant_id = Column(Uuid, ForeignKey("tenants.id"), nullable=True)
    date = Column(Date, nullable=False)
    name = Column(String(255), nullable=False)
    type = Column(String(50), nullable=False, default="NATIONAL")
    year = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        UniqueConstraint('tenant_id', 'date', name='uq_holiday_date_per_tenant'),
        Index('idx_holiday_year', 'year'),
    )

    def __repr__(self):
        return f"<Holiday(id={self.id}, date={self.date}, tenant_id={self.tenant_id})>"


class Quote(Base):
    """Commercial quote sent to a client."""
    __tablename__ = "quotes"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    tenant_id = Column(Uuid, ForeignKey("tenants.id"), nullable=False)
    client_id = Column(Uuid, ForeignKey("clients.id"), nullable=False)
    number = Column(String(50), nullable=False)
    status = Column(Enum(QuoteStatus), nullable=False, default=QuoteStatus.DRAFT)
    valid_until = Column(Date, nullable=False)
    notes = Column(Text, nullable=True)
    terms = Column(Text, nullable=True)
    subtotal = Column(Numeric(12, 2), nullable=False, default=0)
    tax_amount = Column(Numeric(12, 2), nullable=False, default=0)
    total = Column(Numeric(12, 2), nullable=False, default=0)
    created_by_id = Column(Uuid, ForeignKey("users.id"), nullable=False)
    sent_at = Column(DateTime(timezone=True), nullable=True)
    accepted_at = Column(DateTime(timezone=True), nullable=True)
    rejected_at = Column(DateTime(timezone=True), nullable=True)
    converted_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=utcnow)

    # Relationships
    client = relationship("Client")
    items = relationship("QuoteItem", back_populates="quote", cascade="all, delete-orphan",
                         order_by="QuoteItem.position")

    __table_args__ = (
        UniqueConstraint('tenant_id', 'number', name='uq_quote_number_per_tenant'),
    )

    def __repr__(self):
        return f"<Quote(id={self.id}, number='{self.number}', status={self.status})>"


class QuoteItem(Base):
    """Line of a quote."""
    __tablename__ = "quote_items"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    quote_id = Column(Uuid, ForeignKey("quotes.id", ondelete="CASCADE"), nullable=False)
    description = Column(Text, nullable=False)
    quantity = Column(Numeric(10, 2), nullable=False)
    unit_price = Column(Numeric(12, 2), nullable=False)
    tax_rate = Column(Numeric(5, 2), nullable=False, default=0)
    subtotal = Column(Numeric(12, 2), nullable=False)
    tax_amount = Column(Numeric(12, 2), nullable=False)
    total = Column(Numeric(12, 2), nullable=False)
    position = Column(Integer, nullable=False, default=0)

    quote = relationship("Quote", back_populates="items")


class Invoice(Base):
    """Invoice issued to a client, usually converted from an accepted quote."""
    __tablename__ = "invoices"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    tenant_id = Column(Uuid, ForeignKey("tenants.id"), nullable=False)
    client_id = Column(Uuid, ForeignKey("clients.id"), nullable=False)
    quote_id = Column(Uuid, ForeignKey("quotes.id"), nullable=True, unique=True)
    number = Column(String(50), nullable=False)
    status = Column(Enum(InvoiceStatus), nullable=False, default=InvoiceStatus.DRAFT)
    date = Column(Date, nullable=False)
    due_date = Column(Date, nullable=False)
    notes = Column(Text, nullable=True)
    terms = Column(Text, nullable=True)
    subtotal = Column(Numeric(12, 2), nullable=False, default=0)
    tax_amount = Column(Numeric(12, 2), nullable=False, default=0)
    total = Column(Numeric(12, 2), nullable=False, default=0)
    paid_amount = Column(Numeric(12, 2), nullable=False, default=0)
    balance = Column(Numeric(12, 2), nullable=False, default=0)
    created_by_id = Column(Uuid, ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=utcnow)

    # Relationships
    client = relationship("Client")
    quote = relationship("Quote")
    items = relationship("InvoiceItem", back_populates="invoice", cascade="all, delete-orphan",
                         order_by="InvoiceItem.position")

    __table_args__ = (
        UniqueConstraint('tenant_id', 'number', name='uq_invoice_number_per_tenant'),
    )

    def __repr__(self):
        return f"<Invoice(id={self.id}, number='{self.number}', status={self.status})>"


class InvoiceItem(Base):
    """Line of an invoice."""
    __tablename__ = "invoice_items"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    invoice_id = Column(Uuid, ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False)
    description = Column(Text, nullable=False)
    quantity = Column(Numeric(10, 2), nullable=False)
    unit_price = Column(Numeric(12, 2), nullable=False)
    tax_rate = Column(Numeric(5, 2), nullable=False, default=0)
    subtotal = Column(Numeric(12, 2), nullable=False)
    tax_amount = Column(Numeric(12, 2), nullable=False)
    total = Column(Numeric(12, 2), nullable=False)
    position = Column(Integer, nullable=False, default=0)

    invoice = relationship("Invoice", back_populates="items")


class Chat(Base):
    """Internal conversation, optionally attached to a project."""
    __tablename__ = "chats"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    tenant_id = Column(Uuid, ForeignKey("tenants.id"), nullable=False)
    project_id = Column(Uuid, ForeignKey("projects.id"), nullable=True)
    name = Column(String(255), nullable=False)
    created_by_id = Column(Uuid, ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    messages = relationship("ChatMessage", back_populates="chat", cascade="all, delete-orphan")


class ChatMessage(Base):
    """Message in a chat; (created_at, id) is the polling cursor order."""
    __tablename__ = "chat_messages"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    chat_id = Column(Uuid, ForeignKey("chats.id", ondelete="CASCADE"), nullable=False)
    sender_id = Column(Uuid, ForeignKey("users.id"), nullable=False)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    chat = relationship("Chat", back_populates="messages")
    sender = relationship("User")

    __table_args__ = (
        Index('idx_chat_message_cursor', 'chat_id', 'created_at', 'id'),
    )


class AuditRecord(Base):
    """Append-only trail of mutations and denied attempts."""
    __tablename__ = "audit_records"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    tenant_id = Column(Uuid, nullable=True)
    actor_id = Column(Uuid, nullable=False)
    operation = Column(String(50), nullable=False)
    entity_type = Column(String(100), nullable=False)
    entity_id = Column(String(64), nullable=True)
    snapshot = Column(JSON, nullable=True)
    details = Column(Text, nullable=True)
    timestamp = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        Index('idx_audit_entity', 'entity_type', 'entity_id', 'timestamp'),
        Index('idx_audit_tenant_timestamp', 'tenant_id', 'timestamp'),
    )

    def __repr__(self):
        return f"<AuditRecord(operation='{self.operation}', entity_type='{self.entity_type}', entity_id={self.entity_id})>"


class AuditRecordImmutable(Exception):
    """Raised when code tries to change or remove an audit record."""


@event.listens_for(AuditRecord, "before_update")
def _reject_audit_update(mapper, connection, target):
    raise AuditRecordImmutable("Audit records are append-only")


@event.listens_for(AuditRecord, "before_delete")
def _reject_audit_delete(mapper, connection, target):
    raise AuditRecordImmutable("Audit records are append-only")
