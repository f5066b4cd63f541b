"""SQLAlchemy ORM models for accounts, transaction history and fraud analysis records"""

import uuid
from sqlalchemy import Column, BigInteger, Boolean, Float, DateTime, Text, JSON, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class UserAccount(Base):
    """Account attributes read for profile bootstrap and written by enforcement flags"""

    __tablename__ = "user_account"

    id = Column(Text, primary_key=True)
    kyc_status = Column(Text, nullable=True)
    fraud_suspected = Column(Boolean, nullable=False, default=False)
    requires_review = Column(Boolean, nullable=False, default=False)
    last_flagged_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class PaymentTransaction(Base):
    """Transaction ledger; only confirmed rows count as history"""

    __tablename__ = "payment_transaction"

    id = Column(Text, primary_key=True)
    user_id = Column(Text, nullable=False, index=True)
    amount = Column(BigInteger, nullable=False)
    currency = Column(Text, nullable=False, default="EUR")
    status = Column(Text, nullable=False, default="confirmed")
    country = Column(Text, nullable=True)
    payment_method = Column(Text, nullable=True)
    payment_fingerprint = Column(Text, nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, index=True)


class UserRiskProfileRecord(Base):
    """Persisted per-user risk baseline"""

    __tablename__ = "user_risk_profile"

    user_id = Column(Text, primary_key=True)
    risk_score = Column(Float, nullable=False)
    risk_level = Column(Text, nullable=False)
    factors = Column(JSON, nullable=False)
    flags = Column(JSON, nullable=False, default=list)
    historical_analysis = Column(JSON, nullable=False)
    last_updated = Column(DateTime(timezone=True), nullable=False)


class FraudAnalysisRecord(Base):
    """Write-once audit record of an analysis result"""

    __tablename__ = "fraud_analysis"

    transaction_id = Column(Text, primary_key=True)
    user_id = Column(Text, nullable=False, index=True)
    risk_score = Column(Float, nullable=False)
    risk_level = Column(Text, nullable=False)
    recommendation = Column(Text, nullable=False)
    confidence = Column(Float, nullable=False)
    indicators = Column(JSON, nullable=False)
    model_version = Column(Text, nullable=False)
    processing_time_ms = Column(Float, nullable=False)
    analyzed_at = Column(DateTime(timezone=True), nullable=False, index=True)


class BlockedTransaction(Base):
    """Block record consumed by the downstream enforcement service"""

    __tablename__ = "blocked_transaction"

    transaction_id = Column(Text, primary_key=True)
    user_id = Column(Text, nullable=False, index=True)
    reason = Column(Text, nullable=False)
    risk_score = Column(Float, nullable=False)
    indicator_types = Column(JSON, nullable=False)
    status = Column(Text, nullable=False, default="blocked")
    created_at = Column(DateTime(timezone=True), nullable=False)


class UserDevice(Base):
    """Devices previously seen for a user"""

    __tablename__ = "user_device"
    __table_args__ = (UniqueConstraint("user_id", "fingerprint"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    fingerprint = Column(Text, nullable=False)
    last_seen = Column(DateTime(timezone=True), nullable=False)
