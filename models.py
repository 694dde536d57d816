from sqlalchemy.orm import relationship
from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    func,
)
from database import Base


class User(Base):
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("gender IN ('m', 'f', 'o')", name="ck_users_gender"),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password = Column(Text, nullable=False)  # bcrypt hash, never the plaintext
    full_name = Column(String(255), nullable=False)
    signup_type = Column(String(1), nullable=False, default="e")
    gender = Column(String(1), nullable=False)
    mobile_no = Column(String(20), nullable=True)
    is_mobile_verified = Column(Boolean, nullable=False, default=False)
    is_email_verified = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    company = relationship(
        "Company",
        back_populates="owner",
        uselist=False,
        cascade="all, delete-orphan",
    )


class Company(Base):
    __tablename__ = "company_profile"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )
    company_name = Column(Text, nullable=False)
    address = Column(Text, nullable=True)
    city = Column(String(50), nullable=True)
    state = Column(String(50), nullable=True)
    country = Column(String(50), nullable=True)
    postal_code = Column(String(20), nullable=True)
    website = Column(Text, nullable=True)
    logo_url = Column(Text, nullable=True)
    logo_public_id = Column(Text, nullable=True)
    banner_url = Column(Text, nullable=True)
    banner_public_id = Column(Text, nullable=True)
    industry = Column(Text, nullable=True)
    founded_date = Column(Date, nullable=True)
    description = Column(Text, nullable=True)
    social_links = Column(Text, nullable=True)  # JSON text: [{"platform": ..., "url": ...}]
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    owner = relationship("User", back_populates="company")
    jobs = relationship(
        "Job",
        back_populates="company",
        cascade="all, delete-orphan",
        order_by="Job.created_at.desc()",
    )


class Job(Base):
    __tablename__ = "jobs"
    __table_args__ = (
        CheckConstraint("status IN ('pending', 'active', 'closed')", name="ck_jobs_status"),
    )

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(
        Integer,
        ForeignKey("company_profile.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title = Column(String(255), nullable=False)
    department = Column(String(100), nullable=True)
    location = Column(String(255), nullable=False)
    employment_type = Column(String(50), nullable=False, index=True)
    experience_level = Column(String(50), nullable=True)
    salary_min = Column(Integer, nullable=True)
    salary_max = Column(Integer, nullable=True)
    description = Column(Text, nullable=False)
    requirements = Column(Text, nullable=True)
    responsibilities = Column(Text, nullable=True)
    skills = Column(Text, nullable=True)  # JSON text list
    is_remote = Column(Boolean, nullable=False, default=False)
    is_urgent = Column(Boolean, nullable=False, default=False)
    status = Column(String(20), nullable=False, default="pending", index=True)
    applicants_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    company = relationship("Company", back_populates="jobs")
