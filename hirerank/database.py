"""
Database schema and connection management.

Uses SQLite with SQLAlchemy for jobs, candidates, resumes and applications.
"""

from datetime import datetime
from pathlib import Path
from sqlalchemy import (
    create_engine, Column, Integer, String, Text, Numeric, Boolean, DateTime,
    ForeignKey, UniqueConstraint,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker

Base = declarative_base()


class Job(Base):
    """Job posting model. Read-only to the scoring engine."""

    __tablename__ = "jobs"

    id = Column(Integer, primary_key=True)
    title = Column(String, nullable=False)
    required_skills = Column(Text)  # Comma-separated
    experience_min = Column(Integer)
    experience_max = Column(Integer)
    created_at = Column(DateTime, nullable=False, default=datetime.now)

    applications = relationship("Application", back_populates="job")


class Candidate(Base):
    """Candidate profile model. Read-only to the scoring engine."""

    __tablename__ = "candidates"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    skills = Column(Text)  # Comma-separated
    total_experience = Column(Numeric(4, 2))  # Years
    education = Column(String)
    created_at = Column(DateTime, nullable=False, default=datetime.now)

    resumes = relationship("Resume", back_populates="candidate", order_by="Resume.id")
    applications = relationship("Application", back_populates="candidate")

    @property
    def primary_resume(self):
        """The resume flagged primary, else the first uploaded one, else None."""
        for resume in self.resumes:
            if resume.is_primary:
                return resume
        return self.resumes[0] if self.resumes else None


class Resume(Base):
    """Uploaded resume with text already extracted upstream."""

    __tablename__ = "resumes"

    id = Column(Integer, primary_key=True)
    candidate_id = Column(Integer, ForeignKey("candidates.id"), nullable=False)
    file_name = Column(String)
    parsed_text = Column(Text)
    extracted_skills = Column(Text)  # Comma-separated
    extracted_education = Column(Text)
    is_primary = Column(Boolean, nullable=False, default=False)
    uploaded_at = Column(DateTime, nullable=False, default=datetime.now)

    candidate = relationship("Candidate", back_populates="resumes")


class Application(Base):
    """A candidate's application to a job; the unit that gets scored."""

    __tablename__ = "applications"
    __table_args__ = (UniqueConstraint("job_id", "candidate_id"),)

    id = Column(Integer, primary_key=True)
    job_id = Column(Integer, ForeignKey("jobs.id"), nullable=False)
    candidate_id = Column(Integer, ForeignKey("candidates.id"), nullable=False)
    resume_id = Column(Integer, ForeignKey("resumes.id"))
    ai_score = Column(Numeric(5, 2))  # 0.00 to 100.00, null until scored
    ai_feedback = Column(Text)
    applied_at = Column(DateTime)  # Set at intake; may be unknown for imported records
    updated_at = Column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)

    job = relationship("Job", back_populates="applications")
    candidate = relationship("Candidate", back_populates="applications")
    resume = relationship("Resume")


def init_database(db_path: Path) -> None:
    """
    Initialize database and create tables.

    Args:
        db_path: Path to SQLite database file
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)
    engine = create_engine(f"sqlite:///{db_path}")
    Base.metadata.create_all(engine)


def get_session(db_path: Path):
    """
    Get database session.

    Args:
        db_path: Path to SQLite database file

    Returns:
        SQLAlchemy session
    """
    engine = create_engine(f"sqlite:///{db_path}")
    Session = sessionmaker(bind=engine)
    return Session()
