from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship

from app.database import Base


class Company(Base):
    __tablename__ = "companies"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), unique=True, index=True, nullable=False)
    industry = Column(String(255), nullable=False)
    location = Column(String(255), nullable=False)

    employers = relationship(
        "Employer", back_populates="company", cascade="all, delete-orphan", passive_deletes=True
    )
    jobs = relationship(
        "Job", back_populates="company", cascade="all, delete-orphan", passive_deletes=True
    )
