from sqlalchemy import Column,String,Integer,DateTime
from sqlalchemy.sql import func
from app.core.database import Base
from sqlalchemy.orm import relationship
from sqlalchemy import Enum
import enum

class UserRole(str, enum.Enum):
    visitor = "visitor"
    trip_owner = "trip_owner"
    admin = "admin"

class User(Base):
    __tablename__ = "users"

    id = Column(Integer,primary_key=True,index=True)
    name = Column(String, nullable=False)
    email = Column(String,unique=True,index=True,nullable=False)
    hashed_password = Column(String, nullable=False)
    role = Column(Enum(UserRole, name="userrole"), nullable=False, default=UserRole.visitor)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Trips, their points and preference links go with the user at the database level.
    trips = relationship("Trip", back_populates="owner", passive_deletes=True)
    preferences = relationship("Preference", secondary="user_preferences", viewonly=True)
