from sqlalchemy import Column, Integer, String, Text, Float, ForeignKey, DateTime, Table, func
from app.core.database import Base
from sqlalchemy.orm import relationship

trip_preferences = Table(
    "trip_preferences",
    Base.metadata,
    Column("trip_id", Integer, ForeignKey("trips.id", ondelete="CASCADE"), primary_key=True),
    Column("preference_id", Integer, ForeignKey("preferences.id", ondelete="CASCADE"), primary_key=True),
)

class Trip(Base):
    __tablename__ = "trips"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=False, default="")
    cover_image = Column(String, nullable=False, default="")
    price = Column(Float, nullable=False, index=True)
    duration = Column(Integer, nullable=False)

    start_latitude = Column(Float, nullable=False)
    start_longitude = Column(Float, nullable=False)
    end_latitude = Column(Float, nullable=False)
    end_longitude = Column(Float, nullable=False)

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    owner = relationship("User", back_populates="trips")

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Points live and die with their trip; images outlive it with trip_id cleared.
    points = relationship("TripPoint", back_populates="trip", cascade="all, delete-orphan", order_by="TripPoint.id")
    images = relationship("Image", back_populates="trip", order_by="Image.id")
    preferences = relationship("Preference", secondary=trip_preferences, back_populates="trips", order_by="Preference.id")


class TripPoint(Base):
    __tablename__ = "trip_points"

    id = Column(Integer, primary_key=True, index=True)
    trip_id = Column(Integer, ForeignKey("trips.id", ondelete="CASCADE"), nullable=False, index=True)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)

    trip = relationship("Trip", back_populates="points")
