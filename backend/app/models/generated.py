from sqlalchemy import Column, Float, ForeignKey, Integer, Text, text

from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()
metadata = Base.metadata


class Services(Base):
    __tablename__ = 'services'

    name = Column(Text, nullable=False)
    price = Column(Float, nullable=False, server_default=text('0'))
    buffer_min = Column(Integer, nullable=False, server_default=text('0'))
    max_daily_bookings = Column(Integer, nullable=False, server_default=text('0'))  # 0 = unlimited
    min_advance_hours = Column(Integer, nullable=False, server_default=text('0'))
    is_active = Column(Integer, nullable=False, server_default=text('1'))
    booking_enabled = Column(Integer, nullable=False, server_default=text('1'))
    id = Column(Integer, primary_key=True)
    duration_min = Column(Integer)
    advance_booking_days = Column(Integer)  # NULL = no upper bound
    business_hours = Column(Text)  # JSON, see services.slots.business_hours
    blackout_dates = Column(Text, nullable=False, server_default=text("'[]'"))  # JSON list of dates
    currency = Column(Text)
    description = Column(Text)

    bookings = relationship('Bookings', back_populates='service')
    promo_codes = relationship('PromoCodes', back_populates='service')


class Bookings(Base):
    __tablename__ = 'bookings'

    service_id = Column(ForeignKey('services.id', ondelete='CASCADE'), nullable=False)
    date_start = Column(Text, nullable=False)
    duration_minutes = Column(Integer, nullable=False)
    status = Column(Text, nullable=False, server_default=text("'pending'"))
    created_at = Column(Text, nullable=False, server_default=text('CURRENT_TIMESTAMP'))
    id = Column(Integer, primary_key=True)
    date_end = Column(Text)  # NULL = date_start + duration_minutes
    team_member_id = Column(Integer)
    notes = Column(Text)

    service = relationship('Services', back_populates='bookings')


class PromoCodes(Base):
    __tablename__ = 'promo_codes'

    code = Column(Text, nullable=False)
    is_active = Column(Integer, nullable=False, server_default=text('1'))
    id = Column(Integer, primary_key=True)
    service_id = Column(ForeignKey('services.id', ondelete='CASCADE'))  # NULL = promo for all services
    discount_percent = Column(Float)
    amount_minor = Column(Integer)  # fixed discount in minor units
    label = Column(Text)
    valid_from = Column(Text)
    valid_to = Column(Text)

    service = relationship('Services', back_populates='promo_codes')
