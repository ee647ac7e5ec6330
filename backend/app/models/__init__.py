from .generated import Base, Bookings, PromoCodes, Services

__all__ = ["Base", "Bookings", "PromoCodes", "Services"]
