"""ORM models for geographic reference data (city > district > ward)."""

from sqlalchemy import Column, ForeignKey, Integer, String

from storefront.models.base import Base


class City(Base):
    __tablename__ = "cities"

    id = Column(Integer, primary_key=True, autoincrement=True)
    code = Column(Integer, nullable=False, unique=True, index=True)
    name = Column(String(255), nullable=False)


class District(Base):
    __tablename__ = "districts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    code = Column(Integer, nullable=False, unique=True, index=True)
    name = Column(String(255), nullable=False)
    city_code = Column(Integer, ForeignKey("cities.code"), nullable=False, index=True)


class Ward(Base):
    __tablename__ = "wards"

    id = Column(Integer, primary_key=True, autoincrement=True)
    code = Column(Integer, nullable=False, unique=True, index=True)
    name = Column(String(255), nullable=False)
    district_code = Column(
        Integer, ForeignKey("districts.code"), nullable=False, index=True
    )
