"""City, district and ward reference data."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.api.v1.auth import require_admin
from storefront.api.v1.guards import by_primary_key, require_entity
from storefront.core.database import get_db
from storefront.models import City, District, Ward
from storefront.schemas.auth import CurrentUser
from storefront.schemas.geo import CityOut, DistrictOut, GeoUpdateRequest, WardOut

logger = logging.getLogger(__name__)
router = APIRouter()

existing_city = require_entity(by_primary_key(City), "City not found")
existing_district = require_entity(by_primary_key(District), "District not found")
existing_ward = require_entity(by_primary_key(Ward), "Ward not found")


def _rename(db: Session, entity: City | District | Ward, name: str, admin: CurrentUser) -> None:
    entity.name = name
    db.commit()
    db.refresh(entity)
    logger.info(
        "Reference data renamed",
        extra={"table": entity.__tablename__, "entity_id": entity.id, "admin_id": admin.id},
    )


@router.get("/cities", response_model=list[CityOut])
def list_cities(db: Annotated[Session, Depends(get_db)]) -> list[City]:
    return db.query(City).order_by(City.code).all()


@router.get("/cities/{entity_id}", response_model=CityOut)
def get_city(city: Annotated[City, Depends(existing_city)]) -> City:
    return city


@router.put("/cities/{entity_id}", response_model=CityOut)
def update_city(
    body: GeoUpdateRequest,
    admin: Annotated[CurrentUser, Depends(require_admin)],
    city: Annotated[City, Depends(existing_city)],
    db: Annotated[Session, Depends(get_db)],
) -> City:
    _rename(db, city, body.name, admin)
    return city


@router.get("/districts", response_model=list[DistrictOut])
def list_districts(
    db: Annotated[Session, Depends(get_db)],
    city_code: int | None = None,
) -> list[District]:
    query = db.query(District)
    if city_code is not None:
        query = query.filter(District.city_code == city_code)
    return query.order_by(District.code).all()


@router.get("/districts/{entity_id}", response_model=DistrictOut)
def get_district(district: Annotated[District, Depends(existing_district)]) -> District:
    return district


@router.put("/districts/{entity_id}", response_model=DistrictOut)
def update_district(
    body: GeoUpdateRequest,
    admin: Annotated[CurrentUser, Depends(require_admin)],
    district: Annotated[District, Depends(existing_district)],
    db: Annotated[Session, Depends(get_db)],
) -> District:
    _rename(db, district, body.name, admin)
    return district


@router.get("/wards", response_model=list[WardOut])
def list_wards(
    db: Annotated[Session, Depends(get_db)],
    district_code: int | None = None,
) -> list[Ward]:
    query = db.query(Ward)
    if district_code is not None:
        query = query.filter(Ward.district_code == district_code)
    return query.order_by(Ward.code).all()


@router.get("/wards/{entity_id}", response_model=WardOut)
def get_ward(ward: Annotated[Ward, Depends(existing_ward)]) -> Ward:
    return ward


@router.put("/wards/{entity_id}", response_model=WardOut)
def update_ward(
    body: GeoUpdateRequest,
    admin: Annotated[CurrentUser, Depends(require_admin)],
    ward: Annotated[Ward, Depends(existing_ward)],
    db: Annotated[Session, Depends(get_db)],
) -> Ward:
    _rename(db, ward, body.name, admin)
    return ward
